__all__ = ['Staple', 'solveStaple']

import logging
from typing import Optional

import numpy as np

from rtkit._exceptions import InvalidArgumentError
from rtkit._programSettings import ProgramSettings
from rtkit.data.images._binImage import BinImage
from rtkit.data.images._binVolume import BinVolume
from rtkit.processing.segmentation._binMatcher import BinMatcher

logger = logging.getLogger(__name__)


class Staple:
    """
    Simultaneous Truth and Performance Level Estimation.

    Fuses the segmentations of several raters into an estimate of the hidden
    true segmentation while estimating the sensitivity (p) and specificity (q)
    of each rater, by expectation-maximization (Warfield, Zou and Wells, 2004).

    Parameters
    ----------
    binMatcher: BinMatcher
        Holds the rater volumes. Its volumes are aligned slice by slice
        (fillBlanks, sortVolumes) and, once solved, its master becomes the
        estimated true segmentation.
    maxIterations: int
        Upper bound on the number of EM iterations. Defaults to the configured value.
    """
    def __init__(self, binMatcher: BinMatcher, maxIterations: Optional[int] = None):
        if not isinstance(binMatcher, BinMatcher):
            raise InvalidArgumentError(f"Invalid argument 'binMatcher'. Expected BinMatcher, got {type(binMatcher).__name__}.")
        if len(binMatcher.volumes) < 2:
            raise InvalidArgumentError(f"Invalid argument 'binMatcher'. Expected at least 2 volumes, got {len(binMatcher.volumes)}.")

        for volume in binMatcher.volumes:
            if volume.frames == 0:
                raise InvalidArgumentError(f"Invalid argument 'binMatcher'. Volume '{volume.name}' has no slices.")
        self._checkUnique([volume.columns for volume in binMatcher.volumes], 'columns')
        self._checkUnique([volume.rows for volume in binMatcher.volumes], 'rows')

        binMatcher.fillBlanks()
        binMatcher.sortVolumes()
        volumes = binMatcher.arrays(sortSlices=False)
        self._checkUnique([volume.shape[2] for volume in volumes], 'frames')

        settings = ProgramSettings()
        self._bm = binMatcher
        self._volumes = volumes
        self._originalShape = volumes[0].shape
        self._originalIndices = None
        self.maxIterations = settings.stapleMaxIterations if maxIterations is None else maxIterations
        self.initialPerformance = settings.stapleInitialPerformance
        self.tolerance = settings.stapleTolerance

        self._decisions = None
        self._p = None
        self._q = None
        self._weights = None
        self._trueSegmentation = None
        self.iterations = 0

    def __eq__(self, other):
        if not isinstance(other, Staple):
            return NotImplemented
        return (self.maxIterations == other.maxIterations and len(self._volumes) == len(other._volumes) and
                all(np.array_equal(a, b) for a, b in zip(self._volumes, other._volumes)))

    __hash__ = None

    @property
    def maxIterations(self) -> int:
        return self._maxIterations

    @maxIterations.setter
    def maxIterations(self, value):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
            raise InvalidArgumentError(f"Invalid argument 'maxIterations'. Expected a positive integer, got {value}.")
        self._maxIterations = int(value)

    @property
    def binMatcher(self) -> BinMatcher:
        return self._bm

    @property
    def decisions(self) -> Optional[np.ndarray]:
        """Rater decisions, one row per voxel and one column per rater."""
        return self._decisions

    @property
    def n(self) -> int:
        return int(np.prod(self._volumes[0].shape))

    @property
    def r(self) -> int:
        return len(self._volumes)

    @property
    def vectors(self) -> list:
        return [volume.ravel() for volume in self._volumes]

    @property
    def p(self) -> Optional[np.ndarray]:
        return self._p

    @property
    def q(self) -> Optional[np.ndarray]:
        return self._q

    @property
    def phi(self) -> Optional[np.ndarray]:
        """Sensitivities (first row) and specificities (second row), shape (2, r)."""
        if self._p is None:
            return None
        return np.vstack((self._p, self._q))

    @property
    def weights(self) -> Optional[np.ndarray]:
        """Probability of each (retained) voxel belonging to the true segmentation."""
        return self._weights

    @property
    def trueSegmentation(self) -> Optional[np.ndarray]:
        return self._trueSegmentation

    @property
    def probabilityMap(self) -> Optional[np.ndarray]:
        """The weights arranged in the original volume shape. Removed voxels are 0."""
        if self._weights is None:
            return None
        return self._toOriginalShape(self._weights, float)

    def removeEmptyIndices(self):
        """
        Drop, along each axis, every index (column, row or slice) where no
        rater marked a positive voxel. This shrinks the problem and sharpens
        the specificity estimates. The true segmentation is still returned in
        the original shape.
        """
        volumes = self._volumes
        keptIndices = []
        for axis in range(volumes[0].ndim):
            otherAxes = tuple(a for a in range(volumes[0].ndim) if a != axis)
            segmented = np.zeros(volumes[0].shape[axis], dtype=bool)
            for volume in volumes:
                segmented |= volume.any(axis=otherAxes)
            keptIndices.append(np.flatnonzero(segmented))

        if all(len(indices) == size for indices, size in zip(keptIndices, self._originalShape)):
            return

        self._originalIndices = keptIndices
        self._volumes = [volume[np.ix_(*keptIndices)] for volume in volumes]
        logger.debug('Reduced STAPLE volumes from %s to %s', self._originalShape, self._volumes[0].shape)

    def solve(self):
        """
        Run the EM iterations.

        Stops after maxIterations or as soon as no weight changes by more than
        the tolerance. Populates p, q, phi, weights and trueSegmentation, makes
        the true segmentation the master of the bin matcher and stores each
        rater's sensitivity and specificity on its volume.
        """
        decisions = np.stack([volume.ravel() for volume in self._volumes], axis=1).astype(float)
        n, r = decisions.shape
        self._decisions = decisions.astype(np.uint8)

        p = np.full(r, self.initialPerformance)
        q = np.full(r, self.initialPerformance)
        weights = decisions.mean(axis=1)
        # prior probability of a voxel being in the true segmentation
        prior = decisions.mean()

        positive = decisions == 1
        negative = ~positive
        k = 0
        while k < self._maxIterations:
            previous = weights

            # E-step
            a = prior * np.prod(np.where(positive, p, 1.0 - p), axis=1)
            b = (1.0 - prior) * np.prod(np.where(negative, q, 1.0 - q), axis=1)
            total = a + b
            weights = np.divide(a, total, out=np.zeros(n), where=total > 0)

            # M-step
            weightSum = weights.sum()
            complementSum = (1.0 - weights).sum()
            p = (weights @ decisions) / weightSum if weightSum > 0 else np.zeros(r)
            q = ((1.0 - weights) @ (1.0 - decisions)) / complementSum if complementSum > 0 else np.ones(r)

            k += 1
            if np.max(np.abs(weights - previous)) <= self.tolerance:
                break

        self.iterations = k
        self._p = p
        self._q = q
        self._weights = weights
        self._trueSegmentation = self._toOriginalShape((weights >= 0.5).astype(np.uint8), np.uint8)
        logger.info('STAPLE solved for %d rater(s) and %d voxel(s) in %d iteration(s)', r, n, k)

        self._updateBinMatcher()

    def _toOriginalShape(self, vector, dtype) -> np.ndarray:
        reduced = vector.reshape(self._volumes[0].shape)
        if self._originalIndices is None:
            return reduced.astype(dtype)
        full = np.zeros(self._originalShape, dtype=dtype)
        full[np.ix_(*self._originalIndices)] = reduced
        return full

    def _updateBinMatcher(self):
        reference = self._bm.volumes[0].binImages
        staple = BinVolume(name='STAPLE')
        for k, binImage in enumerate(reference):
            staple.add(BinImage(np.ascontiguousarray(self._trueSegmentation[:, :, k]), binImage.image))
        self._bm.master = staple

        for volume, sensitivity, specificity in zip(self._bm.volumes, self._p, self._q):
            volume.sensitivity = float(sensitivity)
            volume.specificity = float(specificity)

    @staticmethod
    def _checkUnique(values, name):
        if len(set(values)) != 1:
            raise InvalidArgumentError(f"Invalid argument 'binMatcher'. Expected volumes having the same number of {name}, got {sorted(set(values))}.")


def solveStaple(binMatcher: BinMatcher, maxIterations: Optional[int] = None):
    """
    Fuse the volumes of binMatcher with STAPLE.

    Returns
    -------
    trueSegmentation: np.ndarray
        Estimated segmentation, shape (columns, rows, frames).
    p, q: np.ndarray
        Sensitivity and specificity of each rater.
    """
    staple = Staple(binMatcher, maxIterations)
    staple.solve()
    return staple.trueSegmentation, staple.p, staple.q
