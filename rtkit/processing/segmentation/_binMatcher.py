__all__ = ['BinMatcher']

import logging
from typing import Optional, Sequence

import numpy as np

from rtkit._exceptions import InvalidArgumentError, UnsupportedOperationError
from rtkit.data.images._binImage import BinImage
from rtkit.data.images._binVolume import BinVolume

logger = logging.getLogger(__name__)


class BinMatcher:
    """
    Comparison of binary volumes (segmentations of the same structure by
    several raters) against each other or against a reference volume.

    Parameters
    ----------
    volumes: list of BinVolume
        Segmentations to compare.
    master: BinVolume
        Reference segmentation the volumes are scored against.
    """
    def __init__(self, volumes: Optional[Sequence[BinVolume]] = None, master: Optional[BinVolume] = None):
        volumes = list(volumes) if volumes is not None else []
        for volume in volumes:
            if not isinstance(volume, BinVolume):
                raise InvalidArgumentError(f"Invalid argument 'volumes'. Expected only BinVolume instances, got {type(volume).__name__}.")

        self._volumes = volumes
        self._master = None
        if master is not None:
            self.master = master

    def __eq__(self, other):
        if not isinstance(other, BinMatcher):
            return NotImplemented
        return self._volumes == other._volumes and self._master is other._master

    __hash__ = None

    @property
    def volumes(self) -> Sequence[BinVolume]:
        return list(self._volumes)

    @property
    def master(self) -> Optional[BinVolume]:
        return self._master

    @master.setter
    def master(self, volume: BinVolume):
        if not isinstance(volume, BinVolume):
            raise InvalidArgumentError(f"Invalid argument 'volume'. Expected BinVolume, got {type(volume).__name__}.")
        self._master = volume

    def add(self, volume: BinVolume):
        if not isinstance(volume, BinVolume):
            raise InvalidArgumentError(f"Invalid argument 'volume'. Expected BinVolume, got {type(volume).__name__}.")
        self._volumes.append(volume)

    def arrays(self, sortSlices: bool = True) -> list:
        """3D arrays of the volumes, master excluded."""
        return [volume.imageArray(sortSlices) for volume in self._volumes]

    def bySensitivity(self) -> Sequence[BinVolume]:
        """Volumes by decreasing sensitivity. Unscored volumes come last."""
        return sorted(self._volumes, key=lambda volume: self._scoreKey(volume.sensitivity), reverse=True)

    def bySpecificity(self) -> Sequence[BinVolume]:
        """Volumes by decreasing specificity. Unscored volumes come last."""
        return sorted(self._volumes, key=lambda volume: self._scoreKey(volume.specificity), reverse=True)

    def fillBlanks(self):
        """
        Give every volume (master included) a BinImage for each image
        referenced by any of them. Missing slices are added as empty images so
        the volumes can be compared slice by slice.
        """
        if not self._volumes:
            return

        volumes = self._allVolumes()
        images = []
        for volume in volumes:
            for image in volume.images:
                if not any(image is known for known in images):
                    images.append(image)

        added = 0
        for image in images:
            for volume in volumes:
                if not any(image is known for known in volume.images):
                    volume.add(BinImage(np.zeros(image.gridSize, dtype=np.uint8), image))
                    added += 1

        if added:
            logger.debug('Added %d empty slice(s) to align %d volume(s)', added, len(volumes))

    def sortVolumes(self):
        """
        Order the slices of every volume (master excluded) like the slices of
        the first volume, matching them by their image.
        """
        if len(self._volumes) < 2:
            return

        frames = [volume.frames for volume in self._volumes]
        if len(set(frames)) > 1:
            raise UnsupportedOperationError(f"All volumes must have the same number of slices, got {frames}.")

        reference = self._volumes[0].images
        for volume in self._volumes[1:]:
            images = volume.images
            order = []
            for image in reference:
                matches = [i for i, candidate in enumerate(images) if candidate is image]
                if not matches:
                    raise UnsupportedOperationError(f"Volume '{volume.name}' has no slice for an image of volume '{self._volumes[0].name}'.")
                order.append(matches[0])
            volume.reorderImages(order)

    def scoreDice(self):
        """Store the Dice coefficient of each volume against the master in its dice attribute."""
        if self._master is None:
            return

        master = self._masterArray()
        masterPositives = np.count_nonzero(master == 1)
        for volume in self._volumes:
            array = self._volumeArray(volume, master.shape)
            volumePositives = np.count_nonzero(array == 1)
            common = np.count_nonzero(master[array == 1] == 1)
            total = masterPositives + volumePositives
            # two empty segmentations agree completely
            volume.dice = 2.0 * common / total if total else 1.0

    def scoreSensitivitySpecificity(self):
        """
        Store the sensitivity and specificity of each volume against the
        master. A score is None when the master has no positive (or no
        negative) voxel.
        """
        if self._master is None:
            return

        master = self._masterArray()
        positives = master == 1
        negatives = master == 0
        for volume in self._volumes:
            array = self._volumeArray(volume, master.shape)
            volume.sensitivity = float(np.mean(array[positives] == 1)) if positives.any() else None
            volume.specificity = float(np.mean(array[negatives] == 0)) if negatives.any() else None

    def _allVolumes(self) -> list:
        if self._master is None:
            return list(self._volumes)
        return self._volumes + [self._master]

    def _masterArray(self) -> np.ndarray:
        array = self._master.imageArray()
        if array is None:
            raise InvalidArgumentError("Invalid argument 'master'. The master volume has no slices.")
        return array

    @staticmethod
    def _volumeArray(volume, shape) -> np.ndarray:
        array = volume.imageArray()
        if array is None or array.shape != shape:
            got = None if array is None else array.shape
            raise InvalidArgumentError(f"Invalid argument 'volumes'. Expected volume '{volume.name}' of shape {shape}, got {got}.")
        return array

    @staticmethod
    def _scoreKey(score):
        return -np.inf if score is None else score
