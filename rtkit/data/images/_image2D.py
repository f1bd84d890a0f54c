__all__ = ['Image2D']

import logging
import numbers
from typing import Tuple

import numpy as np

from rtkit._event import Event
from rtkit._exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


class Image2D:
    """
    A 2D slice image and its placement in patient space.

    The image array is indexed [column, row]. The first cosine triple is the
    direction of increasing column index, the second the direction of
    increasing row index.

    Parameters
    ----------
    imageArray: np.ndarray
        Pixel data, shape (columns, rows). May be None when only the geometry is needed.
    origin: sequence of 3 floats
        Position of the centre of pixel (0, 0). The third component is the slice position.
    spacing: sequence of 2 floats
        Column spacing and row spacing in mm.
    cosines: sequence of 6 floats
        Direction cosines (DICOM Image Orientation).
    """
    def __init__(self, imageArray=None, name="2D Image", origin=(0, 0, 0), spacing=(1, 1), cosines=(1, 0, 0, 0, 1, 0), gridSize=None, seriesInstanceUID=""):
        self.dataChangedSignal = Event()

        self.name = name
        self.seriesInstanceUID = seriesInstanceUID
        self.imageArray = imageArray
        if imageArray is None and gridSize is not None:
            self._gridSize = np.array(gridSize, dtype=int)
        else:
            self._gridSize = None

        self.origin = origin
        self.spacing = spacing
        self.cosines = cosines

    def __str__(self):
        gs = self.gridSize
        s = 'Image2D ' + str(gs[0]) + 'x' + str(gs[1]) + '\n'
        return s

    @property
    def imageArray(self) -> np.ndarray:
        return self._imageArray

    @imageArray.setter
    def imageArray(self, array):
        if array is not None:
            array = np.asarray(array)
            if array.ndim != 2:
                raise InvalidArgumentError(f"Invalid argument 'imageArray'. Expected a 2D array, got {array.ndim} dimensions.")
        self._imageArray = array
        self.dataChangedSignal.emit()

    @property
    def origin(self) -> np.ndarray:
        return self._origin

    @origin.setter
    def origin(self, origin):
        origin = np.array(origin, dtype=float)
        if origin.shape != (3,):
            raise InvalidArgumentError(f"Invalid argument 'origin'. Expected 3 elements, got {origin.size}.")
        self._origin = origin
        self.dataChangedSignal.emit()

    @property
    def spacing(self) -> np.ndarray:
        return self._spacing

    @spacing.setter
    def spacing(self, spacing):
        if len(spacing) != 2:
            raise InvalidArgumentError(f"Invalid argument 'spacing'. Expected 2 elements, got {len(spacing)}.")
        for value in spacing:
            if not isinstance(value, numbers.Real) or not value > 0:
                raise InvalidArgumentError(f"Invalid argument 'spacing'. Expected positive numbers, got {value}.")
        self._spacing = np.array(spacing, dtype=float)
        self.dataChangedSignal.emit()

    @property
    def cosines(self) -> np.ndarray:
        return self._cosines

    @cosines.setter
    def cosines(self, cosines):
        if len(cosines) != 6:
            raise InvalidArgumentError(f"Invalid argument 'cosines'. Exactly 6 elements needed, got {len(cosines)}.")
        self._cosines = np.array(cosines, dtype=float)
        self.dataChangedSignal.emit()

    @property
    def gridSize(self) -> np.ndarray:
        if self._imageArray is not None:
            return np.array(self._imageArray.shape)
        if self._gridSize is not None:
            return self._gridSize
        return np.array((0, 0))

    @property
    def columns(self) -> int:
        return int(self.gridSize[0])

    @property
    def rows(self) -> int:
        return int(self.gridSize[1])

    @property
    def columnSpacing(self) -> float:
        return float(self._spacing[0])

    @property
    def rowSpacing(self) -> float:
        return float(self._spacing[1])

    @property
    def slicePosition(self) -> float:
        return float(self._origin[2])

    @property
    def pixelArea(self) -> float:
        return self.columnSpacing * self.rowSpacing

    def coordinatesFromIndices(self, columnIndices, rowIndices) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Convert pixel indices to patient coordinates.

        Parameters
        ----------
        columnIndices: sequence of int
        rowIndices: sequence of int

        Returns
        -------
        x, y, z: np.ndarray
            Coordinates in mm of the given pixels.
        """
        columnIndices = np.asarray(columnIndices, dtype=float)
        rowIndices = np.asarray(rowIndices, dtype=float)
        if columnIndices.shape != rowIndices.shape:
            raise InvalidArgumentError(f"Invalid argument 'rowIndices'. Expected the same length as 'columnIndices' ({columnIndices.size}), got {rowIndices.size}.")

        columnStep = self._cosines[0:3] * self.columnSpacing
        rowStep = self._cosines[3:6] * self.rowSpacing
        points = self._origin[:, np.newaxis] + np.outer(columnStep, columnIndices.ravel()) + np.outer(rowStep, rowIndices.ravel())

        return points[0], points[1], points[2]

    def coordinatesToIndices(self, x, y, z) -> Tuple[np.ndarray, np.ndarray]:
        """
        Convert patient coordinates to the nearest pixel indices.

        The column and row steps span the image plane; the indices are the
        least squares solution of origin + c*columnStep + r*rowStep = (x, y, z),
        which is exact for orthogonal cosines and tolerant of slightly
        non-orthogonal ones.

        Returns
        -------
        columnIndices, rowIndices: np.ndarray of int
        """
        x = np.atleast_1d(np.asarray(x, dtype=float))
        y = np.atleast_1d(np.asarray(y, dtype=float))
        z = np.atleast_1d(np.asarray(z, dtype=float))
        if not (x.shape == y.shape == z.shape):
            raise InvalidArgumentError(f"Invalid arguments 'x', 'y', 'z'. Expected equal lengths, got {x.size}, {y.size}, {z.size}.")

        system = np.column_stack((self._cosines[0:3] * self.columnSpacing, self._cosines[3:6] * self.rowSpacing))
        rhs = np.vstack((x, y, z)) - self._origin[:, np.newaxis]
        solution, _, rank, _ = np.linalg.lstsq(system, rhs, rcond=None)
        if rank < 2:
            raise InvalidArgumentError(f"Invalid argument 'cosines'. The direction cosines {self._cosines.tolist()} do not span a plane.")

        indices = np.rint(solution).astype(int)
        return indices[0], indices[1]

    def indicesGeneralToSpecific(self, indices) -> Tuple[np.ndarray, np.ndarray]:
        indices = np.asarray(indices, dtype=int)
        return indices % self.columns, indices // self.columns

    def indicesSpecificToGeneral(self, columnIndices, rowIndices) -> np.ndarray:
        return np.asarray(columnIndices, dtype=int) + np.asarray(rowIndices, dtype=int) * self.columns
