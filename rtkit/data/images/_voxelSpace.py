__all__ = ['VoxelSpace']

import numbers
from typing import Sequence

import numpy as np

from rtkit._exceptions import InvalidArgumentError
from rtkit.data._coordinate import Coordinate


class VoxelSpace:
    """
    Regular 3D grid of values used for ray tracing.

    pos is the centre of voxel (0, 0, 0); the first grid plane of each axis
    therefore lies half a voxel before it. imageArray is indexed [i, j, k]
    and the linear voxel index is nx*ny*k + nx*j + i.

    The grid geometry is fixed at creation. Voxel values can be edited in
    place through imageArray.
    """
    def __init__(self, imageArray, spacing: Sequence[float], pos: Coordinate):
        self._imageArray = self._validatedArray(imageArray)
        self._spacing = self._validatedSpacing(spacing)
        self._pos = self._validatedPos(pos)

    @classmethod
    def create(cls, columns: int, rows: int, slices: int, deltaX, deltaY, deltaZ, pos: Coordinate):
        for name, value in (('columns', columns), ('rows', rows), ('slices', slices)):
            if not isinstance(value, (int, np.integer)) or value < 1:
                raise InvalidArgumentError(f"Invalid argument '{name}'. Expected a positive integer, got {value}.")
        return cls(np.zeros((columns, rows, slices)), (deltaX, deltaY, deltaZ), pos)

    def __eq__(self, other):
        if not isinstance(other, VoxelSpace):
            return NotImplemented
        return (np.array_equal(self._spacing, other._spacing) and self._pos == other._pos and
                np.array_equal(self._imageArray, other._imageArray))

    __hash__ = None

    def __str__(self):
        return 'VoxelSpace ' + 'x'.join(str(n) for n in self.gridSize) + '\n'

    @property
    def imageArray(self) -> np.ndarray:
        return self._imageArray

    @property
    def spacing(self) -> np.ndarray:
        return self._spacing.copy()

    @property
    def pos(self) -> Coordinate:
        return self._pos

    @property
    def gridSize(self) -> np.ndarray:
        return np.array(self._imageArray.shape)

    @property
    def nx(self) -> int:
        return self._imageArray.shape[0]

    @property
    def ny(self) -> int:
        return self._imageArray.shape[1]

    @property
    def nz(self) -> int:
        return self._imageArray.shape[2]

    columns = nx
    rows = ny
    slices = nz

    @property
    def deltaX(self) -> float:
        return float(self._spacing[0])

    @property
    def deltaY(self) -> float:
        return float(self._spacing[1])

    @property
    def deltaZ(self) -> float:
        return float(self._spacing[2])

    def linearIndex(self, i: int, j: int, k: int) -> int:
        return self.nx * self.ny * k + self.nx * j + i

    def valuesAtIndices(self, indices) -> np.ndarray:
        """Values at linear voxel indices."""
        return self._imageArray.ravel(order='F')[np.asarray(indices, dtype=int)]

    @staticmethod
    def _validatedArray(array) -> np.ndarray:
        array = np.asarray(array, dtype=float)
        if array.ndim != 3:
            raise InvalidArgumentError(f"Invalid argument 'imageArray'. Expected a 3D array, got {array.ndim} dimensions.")
        return array

    @staticmethod
    def _validatedSpacing(spacing) -> np.ndarray:
        if len(spacing) != 3:
            raise InvalidArgumentError(f"Invalid argument 'spacing'. Expected 3 elements, got {len(spacing)}.")
        for value in spacing:
            if not isinstance(value, numbers.Real) or not value > 0:
                raise InvalidArgumentError(f"Invalid argument 'spacing'. Expected positive numbers, got {value}.")
        return np.array(spacing, dtype=float)

    @staticmethod
    def _validatedPos(pos) -> Coordinate:
        if not isinstance(pos, Coordinate):
            raise InvalidArgumentError(f"Invalid argument 'pos'. Expected Coordinate, got {type(pos).__name__}.")
        return pos
