__all__ = ['PixelSpace']

import logging
import math
import numbers
from typing import Sequence

import numpy as np

from rtkit._exceptions import InvalidArgumentError
from rtkit.data._coordinate import Coordinate

logger = logging.getLogger(__name__)


class PixelSpace:
    """
    Detector plane of a projection image (DRR).

    imageArray is an integer array of shape (columns, rows). The first cosine
    triple is the direction of increasing column index, the second the
    direction of increasing row index.
    """
    def __init__(self, columns: int, rows: int, deltaCol, deltaRow, pos: Coordinate, cosines: Sequence[float]):
        for name, value in (('columns', columns), ('rows', rows)):
            if not isinstance(value, (int, np.integer)) or value < 1:
                raise InvalidArgumentError(f"Invalid argument '{name}'. Expected a positive integer, got {value}.")

        self.deltaCol = deltaCol
        self.deltaRow = deltaRow
        self.pos = pos
        self.cosines = cosines
        self.imageArray = np.zeros((columns, rows), dtype=np.int32)

    @classmethod
    def create(cls, columns: int, rows: int, deltaCol, deltaRow, pos: Coordinate, cosines: Sequence[float]):
        return cls(columns, rows, deltaCol, deltaRow, pos, cosines)

    @classmethod
    def setup(cls, columns: int, rows: int, deltaCol, deltaRow, gantryAngle, sdd, isocenter: Coordinate):
        """
        Place a detector panel for a gantry angle.

        Parameters
        ----------
        columns, rows: int
            Number of detector pixels.
        deltaCol, deltaRow: float
            Pixel spacing in mm.
        gantryAngle: float
            Gantry angle in degrees.
        sdd: float
            Source to detector distance in mm. The panel centre lies sdd/2
            beyond the isocenter, opposite the source.
        isocenter: Coordinate

        Returns
        -------
        pixelSpace: PixelSpace
        """
        if not isinstance(sdd, numbers.Real) or not sdd > 0:
            raise InvalidArgumentError(f"Invalid argument 'sdd'. Must be a positive number, got {sdd}.")
        if not isinstance(isocenter, Coordinate):
            raise InvalidArgumentError(f"Invalid argument 'isocenter'. Expected Coordinate, got {type(isocenter).__name__}.")

        radians = gantryAngle / 180.0 * math.pi
        cosines = [0.0] * 6
        cosines[0] = round(math.cos(radians), 15)
        cosines[1] = round(math.sin(radians), 15)
        cosines[5] = -1.0

        rowOffset = deltaRow * (rows // 2) if rows % 2 == 1 else deltaRow * (rows / 2 - 0.5)
        columnOffset = deltaCol * (columns // 2) if columns % 2 == 1 else deltaCol * (columns / 2 - 0.5)
        imageOffsetX = -0.5 * sdd * cosines[1]
        imageOffsetY = 0.5 * sdd * cosines[0]

        x = round(isocenter.x - cosines[0] * columnOffset + imageOffsetX, 14)
        y = round(isocenter.y - cosines[1] * columnOffset + imageOffsetY, 14)
        z = round(isocenter.z - cosines[5] * rowOffset, 14)

        logger.debug('Detector for gantry angle %s placed at (%s, %s, %s)', gantryAngle, x, y, z)
        return cls(columns, rows, deltaCol, deltaRow, Coordinate(x, y, z), cosines)

    def __eq__(self, other):
        if not isinstance(other, PixelSpace):
            return NotImplemented
        return ((self._deltaCol, self._deltaRow, self._pos, self._cosines) ==
                (other._deltaCol, other._deltaRow, other._pos, other._cosines) and
                np.array_equal(self.imageArray, other.imageArray))

    __hash__ = None

    def __str__(self):
        return 'PixelSpace ' + str(self.columns) + 'x' + str(self.rows) + '\n'

    @property
    def columns(self) -> int:
        return self.imageArray.shape[0]

    @property
    def rows(self) -> int:
        return self.imageArray.shape[1]

    nx = columns
    ny = rows

    @property
    def deltaCol(self) -> float:
        return self._deltaCol

    @deltaCol.setter
    def deltaCol(self, distance):
        self._deltaCol = self._positiveDistance(distance, 'deltaCol')

    @property
    def deltaRow(self) -> float:
        return self._deltaRow

    @deltaRow.setter
    def deltaRow(self, distance):
        self._deltaRow = self._positiveDistance(distance, 'deltaRow')

    @property
    def pos(self) -> Coordinate:
        return self._pos

    @pos.setter
    def pos(self, position):
        if not isinstance(position, Coordinate):
            raise InvalidArgumentError(f"Invalid argument 'pos'. Expected Coordinate, got {type(position).__name__}.")
        self._pos = position

    @property
    def cosines(self) -> list:
        return list(self._cosines)

    @cosines.setter
    def cosines(self, array):
        if len(array) != 6:
            raise InvalidArgumentError(f"Invalid argument 'cosines'. Exactly 6 elements needed, got {len(array)}.")
        self._cosines = [float(value) for value in array]

    def coordinate(self, i: int, j: int) -> Coordinate:
        """Position of pixel (column i, row j)."""
        c = self._cosines
        x = self._pos.x + (i * self._deltaCol * c[0]) + (j * self._deltaRow * c[3])
        y = self._pos.y + (i * self._deltaCol * c[1]) + (j * self._deltaRow * c[4])
        z = self._pos.z + (i * self._deltaCol * c[2]) + (j * self._deltaRow * c[5])
        return Coordinate(x, y, z)

    @staticmethod
    def _positiveDistance(distance, name) -> float:
        if not isinstance(distance, numbers.Real) or not distance > 0:
            raise InvalidArgumentError(f"Invalid argument '{name}'. Must be a positive number, got {distance}.")
        return float(distance)
