__all__ = ['Contour']

import logging
from typing import Optional, Sequence

from rtkit._exceptions import InvalidArgumentError
from rtkit.data._coordinate import Coordinate

logger = logging.getLogger(__name__)


class Contour:
    """
    Ordered polygon of coordinates lying in one slice.

    Parameters
    ----------
    slice: Slice
        The slice the contour belongs to. The contour registers itself there.
    number: int
        Contour number, as in the DICOM Contour Number attribute.
    type: str
        Contour geometric type.
    """
    def __init__(self, slice, number: Optional[int] = None, type: str = 'CLOSED_PLANAR'):
        from rtkit.data._slice import Slice

        if not isinstance(slice, Slice):
            raise InvalidArgumentError(f"Invalid argument 'slice'. Expected Slice, got {slice.__class__.__name__}.")
        if number is not None and not isinstance(number, int):
            raise InvalidArgumentError(f"Invalid argument 'number'. Expected int, got {number.__class__.__name__}.")
        if not isinstance(type, str):
            raise InvalidArgumentError(f"Invalid argument 'type'. Expected str, got {type.__class__.__name__}.")

        self._coordinates = []
        self._slice = slice
        self.number = number
        self.type = type
        slice.addContour(self)

    def __eq__(self, other):
        if not isinstance(other, Contour):
            return NotImplemented
        return (self._coordinates, self.number, self.type) == (other._coordinates, other.number, other.type)

    __hash__ = None

    def __len__(self):
        return len(self._coordinates)

    def __str__(self):
        return 'Contour ' + str(self.number) + ' (' + self.type + ', ' + str(len(self)) + ' points)\n'

    @property
    def coordinates(self) -> Sequence[Coordinate]:
        return list(self._coordinates)

    @property
    def slice(self):
        return self._slice

    @property
    def coords(self):
        """x, y and z values of the coordinates as three lists."""
        return ([c.x for c in self._coordinates],
                [c.y for c in self._coordinates],
                [c.z for c in self._coordinates])

    @property
    def contourData(self) -> str:
        """Backslash separated x\\y\\z triplets (DICOM Contour Data)."""
        return '\\'.join(str(c) for c in self._coordinates)

    def addCoordinate(self, coordinate: Coordinate):
        if not isinstance(coordinate, Coordinate):
            raise InvalidArgumentError(f"Invalid argument 'coordinate'. Expected Coordinate, got {coordinate.__class__.__name__}.")
        self._coordinates.append(coordinate)

    def createCoordinates(self, contourData: Optional[str]):
        """Append the coordinates of a DICOM Contour Data string."""
        if contourData is None or contourData == '':
            return
        if not isinstance(contourData, str):
            raise InvalidArgumentError(f"Invalid argument 'contourData'. Expected str, got {contourData.__class__.__name__}.")

        values = [float(v) for v in contourData.split('\\')]
        if len(values) % 3 != 0:
            logger.warning('Contour data with %d values is not a list of triplets; trailing values ignored', len(values))
        for i in range(len(values) // 3):
            self.addCoordinate(Coordinate(values[3 * i], values[3 * i + 1], values[3 * i + 2]))

    @classmethod
    def createFromCoordinates(cls, x: Sequence[float], y: Sequence[float], z: Sequence[float], slice):
        """
        Create a contour in slice from coordinate lists, numbered after the
        contours already present in the slice.
        """
        if not (len(x) == len(y) == len(z)):
            raise InvalidArgumentError(f"Invalid arguments 'x', 'y', 'z'. The coordinate lists are of unequal length [{len(x)}, {len(y)}, {len(z)}].")

        contour = cls(slice, number=slice.numberOfContours + 1)
        for xi, yi, zi in zip(x, y, z):
            contour.addCoordinate(Coordinate(xi, yi, zi))
        return contour
