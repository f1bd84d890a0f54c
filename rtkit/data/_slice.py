__all__ = ['Slice']

import logging
import numbers
from typing import Optional, Sequence

from rtkit._exceptions import InvalidArgumentError, UnsupportedOperationError
from rtkit.data.images._image2D import Image2D

logger = logging.getLogger(__name__)


class Slice:
    """
    Contours of one ROI at one slice position.

    Parameters
    ----------
    position: float
        Slice position (z) in mm.
    image: Image2D
        Image the contours are drawn on, if known.
    sopInstanceUID: str
        UID of the referenced image.
    """
    def __init__(self, position, image: Optional[Image2D] = None, sopInstanceUID: str = ''):
        if not isinstance(position, numbers.Real):
            raise InvalidArgumentError(f"Invalid argument 'position'. Expected a real number, got {type(position).__name__}.")
        if image is not None and not isinstance(image, Image2D):
            raise InvalidArgumentError(f"Invalid argument 'image'. Expected Image2D, got {type(image).__name__}.")

        self.position = float(position)
        self.image = image
        self.sopInstanceUID = sopInstanceUID
        self._contours = []

    def __str__(self):
        return 'Slice at ' + str(self.position) + ' mm (' + str(self.numberOfContours) + ' contours)\n'

    @property
    def contours(self) -> Sequence:
        return list(self._contours)

    @property
    def numberOfContours(self) -> int:
        return len(self._contours)

    def addContour(self, contour):
        from rtkit.data._contour import Contour

        if not isinstance(contour, Contour):
            raise InvalidArgumentError(f"Invalid argument 'contour'. Expected Contour, got {type(contour).__name__}.")
        if not any(c is contour for c in self._contours):
            self._contours.append(contour)

    def toBinImage(self):
        """Rasterize the contours of this slice on its image."""
        from rtkit.data.images._binImage import BinImage

        if self.image is None:
            raise UnsupportedOperationError(f"The image referenced by the slice at position {self.position} is missing.")
        return BinImage.fromContours(self._contours, self.image)
