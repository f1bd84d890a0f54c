__all__ = ['BinImage']

import logging
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw

from rtkit._event import Event
from rtkit._exceptions import InvalidArgumentError
from rtkit.data._contour import Contour
from rtkit.data._selection import Selection
from rtkit.data.images._image2D import Image2D

logger = logging.getLogger(__name__)


class BinImage:
    """
    Binary segmentation of a 2D image.

    Parameters
    ----------
    imageArray: np.ndarray
        Array of shape (columns, rows) holding only 0 and 1, with a one byte
        element type (uint8, int8 or bool).
    image: Image2D
        The image whose geometry the segmentation refers to.
    """
    def __init__(self, imageArray, image: Image2D):
        if not isinstance(image, Image2D):
            raise InvalidArgumentError(f"Invalid argument 'image'. Expected Image2D, got {type(image).__name__}.")

        self.dataChangedSignal = Event()

        self._image = image
        self._imageArray = None
        self.imageArray = imageArray

    def __eq__(self, other):
        if not isinstance(other, BinImage):
            return NotImplemented
        return np.array_equal(self._imageArray, other._imageArray) and self._image is other._image

    __hash__ = None

    def __str__(self):
        return 'BinImage ' + str(self.columns) + 'x' + str(self.rows) + ' (' + str(self.numberOfPositives) + ' positive pixels)\n'

    @property
    def imageArray(self) -> np.ndarray:
        return self._imageArray

    @imageArray.setter
    def imageArray(self, array):
        self._imageArray = self._validatedArray(array, 'narray')
        self.dataChangedSignal.emit()

    @property
    def image(self) -> Image2D:
        return self._image

    @property
    def columns(self) -> int:
        return self._imageArray.shape[0]

    @property
    def rows(self) -> int:
        return self._imageArray.shape[1]

    @property
    def gridSize(self) -> np.ndarray:
        return np.array(self._imageArray.shape)

    @property
    def slicePosition(self) -> float:
        return self._image.slicePosition

    @property
    def numberOfPositives(self) -> int:
        return int(np.count_nonzero(self._imageArray))

    @property
    def area(self) -> float:
        """Segmented area in mm2."""
        return self.numberOfPositives * self._image.pixelArea

    @property
    def isSegmented(self) -> bool:
        # fewer pixels than this cannot enclose an area
        return self.numberOfPositives > 2

    @property
    def selection(self) -> Selection:
        """Linear indices of the positive pixels."""
        return Selection(self, np.flatnonzero(self._imageArray.ravel(order='F')))

    def add(self, pixels):
        """
        Merge another segmentation of the same shape into this one (logical OR).

        Parameters
        ----------
        pixels: BinImage or np.ndarray
        """
        if isinstance(pixels, BinImage):
            pixels = pixels.imageArray
        pixels = self._validatedArray(pixels, 'pixels')
        if pixels.shape != self._imageArray.shape:
            raise InvalidArgumentError(f"Invalid argument 'pixels'. Expected shape {self._imageArray.shape}, got {pixels.shape}.")

        self._imageArray = np.logical_or(self._imageArray, pixels).astype(self._imageArray.dtype)
        self.dataChangedSignal.emit()

    def contourIndices(self) -> Sequence[Selection]:
        """
        Trace the outer contour of every 8-connected region.

        Returns
        -------
        contours: list of Selection
            Corner pixel indices of each contour, clockwise from the top-left pixel.
        """
        from rtkit.processing import contourTracing
        return [Selection(self, indices) for indices in contourTracing.traceContours(self._imageArray)]

    def contourImage(self) -> np.ndarray:
        """Image where the corner pixels of the k-th contour have the value k+1."""
        from rtkit.processing import contourTracing

        contours = [selection.indices for selection in self.contourIndices()]
        return contourTracing.contourImage(self._imageArray, contours)

    def externalContour(self):
        from rtkit.processing import contourTracing
        return contourTracing.externalContour(self._imageArray)

    def toContours(self, slice) -> Sequence[Contour]:
        """
        Convert the traced contours to patient coordinates and attach them to slice.

        Parameters
        ----------
        slice: Slice
            Slice receiving the contours.

        Returns
        -------
        contours: list of Contour
        """
        contours = []
        for selection in self.contourIndices():
            x, y, z = self._image.coordinatesFromIndices(selection.columns, selection.rows)
            x = np.round(x, 1).tolist()
            y = np.round(y, 1).tolist()
            z = np.round(z, 3).tolist()
            contours.append(Contour.createFromCoordinates(x, y, z, slice))

        logger.debug('Created %d contour(s) at slice position %s', len(contours), slice.position)
        return contours

    def toBinVolume(self):
        from rtkit.data.images._binVolume import BinVolume
        return BinVolume([self])

    @classmethod
    def fromContours(cls, contours, image: Image2D):
        """
        Rasterize polygons onto the grid of an image.

        Parameters
        ----------
        contours: sequence of Contour
            Closed planar contours lying in the image plane.
        image: Image2D
            Image defining the output grid.

        Returns
        -------
        binImage: BinImage
        """
        if not isinstance(image, Image2D):
            raise InvalidArgumentError(f"Invalid argument 'image'. Expected Image2D, got {type(image).__name__}.")

        # PIL images are (width, height) = (columns, rows)
        img = Image.new('L', (image.columns, image.rows), 0)
        draw = ImageDraw.Draw(img)
        for contour in contours:
            if len(contour) == 0:
                continue
            if abs(contour.slice.position - image.slicePosition) > 1e-3:
                logger.warning('Contour at slice position %s lies outside the image plane at %s',
                               contour.slice.position, image.slicePosition)
            x, y, z = contour.coords
            columnIndices, rowIndices = image.coordinatesToIndices(x, y, z)
            if len(columnIndices) > 1:
                draw.polygon(list(zip(columnIndices.tolist(), rowIndices.tolist())), outline=1, fill=1)
            else:
                draw.point((int(columnIndices[0]), int(rowIndices[0])), fill=1)

        return cls(np.array(img, dtype=np.uint8).transpose(1, 0), image)

    @staticmethod
    def _validatedArray(array, name) -> np.ndarray:
        if not isinstance(array, np.ndarray):
            raise InvalidArgumentError(f"Invalid argument '{name}'. Expected np.ndarray, got {type(array).__name__}.")
        if array.ndim != 2:
            raise InvalidArgumentError(f"Invalid argument '{name}'. Expected a 2D array, got {array.ndim} dimensions.")
        if array.dtype.itemsize != 1 or array.dtype.kind not in 'biu':
            raise InvalidArgumentError(f"Invalid argument '{name}'. Expected a one byte integer or boolean array, got {array.dtype}.")
        if array.size > 0 and not np.isin(array, (0, 1)).all():
            raise InvalidArgumentError(f"Invalid argument '{name}'. Expected only the values 0 and 1, got {np.unique(array).tolist()}.")
        return array.astype(np.uint8)
