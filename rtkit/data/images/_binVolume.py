__all__ = ['BinVolume']

import logging
from typing import Optional, Sequence

import numpy as np

from rtkit._exceptions import InvalidArgumentError
from rtkit.data.images._binImage import BinImage

logger = logging.getLogger(__name__)


class BinVolume:
    """
    Stack of binary slice segmentations forming a 3D segmentation.

    The score attributes (sensitivity, specificity, dice) are filled in by
    BinMatcher and Staple.
    """
    def __init__(self, binImages: Optional[Sequence[BinImage]] = None, name: str = 'BinVolume'):
        binImages = list(binImages) if binImages is not None else []
        for binImage in binImages:
            if not isinstance(binImage, BinImage):
                raise InvalidArgumentError(f"Invalid argument 'binImages'. Expected only BinImage instances, got {type(binImage).__name__}.")

        self.name = name
        self._binImages = binImages
        self.sensitivity = None
        self.specificity = None
        self.dice = None

    def __len__(self):
        return len(self._binImages)

    def __str__(self):
        return 'BinVolume ' + self.name + ' (' + str(self.frames) + ' slices)\n'

    @property
    def binImages(self) -> Sequence[BinImage]:
        return list(self._binImages)

    @property
    def images(self):
        return [binImage.image for binImage in self._binImages]

    @property
    def columns(self) -> Optional[int]:
        return self._binImages[0].columns if self._binImages else None

    @property
    def rows(self) -> Optional[int]:
        return self._binImages[0].rows if self._binImages else None

    @property
    def frames(self) -> int:
        return len(self._binImages)

    def add(self, binImage: BinImage):
        if not isinstance(binImage, BinImage):
            raise InvalidArgumentError(f"Invalid argument 'binImage'. Expected BinImage, got {type(binImage).__name__}.")
        self._binImages.append(binImage)

    def reorderImages(self, order: Sequence[int]):
        self._binImages = [self._binImages[i] for i in order]

    def imageArray(self, sortSlices: bool = True) -> Optional[np.ndarray]:
        """
        Segmentation array of shape (columns, rows, frames).

        Parameters
        ----------
        sortSlices: bool
            Stack the slices by increasing slice position instead of insertion order.
        """
        if not self._binImages:
            return None

        binImages = self._binImages
        if sortSlices:
            binImages = sorted(binImages, key=lambda binImage: binImage.slicePosition)

        return np.stack([binImage.imageArray for binImage in binImages], axis=2)
