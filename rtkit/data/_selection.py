__all__ = ['Selection']

from typing import Sequence

import numpy as np

from rtkit._exceptions import InvalidArgumentError


class Selection:
    """
    An ordered set of linear pixel indices (column + row*columns) of a binary image.

    The indices are kept in insertion order and may repeat, so a selection can
    describe a traced contour as well as a plain group of pixels.
    """
    def __init__(self, binImage, indices: Sequence[int] = ()):
        self._binImage = binImage
        self._indices = [int(i) for i in indices]

    def __eq__(self, other):
        if not isinstance(other, Selection):
            return NotImplemented
        return self._indices == other._indices

    def __hash__(self):
        return hash(tuple(self._indices))

    def __len__(self):
        return len(self._indices)

    def __iter__(self):
        return iter(self._indices)

    def __getitem__(self, item):
        return self._indices[item]

    def __repr__(self):
        return f'Selection({self._indices})'

    @property
    def binImage(self):
        return self._binImage

    @property
    def indices(self) -> list:
        return list(self._indices)

    @property
    def columns(self) -> list:
        return [i % self._binImage.columns for i in self._indices]

    @property
    def rows(self) -> list:
        return [i // self._binImage.columns for i in self._indices]

    def add(self, indices):
        """Append one index or a sequence of indices."""
        if np.ndim(indices) == 0:
            self._indices.append(int(indices))
        else:
            self._indices.extend(int(i) for i in indices)

    def shift(self, deltaCol: int, deltaRow: int):
        """Move the selected pixels, keeping the image dimensions."""
        self._checkDelta(deltaCol, 'deltaCol')
        self._checkDelta(deltaRow, 'deltaRow')
        columns = self._binImage.columns
        self._indices = [(c + deltaCol) + (r + deltaRow) * columns for c, r in zip(self.columns, self.rows)]

    def shiftColumns(self, delta: int):
        self.shift(delta, 0)

    def shiftRows(self, delta: int):
        self.shift(0, delta)

    def shiftAndCrop(self, deltaCol: int, deltaRow: int, croppedImage=None):
        """
        Move the selected pixels and express them against an image cropped by
        abs(delta) pixels on both sides of each dimension. This maps indices of
        a padded image back to the unpadded one. When given, croppedImage
        becomes the image the selection refers to.
        """
        self._checkDelta(deltaCol, 'deltaCol')
        self._checkDelta(deltaRow, 'deltaRow')
        croppedColumns = self._binImage.columns - 2 * abs(deltaCol)
        self._indices = [(c + deltaCol) + (r + deltaRow) * croppedColumns for c, r in zip(self.columns, self.rows)]
        if croppedImage is not None:
            self._binImage = croppedImage

    @staticmethod
    def _checkDelta(delta, name):
        if not isinstance(delta, (int, np.integer)):
            raise InvalidArgumentError(f"Invalid argument '{name}'. Expected an integer, got {type(delta).__name__}.")
