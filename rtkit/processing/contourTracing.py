"""
Boundary tracing of binary images.

Contours are traced with a radial sweep over the Moore neighbourhood and a
non-weak stopping criterion (the trace ends when the second contour pixel is
about to be revisited from the start pixel), which lets single pixel wide
appendices be walked out and back. Only the corner pixels of a boundary, where
the walking direction changes, are reported.

Arrays handed to this module are indexed [column, row] and the reported
indices are linear indices column + row*columns.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np
from scipy import ndimage

logger = logging.getLogger(__name__)

# Positions in a flattened 3x3 neighbourhood:
# 0 1 2
# 3 4 5
# 6 7 8
_CLOCKWISE = [0, 1, 2, 5, 8, 7, 6, 3]
_WEST = 3

_EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)

# Four neighbour wall following used by externalContour: for the last move,
# the order in which the next moves are tried, as (name, dRow, dCol).
_EAST = ('east', 0, 1)
_NORTH = ('north', -1, 0)
_WEST_STEP = ('west', 0, -1)
_SOUTH = ('south', 1, 0)
_WALL_FOLLOWING = {
    'north': [_EAST, _NORTH, _WEST_STEP, _SOUTH],
    'east': [_SOUTH, _EAST, _NORTH, _WEST_STEP],
    'south': [_WEST_STEP, _SOUTH, _EAST, _NORTH],
    'west': [_NORTH, _WEST_STEP, _SOUTH, _EAST],
}


def _offset(position: int) -> Tuple[int, int]:
    return position // 3 - 1, position % 3 - 1


def _sweepOrder(arrivedFrom: int) -> List[int]:
    start = _CLOCKWISE.index(arrivedFrom) + 1
    return _CLOCKWISE[start:] + _CLOCKWISE[:start]


def _paddedRaster(imageArray) -> np.ndarray:
    # [row, column] layout with a one pixel background border
    return np.pad(np.asarray(imageArray).T != 0, 1).astype(np.uint8)


def _firstForegroundPixel(raster: np.ndarray) -> Tuple[int, int]:
    flatIndex = int(np.flatnonzero(raster)[0])
    return divmod(flatIndex, raster.shape[1])


def traceBoundary(raster: np.ndarray, seed: Tuple[int, int]) -> Tuple[List[Tuple[int, int]], List[Tuple[int, int]]]:
    """
    Walk the outer boundary of the region containing seed.

    Parameters
    ----------
    raster: np.ndarray
        Binary raster in [row, column] layout whose border is background.
    seed: (row, column)
        First foreground pixel of the region in row-major scan order.

    Returns
    -------
    corners: list of (row, column)
        Boundary pixels where the walking direction changes, starting at seed.
    boundary: list of (row, column)
        Every visited boundary pixel in walking order.
    """
    boundary = [seed]
    directions = []
    current = seed
    arrivedFrom = _WEST

    while True:
        nextPixel = None
        for position in _sweepOrder(arrivedFrom):
            dRow, dCol = _offset(position)
            candidate = (current[0] + dRow, current[1] + dCol)
            if raster[candidate]:
                nextPixel = candidate
                break

        if nextPixel is None:
            # isolated pixel
            break

        if len(boundary) > 1 and nextPixel == boundary[1] and boundary[-1] == boundary[0]:
            boundary.pop()
            break

        boundary.append(nextPixel)
        arrivedFrom = 8 - position
        directions.append(arrivedFrom)
        current = nextPixel

    corners = [boundary[0]]
    if directions:
        runDirection = directions[0]
        for pixel, direction in zip(boundary[1:], directions[1:]):
            if direction != runDirection:
                corners.append(pixel)
                runDirection = direction

    return corners, boundary


def _regionMask(raster: np.ndarray, seed: Tuple[int, int]) -> np.ndarray:
    labels, _ = ndimage.label(raster, structure=_EIGHT_CONNECTED)
    region = labels == labels[seed]
    return ndimage.binary_fill_holes(region)


def traceContours(imageArray) -> List[List[int]]:
    """
    Trace the outer contour of every 8-connected region of a binary image.

    Parameters
    ----------
    imageArray: np.ndarray
        Binary image of shape (columns, rows).

    Returns
    -------
    contours: list of list of int
        One list of corner pixel indices per region, in scan order of the
        regions, each traversed clockwise from its top-left pixel. Regions
        whose boundary has less than 3 pixels do not produce a contour.
    """
    imageArray = np.asarray(imageArray)
    columns = imageArray.shape[0]
    raster = _paddedRaster(imageArray)

    contours = []
    while np.count_nonzero(raster) > 2:
        seed = _firstForegroundPixel(raster)
        corners, boundary = traceBoundary(raster, seed)
        if len(boundary) >= 3:
            contours.append([(row - 1) * columns + (column - 1) for row, column in corners])
        raster[_regionMask(raster, seed)] = 0

    logger.debug('Traced %d contour(s) in a %dx%d image', len(contours), columns, imageArray.shape[1])
    return contours


def externalContour(imageArray) -> List[Tuple[int, int]]:
    """
    Ring of 4-connected background pixels around the first region of a binary
    image, walked clockwise from the pixel left of the region's first pixel.

    Returns
    -------
    ring: list of (column, row)
        Pixel positions relative to the image; they may lie one pixel outside it.
    """
    raster = _paddedRaster(imageArray)
    if not raster.any():
        return []

    seedRow, seedColumn = _firstForegroundPixel(raster)
    start = (seedRow, seedColumn - 1)
    ring = [start]
    current = start
    lastMove = 'north'
    while True:
        for move, dRow, dCol in _WALL_FOLLOWING[lastMove]:
            candidate = (current[0] + dRow, current[1] + dCol)
            if 0 <= candidate[0] < raster.shape[0] and 0 <= candidate[1] < raster.shape[1] and not raster[candidate]:
                break
        else:
            break

        if candidate == start:
            break
        ring.append(candidate)
        current = candidate
        lastMove = move

    return [(column - 1, row - 1) for row, column in ring]


def contourImage(imageArray, contours: Sequence[Sequence[int]]) -> np.ndarray:
    """Image of the same shape where the corner pixels of contour k have value k+1."""
    imageArray = np.asarray(imageArray)
    columns = imageArray.shape[0]
    labels = np.zeros(imageArray.shape, dtype=np.uint8)
    for k, indices in enumerate(contours):
        indices = np.asarray(indices, dtype=int)
        labels[indices % columns, indices // columns] = k + 1
    return labels
