import logging

import pydicom

from rtkit._exceptions import InvalidArgumentError
from rtkit.data._contour import Contour
from rtkit.data._coordinate import Coordinate
from rtkit.data._slice import Slice

logger = logging.getLogger(__name__)

CT_IMAGE_STORAGE = '1.2.840.10008.5.1.4.1.1.2'


def floatToDS(v):
    return pydicom.valuerep.DSfloat(v, auto_format=True)


def arrayToDS(ls):
    return list(map(floatToDS, ls))


def writeContourItem(contour: Contour) -> pydicom.Dataset:
    """
    Create a Contour Sequence item from a contour.

    Parameters
    ----------
    contour: Contour

    Returns
    -------
    item: pydicom.Dataset
        Item holding the geometric type, point count, number and data of the
        contour, and a reference to the image of its slice when the slice
        knows the image UID.
    """
    if not isinstance(contour, Contour):
        raise InvalidArgumentError(f"Invalid argument 'contour'. Expected Contour, got {type(contour).__name__}.")

    item = pydicom.Dataset()
    sopInstanceUID = contour.slice.sopInstanceUID
    if sopInstanceUID:
        image = pydicom.Dataset()
        image.ReferencedSOPClassUID = CT_IMAGE_STORAGE
        image.ReferencedSOPInstanceUID = sopInstanceUID
        item.ContourImageSequence = [image]

    item.ContourGeometricType = contour.type
    item.NumberOfContourPoints = len(contour)
    if contour.number is not None:
        item.ContourNumber = contour.number

    data = []
    for coordinate in contour.coordinates:
        data.extend((coordinate.x, coordinate.y, coordinate.z))
    item.ContourData = arrayToDS(data)
    return item


def readContourItem(item: pydicom.Dataset, slice: Slice) -> Contour:
    """
    Create a contour in slice from a Contour Sequence item.

    Parameters
    ----------
    item: pydicom.Dataset
    slice: Slice
        Slice receiving the contour.

    Returns
    -------
    contour: Contour
    """
    if not isinstance(item, pydicom.Dataset):
        raise InvalidArgumentError(f"Invalid argument 'item'. Expected pydicom.Dataset, got {type(item).__name__}.")

    number = int(item.ContourNumber) if 'ContourNumber' in item else None
    geometricType = str(item.ContourGeometricType) if 'ContourGeometricType' in item else 'CLOSED_PLANAR'
    contour = Contour(slice, number=number, type=geometricType)

    values = [float(v) for v in item.ContourData] if 'ContourData' in item else []
    if len(values) % 3 != 0:
        logger.warning('Contour data with %d values is not a list of triplets; trailing values ignored', len(values))
    for i in range(len(values) // 3):
        contour.addCoordinate(Coordinate(values[3 * i], values[3 * i + 1], values[3 * i + 2]))

    if 'NumberOfContourPoints' in item and int(item.NumberOfContourPoints) != len(contour):
        logger.warning('Contour declares %s points but holds %d', item.NumberOfContourPoints, len(contour))

    if 'ContourImageSequence' in item and not slice.sopInstanceUID:
        slice.sopInstanceUID = str(item.ContourImageSequence[0].ReferencedSOPInstanceUID)

    return contour
