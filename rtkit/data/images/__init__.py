from rtkit.data.images._image2D import *
from rtkit.data.images._binImage import *
from rtkit.data.images._binVolume import *
from rtkit.data.images._voxelSpace import *
from rtkit.data.images._pixelSpace import *

__all__ = [s for s in dir() if not s.startswith('_')]
