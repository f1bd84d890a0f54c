from rtkit.processing.drr._attenuation import *
from rtkit.processing.drr._beamGeometry import *
from rtkit.processing.drr._ray import *

__all__ = [s for s in dir() if not s.startswith('_')]
