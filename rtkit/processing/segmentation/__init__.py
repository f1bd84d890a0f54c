from rtkit.processing.segmentation._binMatcher import *
from rtkit.processing.segmentation._staple import *

__all__ = [s for s in dir() if not s.startswith('_')]
