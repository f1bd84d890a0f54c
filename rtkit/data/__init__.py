from rtkit.data._coordinate import *
from rtkit.data._selection import *
from rtkit.data._contour import *
from rtkit.data._slice import *
from rtkit.data.images import *

__all__ = [s for s in dir() if not s.startswith('_')]
