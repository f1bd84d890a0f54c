from rtkit._event import Event
from rtkit._exceptions import InvalidArgumentError, UnsupportedOperationError
from rtkit._programSettings import ProgramSettings
from rtkit._loggingConfig import loggerConfig

import rtkit.data as data
import rtkit.io as io
import rtkit.processing as processing

loggerConfig().configure()

__all__ = [s for s in dir() if not s.startswith('_')]
