import logging
import logging.config
from typing import Optional

from rtkit._programSettings import ProgramSettings, Singleton

__all__ = ['loggerConfig']


class loggerConfig(metaclass=Singleton):
    """
    Configures the handlers of the rtkit logger hierarchy.
    """
    FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    def __init__(self):
        self._configured = False

    @property
    def configured(self) -> bool:
        return self._configured

    def configure(self, level: Optional[str] = None, logFile: Optional[str] = None):
        if level is None:
            level = ProgramSettings().logLevel

        handlers = {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'default',
                'level': level,
            },
        }
        if logFile is not None:
            handlers['file'] = {
                'class': 'logging.FileHandler',
                'formatter': 'default',
                'filename': str(logFile),
                'level': level,
            }

        logging.config.dictConfig({
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'default': {'format': self.FORMAT}},
            'handlers': handlers,
            'loggers': {
                'rtkit': {
                    'handlers': list(handlers.keys()),
                    'level': level,
                    'propagate': False,
                },
            },
        })

        self._configured = True
        logging.getLogger('rtkit').debug('Logging configured with level %s', level)
