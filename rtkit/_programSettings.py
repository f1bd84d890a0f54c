import configparser
import logging
from os import makedirs
from pathlib import Path

import appdirs

import rtkit.config as configModule

__all__ = ['ProgramSettings']

logger = logging.getLogger(__name__)


class Singleton(type):
    _instances = {}
    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            cls._instances[cls] = super(Singleton, cls).__call__(*args, **kwargs)
        return cls._instances[cls]


class ProgramSettings(metaclass=Singleton):
    """
    Package wide settings.

    Defaults come from the packaged config_template.cfg. A user file in the
    appdirs config folder overrides them when present; it is only written by
    writeConfig().
    """
    def __init__(self):
        self._config_dir = Path(appdirs.user_config_dir("rtkit"))
        self._configFile = self._config_dir / "rtkit.cfg"

        self._config = configparser.ConfigParser()
        self._config.read(Path(str(configModule.__path__[0])) / "config_template.cfg")

        if self._configFile.exists():
            logger.debug("Reading user settings from %s", self._configFile)
            self._config.read(self._configFile)

    @property
    def configFile(self) -> Path:
        return self._configFile

    @property
    def logLevel(self) -> str:
        return self._config["logging"]["level"]

    @logLevel.setter
    def logLevel(self, level: str):
        self._config["logging"]["level"] = str(level).upper()

    @property
    def stapleMaxIterations(self) -> int:
        return self._config.getint("staple", "maxIterations")

    @stapleMaxIterations.setter
    def stapleMaxIterations(self, value: int):
        self._config["staple"]["maxIterations"] = str(int(value))

    @property
    def stapleInitialPerformance(self) -> float:
        return self._config.getfloat("staple", "initialPerformance")

    @property
    def stapleTolerance(self) -> float:
        return self._config.getfloat("staple", "tolerance")

    @property
    def drrEnergy(self) -> float:
        return self._config.getfloat("drr", "energy")

    @drrEnergy.setter
    def drrEnergy(self, value: float):
        self._config["drr"]["energy"] = str(float(value))

    @property
    def drrScale(self) -> int:
        return self._config.getint("drr", "scale")

    def writeConfig(self):
        makedirs(self._config_dir, exist_ok=True)
        with open(self._configFile, 'w') as file:
            self._config.write(file)
