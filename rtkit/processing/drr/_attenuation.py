__all__ = ['Attenuation']

import bisect
import logging
import math
from typing import Sequence

import numpy as np

from rtkit._exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

# Photon energy (MeV) and mass attenuation coefficient of water (cm2/g), NIST XCOM.
WATER_ENERGIES = (
    0.001, 0.0015, 0.002, 0.003, 0.004, 0.005, 0.006, 0.008,
    0.01, 0.015, 0.02, 0.03, 0.04, 0.05, 0.06, 0.08,
    0.1, 0.15, 0.2, 0.3, 0.4, 0.5, 0.6, 0.8,
    1.0, 1.25, 1.5, 2.0, 3.0, 4.0, 5.0, 6.0, 8.0,
    10.0, 15.0, 20.0,
)
WATER_COEFFICIENTS = (
    4078.0, 1376.0, 617.3, 192.9, 82.78, 42.58, 24.64, 10.37,
    5.329, 1.673, 0.8096, 0.3756, 0.2683, 0.2269, 0.2059, 0.1837,
    0.1707, 0.1505, 0.137, 0.1186, 0.1061, 0.09687, 0.08956, 0.07865,
    0.07072, 0.06323, 0.05754, 0.04942, 0.03969, 0.03403, 0.03031, 0.0277, 0.02429,
    0.02219, 0.01941, 0.01813,
)
WATER_DENSITY = 1.0


class Attenuation:
    """
    Photon attenuation along a path through voxels given in Hounsfield units.

    Parameters
    ----------
    energy: float
        Photon energy in MeV.
    """
    def __init__(self, energy: float = 0.05):
        self._energy = None
        self._acWater = None
        self.energy = energy

    @property
    def energy(self) -> float:
        return self._energy

    @energy.setter
    def energy(self, energy):
        if isinstance(energy, bool) or not isinstance(energy, (int, float, np.floating, np.integer)) or not energy > 0:
            raise InvalidArgumentError(f"Invalid argument 'energy'. Expected a positive number, got {energy}.")
        self._energy = float(energy)
        self._acWater = self.determineCoefficient()

    @property
    def acWater(self) -> float:
        """Linear attenuation coefficient of water (1/cm) at the current energy."""
        return self._acWater

    @property
    def density(self) -> float:
        return WATER_DENSITY

    def determineCoefficient(self) -> float:
        """
        Water mass attenuation coefficient at the current energy, linearly
        interpolated in the table. Energies beyond the table use its last value.
        """
        energy = self._energy
        if energy >= WATER_ENERGIES[-1]:
            return WATER_COEFFICIENTS[-1] * WATER_DENSITY

        upper = bisect.bisect_left(WATER_ENERGIES, energy)
        if WATER_ENERGIES[upper] == energy:
            return WATER_COEFFICIENTS[upper] * WATER_DENSITY
        if upper == 0:
            return WATER_COEFFICIENTS[0] * WATER_DENSITY

        lower = upper - 1
        slope = (WATER_COEFFICIENTS[upper] - WATER_COEFFICIENTS[lower]) / (WATER_ENERGIES[upper] - WATER_ENERGIES[lower])
        return (WATER_COEFFICIENTS[lower] + slope * (energy - WATER_ENERGIES[lower])) * WATER_DENSITY

    def attenuationCoefficient(self, hu: float) -> float:
        """Linear attenuation coefficient (1/cm) of a voxel of hu Hounsfield units."""
        return hu * self._acWater / 1000.0 + self._acWater

    def attenuation(self, hu: float, length: float) -> float:
        """
        Fraction of the photons removed by crossing length mm of a voxel.

        Returns
        -------
        attenuation: float
            1 - exp(-mu * length), with length converted to cm.
        """
        return 1.0 - math.exp(-self.attenuationCoefficient(hu) * 0.1 * length)

    def vectorAttenuation(self, huValues: Sequence[float], lengths: Sequence[float]) -> float:
        """Fraction of the photons removed along a path crossing several voxels."""
        huValues = np.asarray(huValues, dtype=float)
        lengths = np.asarray(lengths, dtype=float)
        if huValues.shape != lengths.shape:
            raise InvalidArgumentError(f"Invalid argument 'lengths'. Expected {huValues.size} values, got {lengths.size}.")

        mu = huValues * self._acWater / 1000.0 + self._acWater
        return 1.0 - math.exp(-float(np.sum(mu * 0.1 * lengths)))
