__all__ = ['Coordinate']

import numbers

import numpy as np

from rtkit._exceptions import InvalidArgumentError


class Coordinate:
    """
    Immutable point (x, y, z) in patient space, in mm.
    """
    def __init__(self, x, y, z):
        for name, value in (('x', x), ('y', y), ('z', z)):
            if not isinstance(value, numbers.Real) or isinstance(value, bool):
                raise InvalidArgumentError(f"Invalid argument '{name}'. Expected a real number, got {type(value).__name__}.")

        self._x = float(x)
        self._y = float(y)
        self._z = float(z)

    def __eq__(self, other):
        if not isinstance(other, Coordinate):
            return NotImplemented
        return self._state() == other._state()

    def __hash__(self):
        return hash(self._state())

    def __iter__(self):
        return iter(self._state())

    def __repr__(self):
        return f'Coordinate({self._x}, {self._y}, {self._z})'

    def __str__(self):
        return '\\'.join(str(v) for v in self._state())

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    @property
    def z(self) -> float:
        return self._z

    def translate(self, dx, dy, dz):
        """Return a new coordinate shifted by (dx, dy, dz)."""
        return Coordinate(self._x + dx, self._y + dy, self._z + dz)

    def toArray(self) -> np.ndarray:
        return np.array(self._state())

    def _state(self):
        return (self._x, self._y, self._z)
