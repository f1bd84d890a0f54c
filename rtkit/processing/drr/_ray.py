__all__ = ['Ray', 'traceRay']

import logging
import math
from typing import Optional

from rtkit._exceptions import InvalidArgumentError
from rtkit.data._coordinate import Coordinate
from rtkit.data.images._voxelSpace import VoxelSpace

logger = logging.getLogger(__name__)

_DECIMALS = 8


def _fraction(numerator: float, denominator: float) -> float:
    # IEEE semantics for a ray parallel to an axis: x/0 is +-inf and 0/0 is +inf
    if denominator == 0:
        if numerator < 0:
            return -math.inf
        return math.inf
    return numerator / denominator


class Ray:
    """
    A line segment from p1 to p2 traced through a voxel space.

    The trace follows Siddon's parametric method with Jacobs' incremental
    update: a point of the segment is p1 + alpha*(p2 - p1), alpha in [0, 1],
    and the segment is walked from plane crossing to plane crossing.

    After trace(), indices holds the linear indices of the intersected voxels
    in walking order, lengths the intersection length (mm) with each of them,
    and d the sum of the lengths weighted by the voxel values.
    """
    def __init__(self, p1: Optional[Coordinate] = None, p2: Optional[Coordinate] = None, voxelSpace: Optional[VoxelSpace] = None):
        self._p1 = None
        self._p2 = None
        self._vs = None
        if p1 is not None:
            self.p1 = p1
        if p2 is not None:
            self.p2 = p2
        if voxelSpace is not None:
            self.vs = voxelSpace
        self.reset()

    def __eq__(self, other):
        if not isinstance(other, Ray):
            return NotImplemented
        return self._state() == other._state()

    __hash__ = None

    @property
    def p1(self) -> Coordinate:
        return self._p1

    @p1.setter
    def p1(self, source):
        if not isinstance(source, Coordinate):
            raise InvalidArgumentError(f"Invalid argument 'p1'. Expected Coordinate, got {type(source).__name__}.")
        self._p1 = source

    @property
    def p2(self) -> Coordinate:
        return self._p2

    @p2.setter
    def p2(self, target):
        if not isinstance(target, Coordinate):
            raise InvalidArgumentError(f"Invalid argument 'p2'. Expected Coordinate, got {type(target).__name__}.")
        self._p2 = target

    @property
    def vs(self) -> VoxelSpace:
        return self._vs

    @vs.setter
    def vs(self, voxelSpace):
        if not isinstance(voxelSpace, VoxelSpace):
            raise InvalidArgumentError(f"Invalid argument 'vs'. Expected VoxelSpace, got {type(voxelSpace).__name__}.")
        self._vs = voxelSpace

    @property
    def d(self) -> float:
        return self._d

    @property
    def indices(self) -> list:
        return list(self._indices)

    @property
    def lengths(self) -> list:
        return list(self._lengths)

    @property
    def length(self) -> float:
        """Euclidean length of the segment p1-p2."""
        return math.sqrt((self._p2.x - self._p1.x) ** 2 + (self._p2.y - self._p1.y) ** 2 + (self._p2.z - self._p1.z) ** 2)

    def reset(self):
        self._d = 0.0
        self._indices = []
        self._lengths = []

    # Plane coordinates. Plane 0 is the lower boundary of voxel 0.
    def bx(self) -> float:
        return self._vs.pos.x - 0.5 * self._vs.deltaX

    def by(self) -> float:
        return self._vs.pos.y - 0.5 * self._vs.deltaY

    def bz(self) -> float:
        return self._vs.pos.z - 0.5 * self._vs.deltaZ

    def coordX(self, i: int) -> float:
        return self._vs.pos.x + (i - 0.5) * self._vs.deltaX

    def coordY(self, j: int) -> float:
        return self._vs.pos.y + (j - 0.5) * self._vs.deltaY

    def coordZ(self, k: int) -> float:
        return self._vs.pos.z + (k - 0.5) * self._vs.deltaZ

    # Fraction of the segment travelled when crossing a plane. May lie outside [0, 1].
    def ax(self, i: int) -> float:
        return _fraction(self.coordX(i) - self._p1.x, self._p2.x - self._p1.x)

    def ay(self, j: int) -> float:
        return _fraction(self.coordY(j) - self._p1.y, self._p2.y - self._p1.y)

    def az(self, k: int) -> float:
        return _fraction(self.coordZ(k) - self._p1.z, self._p2.z - self._p1.z)

    def px(self, alpha: float) -> float:
        return self._p1.x + alpha * (self._p2.x - self._p1.x)

    def py(self, alpha: float) -> float:
        return self._p1.y + alpha * (self._p2.y - self._p1.y)

    def pz(self, alpha: float) -> float:
        return self._p1.z + alpha * (self._p2.z - self._p1.z)

    # Voxel index containing the point at alpha. A ray perpendicular to an
    # axis keeps the index of its source on that axis.
    def phiX(self, alpha: float) -> int:
        position = self._p1.x if self._p2.x == self._p1.x else self.px(alpha)
        return math.floor((position - self.bx()) / self._vs.deltaX)

    def phiY(self, alpha: float) -> int:
        position = self._p1.y if self._p2.y == self._p1.y else self.py(alpha)
        return math.floor((position - self.by()) / self._vs.deltaY)

    def phiZ(self, alpha: float) -> int:
        position = self._p1.z if self._p2.z == self._p1.z else self.pz(alpha)
        return math.floor((position - self.bz()) / self._vs.deltaZ)

    def trace(self):
        """
        Compute the voxels intersected by the segment. A segment missing the
        voxel space leaves indices and lengths empty.

        Planes crossed at the same alpha are stepped through one at a time,
        x before y before z, each step adding a zero length voxel. Which voxel
        gets that entry depends on the direction of the segment, so tracing
        p2 to p1 reverses only the voxels of nonzero length.
        """
        if self._p1 is None or self._p2 is None or self._vs is None:
            raise InvalidArgumentError("Invalid argument 'ray'. p1, p2 and vs must be set before tracing.")

        self.reset()
        vs = self._vs

        alphaMin, alphaMax = self._alphaRange()
        if not alphaMin < alphaMax:
            return

        length = self.length
        steps = (self._step(self._p1.x, self._p2.x), self._step(self._p1.y, self._p2.y), self._step(self._p1.z, self._p2.z))
        alphaSteps = (_fraction(vs.deltaX, abs(self._p2.x - self._p1.x)),
                      _fraction(vs.deltaY, abs(self._p2.y - self._p1.y)),
                      _fraction(vs.deltaZ, abs(self._p2.z - self._p1.z)))

        alphas = [self._firstCrossing(alphaMin, steps[0], self.px, self.bx(), vs.deltaX, self.ax),
                  self._firstCrossing(alphaMin, steps[1], self.py, self.by(), vs.deltaY, self.ay),
                  self._firstCrossing(alphaMin, steps[2], self.pz, self.bz(), vs.deltaZ, self.az)]

        alphaMid = 0.5 * (alphaMin + min(alphas + [alphaMax]))
        voxel = [self.phiX(alphaMid), self.phiY(alphaMid), self.phiZ(alphaMid)]
        if not self._insideVoxelSpace(voxel):
            # the segment only grazes the outer boundary of the voxel space
            return

        alphaCurrent = alphaMin
        alphaMaxRounded = round(alphaMax, _DECIMALS)
        while True:
            alphaNext = min(alphas[0], alphas[1], alphas[2], alphaMax)
            stepLength = (alphaNext - alphaCurrent) * length
            self._d += stepLength * vs.imageArray[voxel[0], voxel[1], voxel[2]]
            self._indices.append(vs.linearIndex(*voxel))
            self._lengths.append(stepLength)

            if round(alphaNext, _DECIMALS) >= alphaMaxRounded:
                break

            # one axis per step, x before y before z
            axis = alphas.index(alphaNext)
            voxel[axis] += steps[axis]
            alphaCurrent = alphas[axis]
            alphas[axis] += alphaSteps[axis]
            if not self._insideVoxelSpace(voxel):
                break

    def _alphaRange(self):
        vs = self._vs
        alphaX = (self.ax(0), self.ax(vs.nx))
        alphaY = (self.ay(0), self.ay(vs.ny))
        alphaZ = (self.az(0), self.az(vs.nz))
        alphaMin = max(0.0, min(alphaX), min(alphaY), min(alphaZ))
        alphaMax = min(1.0, max(alphaX), max(alphaY), max(alphaZ))
        return alphaMin, alphaMax

    @staticmethod
    def _step(start: float, end: float) -> int:
        if start == end:
            return 0
        return 1 if start < end else -1

    @staticmethod
    def _firstCrossing(alphaMin, step, position, planeZero, delta, alphaOfPlane) -> float:
        if step == 0:
            return math.inf
        # continuous plane index of the entry point, rounded so an entry lying
        # on a plane is not mistaken for the plane before it
        planeIndex = round((position(alphaMin) - planeZero) / delta, _DECIMALS)
        if step > 0:
            nextPlane = math.floor(planeIndex) + 1
        else:
            nextPlane = math.ceil(planeIndex) - 1
        return alphaOfPlane(nextPlane)

    def _insideVoxelSpace(self, voxel) -> bool:
        return (0 <= voxel[0] < self._vs.nx and
                0 <= voxel[1] < self._vs.ny and
                0 <= voxel[2] < self._vs.nz)

    def _state(self):
        return (self._d, self._indices, self._p1, self._p2, self._vs)


def traceRay(p1: Coordinate, p2: Coordinate, voxelSpace: VoxelSpace) -> Ray:
    """Trace the segment p1-p2 through voxelSpace and return the traced Ray."""
    ray = Ray(p1, p2, voxelSpace)
    ray.trace()
    return ray
