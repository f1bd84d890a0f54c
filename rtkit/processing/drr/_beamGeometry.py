__all__ = ['BeamGeometry']

import logging
import math
import numbers
from typing import Optional

from rtkit._exceptions import InvalidArgumentError, UnsupportedOperationError
from rtkit._programSettings import ProgramSettings
from rtkit.data._coordinate import Coordinate
from rtkit.data.images._pixelSpace import PixelSpace
from rtkit.data.images._voxelSpace import VoxelSpace
from rtkit.processing.drr._attenuation import Attenuation
from rtkit.processing.drr._ray import Ray

logger = logging.getLogger(__name__)


class BeamGeometry:
    """
    Point source rotating around an isocenter in the axial plane, used to
    project a CT voxel space onto a detector (digitally reconstructed radiograph).

    Parameters
    ----------
    energy: float
        Photon energy in MeV. Defaults to the configured DRR energy.
    """
    def __init__(self, energy: Optional[float] = None):
        settings = ProgramSettings()

        self.gantryAngle = None
        self.sid = None
        self.isocenter = None
        self.source = None
        self.voxelSpace = None
        self.scale = settings.drrScale
        self.attenuation = Attenuation(settings.drrEnergy if energy is None else energy)

    def __str__(self):
        return 'BeamGeometry at ' + str(self.gantryAngle) + ' deg, source ' + str(self.source) + '\n'

    def setup(self, gantryAngle, sid, isocenter: Coordinate, voxelSpace: VoxelSpace):
        """
        Place the source for a gantry angle.

        Parameters
        ----------
        gantryAngle: float
            Gantry angle in degrees. At 0 the source lies sid below the
            isocenter along y.
        sid: float
            Source to isocenter distance in mm.
        isocenter: Coordinate
        voxelSpace: VoxelSpace
            Volume traced by createDrr.
        """
        if not isinstance(sid, numbers.Real) or not sid > 0:
            raise InvalidArgumentError(f"Invalid argument 'sid'. Must be a positive number, got {sid}.")
        if not isinstance(isocenter, Coordinate):
            raise InvalidArgumentError(f"Invalid argument 'isocenter'. Expected Coordinate, got {type(isocenter).__name__}.")
        if not isinstance(voxelSpace, VoxelSpace):
            raise InvalidArgumentError(f"Invalid argument 'voxelSpace'. Expected VoxelSpace, got {type(voxelSpace).__name__}.")

        radians = gantryAngle / 180.0 * math.pi
        x = isocenter.x + sid * round(math.sin(radians), 15)
        y = isocenter.y - sid * round(math.cos(radians), 15)

        self.gantryAngle = gantryAngle
        self.sid = float(sid)
        self.isocenter = isocenter
        self.source = Coordinate(x, y, isocenter.z)
        self.voxelSpace = voxelSpace
        logger.debug('Source for gantry angle %s placed at %s', gantryAngle, self.source)
        return self

    def createDrr(self, pixelSpace: PixelSpace) -> PixelSpace:
        """
        Project the voxel space onto a detector.

        Each detector pixel receives the fraction of photons removed along the
        ray from the source to the pixel, multiplied by scale. Pixels whose
        ray misses the voxel space stay 0.

        Parameters
        ----------
        pixelSpace: PixelSpace
            Detector geometry. It is not modified.

        Returns
        -------
        drr: PixelSpace
            A new detector with the same geometry holding the projection.
        """
        if self.source is None:
            raise UnsupportedOperationError('The beam geometry must be set up before creating a DRR.')
        if not isinstance(pixelSpace, PixelSpace):
            raise InvalidArgumentError(f"Invalid argument 'pixelSpace'. Expected PixelSpace, got {type(pixelSpace).__name__}.")

        drr = PixelSpace(pixelSpace.columns, pixelSpace.rows, pixelSpace.deltaCol, pixelSpace.deltaRow,
                         pixelSpace.pos, pixelSpace.cosines)

        ray = Ray(self.source, self.source, self.voxelSpace)
        missed = 0
        for j in range(pixelSpace.rows):
            for i in range(pixelSpace.columns):
                ray.p2 = pixelSpace.coordinate(i, j)
                ray.trace()
                if not ray.indices:
                    missed += 1
                    continue
                values = self.voxelSpace.valuesAtIndices(ray.indices)
                drr.imageArray[i, j] = int(self.attenuation.vectorAttenuation(values, ray.lengths) * self.scale)

        if missed == pixelSpace.columns * pixelSpace.rows:
            logger.warning('No ray from the source at %s reaches the voxel space', self.source)
        logger.info('Created a %dx%d DRR at gantry angle %s', drr.columns, drr.rows, self.gantryAngle)
        return drr

