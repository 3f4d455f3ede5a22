__version__ = "0.3.0"

import logging

from . import errors
from .canonical import CanonicalHeader
from .compression import LazBackend
from .detection import FileType, get_file_type, is_las_file, is_laz_file
from .errors import LidarioException
from .lidarfile import LidarFile
from .lib import open_lidar
from .lib import open_lidar as open
from .point import (
    Color,
    CoordinateMode,
    CoordinateTransform,
    PointFormat,
    PointRecord,
    PointRecord0,
    PointRecord1,
    PointRecord2,
    PointRecord3,
)
from .point.dims import supported_point_formats, supported_versions

logging.getLogger(__name__).addHandler(logging.NullHandler())
