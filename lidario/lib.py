""" 'Entry point' of the library, Contains the functions meant to be
used directly by a user
"""
import logging
import os
from typing import Iterable, Optional, Tuple, Union

from . import errors
from ._compression.backend import LazBackend
from ._compression.lazbackend import ILazBackend, ILazDecoder
from .canonical import normalize_las_header, normalize_laz_header
from .detection import FileType, get_file_type
from .header import LasHeader
from .lasreader import UncompressedPointReader
from .lazreader import LazPointReader
from .lidarfile import LidarFile
from .typehints import PathLike

logger = logging.getLogger(__name__)

SUPPORTED_MODES = ("r", "rh")

LazBackendArg = Optional[Union[ILazBackend, Iterable[ILazBackend]]]


def open_lidar(
    path: PathLike, mode: str = "r", laz_backend: LazBackendArg = None
) -> LidarFile:
    """Opens a LAS or a LAZ file for reading.

    Whether the file is a LAS or a LAZ is decided by its extension,
    and it must start with the LAS signature.

    >>> with open_lidar("tests/data/simple.las") as f:  # doctest: +SKIP
    ...     print(f.get_point_count())
    1065

    Parameters
    ----------
    path: str or pathlib.Path
        path to the file

    mode: Optional, the mode to open the file:
        - "r" for reading (default)
        - "rh" for reading, but only the header is read when opening,
          points are loaded when the first one is read

    laz_backend: Optional, LazBackend or ILazBackend or an iterable of them,
        the backends that may be used to decode a LAZ file, tried in order.
        By default the available backends are detected,
        see :meth:`LazBackend.detect_available`
    """
    if mode not in SUPPORTED_MODES:
        raise errors.UnsupportedModeError(
            f"Unsupported mode '{mode}', lidario can only read files "
            f"(modes: {', '.join(SUPPORTED_MODES)})"
        )

    file_type = get_file_type(path)
    if file_type is FileType.LAS:
        lidar_file = _open_las(path, mode)
    elif file_type is FileType.LAZ:
        lidar_file = _open_laz(path, mode, laz_backend)
    elif not os.path.isfile(path):
        raise errors.OpenError(f"No such file: '{path}'")
    else:
        raise errors.FormatError(f"'{path}' is neither a LAS nor a LAZ file")

    logger.debug(f"Opened {lidar_file}")
    return lidar_file


def _open_las(path: PathLike, mode: str) -> LidarFile:
    try:
        stream = open(path, mode="rb")
    except OSError as e:
        raise errors.OpenError(f"Could not open '{path}': {e}") from e

    try:
        las_header = LasHeader.read_from(stream)
        if las_header.are_points_compressed:
            raise errors.FormatError(
                f"'{path}' has a .las extension but holds compressed points"
            )
        header = normalize_las_header(
            las_header, file_size=os.fstat(stream.fileno()).st_size
        )
        point_reader = UncompressedPointReader(stream, header, path)
        if mode == "r":
            point_reader.prepare()
    except Exception:
        stream.close()
        raise

    return LidarFile(path, mode, header, point_reader, forward_only=False)


def _open_laz(path: PathLike, mode: str, laz_backend: LazBackendArg) -> LidarFile:
    decoder, are_points_compressed = _open_decoder(path, laz_backend)
    try:
        header = normalize_laz_header(decoder.get_header(), are_points_compressed)
    except errors.CodecError as e:
        decoder.close()
        raise errors.OpenError(f"Could not get the header of '{path}': {e}") from e
    except Exception:
        decoder.close()
        raise

    point_reader = LazPointReader(decoder, path)
    if mode == "r":
        try:
            point_reader.prepare()
        except errors.CodecError as e:
            decoder.close()
            raise errors.OpenError(str(e)) from e
    return LidarFile(path, mode, header, point_reader, forward_only=True)


def _open_decoder(
    path: PathLike, laz_backend: LazBackendArg
) -> Tuple[ILazDecoder, bool]:
    """Opens the file with the first of the backends that succeeds.

    Backends that fail are logged, the error of the last one is
    the cause of the OpenError raised if none succeeds.
    Errors about the content of the file are not backend specific,
    they are raised right away.
    """
    if laz_backend is None:
        laz_backend = LazBackend.detect_available()

    try:
        backends = tuple(laz_backend)
    except TypeError:
        backends = (laz_backend,)

    if not backends:
        raise errors.OpenError(
            f"No LazBackend available, cannot decompress '{path}', "
            f"install lazrs or laszip"
        )

    last_error: Optional[Exception] = None
    for backend in backends:
        if not backend.is_available():
            last_error = errors.OpenError(f"The '{backend}' is not available")
            logger.error(last_error)
            continue

        decoder = backend.create_decoder()
        try:
            are_points_compressed = decoder.open_for_read(path)
        except (errors.FormatError, errors.HeaderError):
            decoder.close()
            raise
        except Exception as e:
            last_error = e
            logger.error(f"{backend} could not open '{path}': {e}")
            decoder.close()
        else:
            return decoder, are_points_compressed

    raise errors.OpenError(
        f"Could not open '{path}' with any LazBackend: {last_error}"
    ) from last_error
