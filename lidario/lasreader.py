import logging
from typing import BinaryIO, Optional

import numpy as np

from . import errors
from ._pointreader import IPointReader
from .canonical import CanonicalHeader
from .point.record import RawPoint
from .typehints import PathLike

logger = logging.getLogger(__name__)


class UncompressedPointReader(IPointReader):
    """Implementation of IPointReader for the simple uncompressed case.

    All the point records are read in one go the first time they are needed,
    they are then kept in a numpy structured array, which gives random access.
    """

    def __init__(
        self, source: BinaryIO, header: CanonicalHeader, path: PathLike
    ) -> None:
        self._source = source
        self.header = header
        self.path = path
        self.point_format = header.point_format
        self._points: Optional[np.ndarray] = None

    @property
    def source(self) -> BinaryIO:
        return self._source

    @property
    def points_loaded(self) -> bool:
        return self._points is not None

    def prepare(self) -> None:
        self._load_points("Failed to load the points")

    def read_point(self, index: int) -> RawPoint:
        self._load_points(f"Failed to read point {index}")
        return RawPoint.from_record(self._points[index], self.point_format)

    def close(self) -> None:
        self._points = None
        self._source.close()

    def _load_points(self, operation: str) -> None:
        if self._points is not None:
            return

        header = self.header
        dtype = self.point_format.dtype(header.point_data_record_length)
        num_bytes = header.point_count * dtype.itemsize

        if num_bytes == 0:
            self._points = np.zeros(0, dtype=dtype)
            return

        try:
            self._source.seek(header.offset_to_point_data)
            try:
                readinto = self._source.readinto
            except AttributeError:
                data = bytearray(self._source.read(num_bytes))
            else:
                data = bytearray(num_bytes)
                num_read = readinto(data)
                if num_read < len(data):
                    data = data[:num_read]
        except OSError as e:
            raise errors.OpenError(f"{operation} of '{self.path}': {e}") from e

        if len(data) < num_bytes:
            raise errors.HeaderError(
                f"{operation} of '{self.path}': could only read "
                f"{len(data) // dtype.itemsize} of the {header.point_count} points"
            )
        self._points = np.frombuffer(data, dtype=dtype)
        logger.debug(f"Loaded {len(self._points)} points of '{self.path}'")
