import logging
from typing import Iterator, Tuple

from ._pointreader import IPointReader
from ._rwlock import RWLock
from .access import AccessController, AccessState
from .canonical import CanonicalHeader
from .point.record import PointRecord, RawPoint, build_point
from .typehints import PathLike

logger = logging.getLogger(__name__)


class LidarFile:
    """A LAS or LAZ file opened for reading, see :func:`lidario.open_lidar`.

    Whatever the file is, points are read with :meth:`read_point_at`.
    LAS files can be read in any order, LAZ files only in order, starting
    from the first point.

    A handle can be shared between threads: header queries run concurrently,
    point reads and :meth:`close` are serialized.

    >>> with open_lidar("tests/data/simple.las") as f:  # doctest: +SKIP
    ...     point = f.read_point_at(0)
    ...     x, y, z = f.get_xyz(1)
    """

    def __init__(
        self,
        path: PathLike,
        mode: str,
        header: CanonicalHeader,
        point_reader: IPointReader,
        forward_only: bool,
    ) -> None:
        self.path = path
        self.mode = mode
        self._header = header
        self._transform = header.transform
        self._point_reader = point_reader
        self._access = AccessController(header.point_count, forward_only)
        self._lock = RWLock()

    @property
    def closed(self) -> bool:
        return self._access.state == AccessState.CLOSED

    @property
    def next_expected_index(self) -> int:
        """Index of the point following the last one read"""
        return self._access.next_expected_index

    def read_point_at(self, index: int) -> PointRecord:
        """Reads the point at the given index.

        Raises
        ------
        IndexOutOfRangeError
            if the index is negative or not smaller than the point count
            (on LAZ files, an EndOfStreamError)
        SequentialAccessError
            on LAZ files, if the index is not the one of the next point
        ClosedHandleError
            if the file was closed
        CodecError
            if the LAZ decoder failed, now or on a previous read
        """
        raw_point = self._read_raw_point(index)
        return build_point(self._header.point_format_id, raw_point, self._transform)

    def get_xyz(self, index: int) -> Tuple[float, float, float]:
        """Reads the real world coordinates of the point at the given index,
        the same rules as :meth:`read_point_at` apply.
        """
        raw_point = self._read_raw_point(index)
        return self._transform.apply(raw_point.X, raw_point.Y, raw_point.Z)

    def get_header(self) -> CanonicalHeader:
        """Returns the header, still available once the file is closed"""
        with self._lock.read_locked():
            return self._header

    def get_point_count(self) -> int:
        with self._lock.read_locked():
            return self._header.point_count

    def is_compressed(self) -> bool:
        with self._lock.read_locked():
            return self._header.are_points_compressed

    def close(self) -> None:
        """Closes the file, calling it more than once does nothing"""
        with self._lock.write_locked():
            if self._access.state == AccessState.CLOSED:
                return
            self._access.close()
            self._point_reader.close()
            logger.debug(f"Closed '{self.path}'")

    def _read_raw_point(self, index: int) -> RawPoint:
        with self._lock.write_locked():
            with self._access.reading(index):
                raw_point = self._point_reader.read_point(index)
        return raw_point

    def __len__(self) -> int:
        return self.get_point_count()

    def __iter__(self) -> Iterator[PointRecord]:
        """Reads the points from the next expected one up to the last one"""
        for index in range(self._access.next_expected_index, len(self)):
            yield self.read_point_at(index)

    def __enter__(self) -> "LidarFile":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return (
            f"<LidarFile('{self.path}', mode='{self.mode}', "
            f"{self._header.point_count} points, {state})>"
        )
