import logging
from abc import abstractmethod
from typing import BinaryIO, Optional, Tuple

import numpy as np

from ..errors import CodecError, LidarioException
from ..header import LasHeader
from ..point.format import PointFormat
from ..point.record import RawPoint, scale_dimension
from ..typehints import PathLike
from .lazbackend import ILazDecoder, LazHeaderView

logger = logging.getLogger(__name__)


def header_view_from_las_header(header: LasHeader) -> LazHeaderView:
    return LazHeaderView(
        version_major=header.version.major,
        version_minor=header.version.minor,
        header_size=header.header_size,
        offset_to_point_data=header.offset_to_point_data,
        number_of_variable_length_records=header.number_of_vlrs,
        point_data_format=header.point_format_id,
        point_data_record_length=header.point_data_record_length,
        number_of_point_records=header.legacy_point_count,
        number_of_points_by_return=tuple(header.number_of_points_by_return),
        x_scale_factor=float(header.scales[0]),
        y_scale_factor=float(header.scales[1]),
        z_scale_factor=float(header.scales[2]),
        x_offset=float(header.offsets[0]),
        y_offset=float(header.offsets[1]),
        z_offset=float(header.offsets[2]),
        max_x=float(header.maxs[0]),
        min_x=float(header.mins[0]),
        max_y=float(header.maxs[1]),
        min_y=float(header.mins[1]),
        max_z=float(header.maxs[2]),
        min_z=float(header.mins[2]),
        extended_number_of_point_records=header.point_count,
    )


class PackedPointDecoder(ILazDecoder):
    """Base of the decoders built on top of a decompressor that
    outputs points in their packed, uncompressed, LAS layout.

    The decompressor is only created when the first point is read,
    subclasses say how to create it and how to get one point out of it.
    """

    def __init__(self) -> None:
        self._source: Optional[BinaryIO] = None
        self._las_header: Optional[LasHeader] = None
        self._decompressor = None
        self._buffer: Optional[bytearray] = None
        self._dtype: Optional[np.dtype] = None
        self._point_format: Optional[PointFormat] = None
        self._current: Optional[RawPoint] = None
        self._points_read = 0
        self._last_error = ""

    @abstractmethod
    def _create_decompressor(self, source: BinaryIO, header: LasHeader):
        ...

    @abstractmethod
    def _decompress_into(self, buffer: bytearray) -> None:
        ...

    def open_for_read(self, path: PathLike) -> bool:
        if self._source is not None:
            self._fail("The decoder is already open")
        try:
            source = open(path, mode="rb")
        except OSError as e:
            self._fail(str(e), e)

        try:
            self._las_header = LasHeader.read_from(source)
        except LidarioException as e:
            source.close()
            self._last_error = str(e)
            raise
        self._source = source
        return self._las_header.are_points_compressed

    def get_header(self) -> LazHeaderView:
        return header_view_from_las_header(self._opened_header())

    def prepare(self) -> None:
        header = self._opened_header()
        if self._decompressor is None and header.point_count > 0:
            self._start(header)

    def read_next_point(self) -> None:
        header = self._opened_header()
        if self._points_read >= header.point_count:
            self._fail("EOF: no more points")

        if self._decompressor is None:
            self._start(header)

        try:
            self._decompress_into(self._buffer)
        except Exception as e:
            self._fail(str(e), e)

        record = np.frombuffer(self._buffer, dtype=self._dtype)[0]
        self._current = RawPoint.from_record(record, self._point_format)
        self._points_read += 1

    def get_current_point_fields(self) -> RawPoint:
        if self._current is None:
            self._fail("No point was read yet")
        return self._current

    def get_coordinates(self) -> Tuple[float, float, float]:
        point = self.get_current_point_fields()
        header = self._las_header
        return tuple(
            float(scale_dimension(value, scale, offset))
            for value, scale, offset in zip(
                (point.X, point.Y, point.Z), header.scales, header.offsets
            )
        )

    def close(self) -> None:
        if self._source is None:
            return
        source, self._source = self._source, None
        self._decompressor = None
        self._current = None
        try:
            source.close()
        except OSError as e:
            self._fail(str(e), e)

    def get_last_error(self) -> str:
        return self._last_error

    def _start(self, header: LasHeader) -> None:
        try:
            self._point_format = PointFormat(header.uncompressed_point_format_id)
            self._dtype = self._point_format.dtype(header.point_data_record_length)
        except (LidarioException, ValueError) as e:
            self._fail(str(e), e)

        self._buffer = bytearray(self._dtype.itemsize)
        try:
            self._decompressor = self._create_decompressor(self._source, header)
        except Exception as e:
            self._fail(str(e), e)
        logger.debug(f"{self.__class__.__name__} started decompressing points")

    def _opened_header(self) -> LasHeader:
        if self._source is None or self._las_header is None:
            self._fail("The decoder is not open")
        return self._las_header

    def _fail(self, message: str, cause: Optional[BaseException] = None):
        self._last_error = message
        raise CodecError(message) from cause
