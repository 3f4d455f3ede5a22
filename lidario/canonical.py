""" The canonical header, the one representation of a header
both backends agree on.

The LAS backend parses the header itself (:class:`lidario.header.LasHeader`)
while the LAZ backend gets it from the decoder
(:class:`lidario._compression.lazbackend.LazHeaderView`), both go through
a normalizer that validates the values and produces a :class:`CanonicalHeader`.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ._compression.format import (
    compressed_id_to_uncompressed,
    is_point_format_compressed,
)
from ._compression.lazbackend import LazHeaderView
from .errors import HeaderError, PointFormatNotSupported
from .header import LAS_FILE_SIGNATURE, LasHeader, Version
from .point import dims
from .point.format import PointFormat
from .point.record import CoordinateMode, CoordinateTransform

logger = logging.getLogger(__name__)

MAX_POINT_COUNT = 0xFFFF_FFFF

Triple = Tuple[float, float, float]


@dataclass(frozen=True)
class CanonicalHeader:
    signature: str
    version: Version
    header_size: int
    offset_to_point_data: int
    number_of_vlrs: int
    #: The point format id, without the compression bits
    point_format_id: int
    point_data_record_length: int
    point_count: int
    scales: Triple
    offsets: Triple
    mins: Triple
    maxs: Triple
    number_of_points_by_return: Tuple[int, int, int, int, int]
    are_points_compressed: bool
    coordinate_mode: CoordinateMode

    @property
    def number_of_point_records(self) -> int:
        return self.point_count

    @property
    def point_format(self) -> PointFormat:
        return PointFormat(self.point_format_id)

    @property
    def transform(self) -> CoordinateTransform:
        """The transform to apply to the coordinates the backend gives"""
        return CoordinateTransform(self.scales, self.offsets, self.coordinate_mode)

    def __repr__(self) -> str:
        return (
            f"<CanonicalHeader({self.version}, point format: {self.point_format_id}, "
            f"{self.point_count} points)>"
        )


def normalize_las_header(
    header: LasHeader, file_size: Optional[int] = None
) -> CanonicalHeader:
    """Validates the header parsed from a LAS file and normalizes it.

    When `file_size` is given, the point data the header announces
    must fit in the file.
    """
    signature = header.file_signature
    if isinstance(signature, bytes):
        signature = signature.decode("ascii", errors="replace")

    canonical = CanonicalHeader(
        signature=signature,
        version=Version(int(header.version.major), int(header.version.minor)),
        header_size=int(header.header_size),
        offset_to_point_data=int(header.offset_to_point_data),
        number_of_vlrs=int(header.number_of_vlrs),
        point_format_id=header.uncompressed_point_format_id,
        point_data_record_length=int(header.point_data_record_length),
        point_count=int(header.point_count),
        scales=_triple(header.scales),
        offsets=_triple(header.offsets),
        mins=_triple(header.mins),
        maxs=_triple(header.maxs),
        number_of_points_by_return=_counts_by_return(
            header.number_of_points_by_return
        ),
        are_points_compressed=header.are_points_compressed,
        coordinate_mode=CoordinateMode.SCALED_INTEGER,
    )
    _validate(canonical)

    if file_size is not None and not canonical.are_points_compressed:
        end_of_points = (
            canonical.offset_to_point_data
            + canonical.point_count * canonical.point_data_record_length
        )
        if end_of_points > file_size:
            raise HeaderError(
                f"The header announces {canonical.point_count} points "
                f"ending at byte {end_of_points}, but the file is only "
                f"{file_size} bytes long"
            )
    return canonical


def normalize_laz_header(
    view: LazHeaderView, are_points_compressed: Optional[bool] = None
) -> CanonicalHeader:
    """Validates the header a LAZ decoder gives and normalizes it.

    `are_points_compressed` is what the decoder said when opening the file,
    when None it is deduced from the point format id.

    The decoder hands real world coordinates, so the header's coordinate
    mode is :attr:`CoordinateMode.REAL`.
    """
    version = Version(int(view.version_major), int(view.version_minor))
    point_count = int(view.number_of_point_records)
    if version.minor >= 4 and view.extended_number_of_point_records:
        point_count = int(view.extended_number_of_point_records)

    if are_points_compressed is None:
        are_points_compressed = is_point_format_compressed(view.point_data_format)

    canonical = CanonicalHeader(
        signature=LAS_FILE_SIGNATURE.decode(),
        version=version,
        header_size=int(view.header_size),
        offset_to_point_data=int(view.offset_to_point_data),
        number_of_vlrs=int(view.number_of_variable_length_records),
        point_format_id=compressed_id_to_uncompressed(int(view.point_data_format)),
        point_data_record_length=int(view.point_data_record_length),
        point_count=point_count,
        scales=_triple((view.x_scale_factor, view.y_scale_factor, view.z_scale_factor)),
        offsets=_triple((view.x_offset, view.y_offset, view.z_offset)),
        mins=_triple((view.min_x, view.min_y, view.min_z)),
        maxs=_triple((view.max_x, view.max_y, view.max_z)),
        number_of_points_by_return=_counts_by_return(view.number_of_points_by_return),
        are_points_compressed=bool(are_points_compressed),
        coordinate_mode=CoordinateMode.REAL,
    )
    _validate(canonical)
    return canonical


def _validate(header: CanonicalHeader) -> None:
    if header.point_format_id not in dims.supported_point_formats():
        raise PointFormatNotSupported(header.point_format_id)

    if not dims.is_point_fmt_compatible_with_version(
        header.point_format_id, str(header.version)
    ):
        logger.warning(
            f"Point format {header.point_format_id} is not defined "
            f"for LAS {header.version}"
        )

    if any(scale == 0.0 for scale in header.scales):
        raise HeaderError(f"Scale factors cannot be zero, got {header.scales}")

    if header.point_count > MAX_POINT_COUNT:
        raise HeaderError(
            f"Point count {header.point_count} does not fit in 32 bits"
        )

    point_size = PointFormat(header.point_format_id).size
    if header.point_data_record_length < point_size:
        raise HeaderError(
            f"Point record length ({header.point_data_record_length}) is smaller "
            f"than the size of point format {header.point_format_id} ({point_size})"
        )
    if header.point_data_record_length > point_size:
        logger.warning(
            f"Point records have {header.point_data_record_length - point_size} "
            f"extra bytes, they will be ignored"
        )

    if header.point_count > 0:
        for axis, min_, max_ in zip("xyz", header.mins, header.maxs):
            if min_ > max_:
                raise HeaderError(
                    f"Bounds of the {axis} axis are inverted (min {min_} > max {max_})"
                )


def _triple(values: Sequence[float]) -> Triple:
    return tuple(float(v) for v in values)


def _counts_by_return(counts: Sequence[int]) -> Tuple[int, int, int, int, int]:
    counts = [int(c) for c in counts][:5]
    counts.extend([0] * (5 - len(counts)))
    return tuple(counts)
