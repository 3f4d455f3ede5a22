""" Contains the classes that represent a single point of a LAS/LAZ file.

Points read from a backend first come as a :class:`RawPoint`, where sub fields
are still packed and coordinates are whatever the backend gives (integers for
LAS, reals for the LAZ decoder). :func:`build_point` turns it into one of the
point record variants, the variant being selected by the point format id.
"""

import enum
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple, Union

import numpy as np

from .. import errors
from .format import PointFormat
from .packing import (
    ClassificationBitField,
    ReturnBitField,
    decode_classification_field,
    decode_return_field,
    encode_classification_field,
    encode_return_field,
)


def scale_dimension(array_dim, scale, offset):
    return (array_dim * scale) + offset


def unscale_dimension(array_dim, scale, offset):
    return np.round((np.array(array_dim) - offset) / scale)


class CoordinateMode(enum.Enum):
    """How the coordinates handed by a backend must be interpreted"""

    #: Coordinates are the integers stored in the file, they need scale & offset
    SCALED_INTEGER = 0
    #: Coordinates are already real world values
    REAL = 1


class CoordinateTransform(NamedTuple):
    """Per axis linear transform between the integers stored in the file
    and the real world coordinates

    >>> t = CoordinateTransform((0.01, 0.01, 0.01), (100.0, 0.0, 0.0))
    >>> t.apply(150, 20, -3)
    (101.5, 0.2, -0.03)
    >>> t.unapply(101.5, 0.2, -0.03)
    (150, 20, -3)
    """

    scales: Tuple[float, float, float]
    offsets: Tuple[float, float, float]
    mode: CoordinateMode = CoordinateMode.SCALED_INTEGER

    def apply(self, x, y, z) -> Tuple[float, float, float]:
        """Returns the real world coordinates,
        values are returned as is when the mode is REAL
        """
        if self.mode == CoordinateMode.REAL:
            return float(x), float(y), float(z)
        return tuple(
            float(scale_dimension(value, scale, offset))
            for value, scale, offset in zip((x, y, z), self.scales, self.offsets)
        )

    def unapply(self, x, y, z) -> Tuple[int, int, int]:
        """Returns the integers that would be stored in the file"""
        return tuple(
            int(unscale_dimension(value, scale, offset))
            for value, scale, offset in zip((x, y, z), self.scales, self.offsets)
        )


class Color(NamedTuple):
    red: int
    green: int
    blue: int


class RawPoint(NamedTuple):
    """A point as given by a backend, nothing is decoded yet"""

    X: Union[int, float]
    Y: Union[int, float]
    Z: Union[int, float]
    intensity: int
    bit_fields: int
    raw_classification: int
    scan_angle_rank: int
    user_data: int
    point_source_id: int
    gps_time: Optional[float] = None
    color: Optional[Color] = None

    @classmethod
    def from_record(cls, record: np.void, point_format: PointFormat) -> "RawPoint":
        """Builds the raw point from an element of a structured array
        whose dtype comes from :meth:`PointFormat.dtype`
        """
        gps_time = float(record["gps_time"]) if point_format.has_gps_time else None
        if point_format.has_color:
            color = Color(int(record["red"]), int(record["green"]), int(record["blue"]))
        else:
            color = None
        return cls(
            X=int(record["X"]),
            Y=int(record["Y"]),
            Z=int(record["Z"]),
            intensity=int(record["intensity"]),
            bit_fields=int(record["bit_fields"]),
            raw_classification=int(record["raw_classification"]),
            scan_angle_rank=int(record["scan_angle_rank"]),
            user_data=int(record["user_data"]),
            point_source_id=int(record["point_source_id"]),
            gps_time=gps_time,
            color=color,
        )


@dataclass(frozen=True)
class PointRecord0:
    """Point with the fields every point format has"""

    x: float
    y: float
    z: float
    intensity: int
    returns: ReturnBitField
    classification_fields: ClassificationBitField
    scan_angle_rank: int
    user_data: int
    point_source_id: int

    point_format_id = 0

    def has_gps_time(self) -> bool:
        return False

    def has_color(self) -> bool:
        return False

    def xyz(self) -> Tuple[float, float, float]:
        return self.x, self.y, self.z

    @property
    def return_number(self) -> int:
        return self.returns.return_number

    @property
    def number_of_returns(self) -> int:
        return self.returns.number_of_returns

    @property
    def scan_direction_flag(self) -> bool:
        return self.returns.scan_direction_flag

    @property
    def edge_of_flight_line(self) -> bool:
        return self.returns.edge_of_flight_line

    @property
    def classification(self) -> int:
        return self.classification_fields.classification

    @property
    def synthetic(self) -> bool:
        return self.classification_fields.synthetic

    @property
    def key_point(self) -> bool:
        return self.classification_fields.key_point

    @property
    def withheld(self) -> bool:
        return self.classification_fields.withheld

    @property
    def bit_fields(self) -> int:
        """The return sub fields, packed back into their byte"""
        return encode_return_field(self.returns)

    @property
    def raw_classification(self) -> int:
        """The classification and its flags, packed back into their byte"""
        return encode_classification_field(self.classification_fields)


@dataclass(frozen=True)
class PointRecord1(PointRecord0):
    gps_time: float

    point_format_id = 1

    def has_gps_time(self) -> bool:
        return True


@dataclass(frozen=True)
class PointRecord2(PointRecord0):
    color: Color

    point_format_id = 2

    def has_color(self) -> bool:
        return True


@dataclass(frozen=True)
class PointRecord3(PointRecord0):
    gps_time: float
    color: Color

    point_format_id = 3

    def has_gps_time(self) -> bool:
        return True

    def has_color(self) -> bool:
        return True


PointRecord = Union[PointRecord0, PointRecord1, PointRecord2, PointRecord3]

POINT_RECORD_TYPES = {
    0: PointRecord0,
    1: PointRecord1,
    2: PointRecord2,
    3: PointRecord3,
}


def build_point(
    point_format_id: int,
    raw_point: RawPoint,
    transform: Optional[CoordinateTransform] = None,
) -> PointRecord:
    """Builds the point record variant of the point format
    from the raw point

    The transform is used to get real world coordinates, when it is None
    the raw coordinates are taken as real world coordinates.

    >>> raw = RawPoint(150, 20, -3, 12, 0b0001_0001, 2, -5, 0, 7, gps_time=1.5)
    >>> point = build_point(1, raw, CoordinateTransform((0.01,) * 3, (0.0,) * 3))
    >>> point.xyz(), point.has_gps_time(), point.has_color()
    ((1.5, 0.2, -0.03), True, False)
    >>> point.return_number, point.number_of_returns, point.classification
    (1, 2, 2)
    """
    try:
        record_type = POINT_RECORD_TYPES[point_format_id]
    except KeyError:
        raise errors.PointFormatNotSupported(point_format_id) from None

    if transform is None:
        x, y, z = float(raw_point.X), float(raw_point.Y), float(raw_point.Z)
    else:
        x, y, z = transform.apply(raw_point.X, raw_point.Y, raw_point.Z)

    fields = dict(
        x=x,
        y=y,
        z=z,
        intensity=raw_point.intensity,
        returns=decode_return_field(raw_point.bit_fields),
        classification_fields=decode_classification_field(
            raw_point.raw_classification
        ),
        scan_angle_rank=raw_point.scan_angle_rank,
        user_data=raw_point.user_data,
        point_source_id=raw_point.point_source_id,
    )
    if record_type in (PointRecord1, PointRecord3):
        fields["gps_time"] = _required(raw_point.gps_time, "gps_time", point_format_id)
    if record_type in (PointRecord2, PointRecord3):
        fields["color"] = Color(
            *_required(raw_point.color, "color", point_format_id)
        )
    return record_type(**fields)


def _required(value, name: str, point_format_id: int):
    if value is None:
        raise errors.FormatError(
            f"Point format {point_format_id} requires '{name}', "
            f"the backend did not provide it"
        )
    return value
