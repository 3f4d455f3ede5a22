"""  This module contains things like the definitions of the point formats dimensions,
the mapping between dimension names and their type and the bit masks of the
sub fields packed into a single byte
"""

from collections import UserDict
from enum import Enum
from typing import Dict, Generic, Iterable, List, Mapping, NamedTuple, Tuple, TypeVar

import numpy as np

from .. import errors

ValueType = TypeVar("ValueType")


class PointFormatDict(UserDict, Generic[ValueType]):
    """Simple wrapper around a dict that changes
    the exception raised when accessing a key that is not-present

    """

    def __init__(self, wrapped_dict: Dict[int, ValueType]):
        super().__init__(wrapped_dict)

    def __getitem__(self, key: int) -> ValueType:
        try:
            return self.data[key]
        except KeyError:
            raise errors.PointFormatNotSupported(key) from None


class SubField(NamedTuple):
    name: str
    mask: int


def _point_format_to_dtype(
    point_format: Iterable[str], dimensions_to_type: Mapping[str, np.dtype]
) -> np.dtype:
    """build the numpy.dtype for a point format

    Parameters:
    ----------
    point_format : iterable of str
        The dimensions names of the point format
    dimensions : dict
        The dictionary of dimensions
    Returns
    -------
    numpy.dtype
        The dtype for the input point format
    """
    return np.dtype(
        [(dim_name, dimensions_to_type[dim_name]) for dim_name in point_format]
    )


# Definition of the points dimensions and formats
# LAS version [1.0, 1.1, 1.2, 1.3, 1.4], point formats 0 to 3
DIMENSIONS_TO_TYPE: Dict[str, np.dtype] = {
    "X": np.dtype("<i4"),
    "Y": np.dtype("<i4"),
    "Z": np.dtype("<i4"),
    "intensity": np.dtype("<u2"),
    "bit_fields": np.dtype("u1"),
    "raw_classification": np.dtype("u1"),
    "scan_angle_rank": np.dtype("i1"),
    "user_data": np.dtype("u1"),
    "point_source_id": np.dtype("<u2"),
    "gps_time": np.dtype("<f8"),
    "red": np.dtype("<u2"),
    "green": np.dtype("<u2"),
    "blue": np.dtype("<u2"),
}

POINT_FORMAT_0: Tuple[str, ...] = (
    "X",
    "Y",
    "Z",
    "intensity",
    "bit_fields",
    "raw_classification",
    "scan_angle_rank",
    "user_data",
    "point_source_id",
)

GPS_TIME_FIELDS_NAMES: Tuple[str, ...] = ("gps_time",)
COLOR_FIELDS_NAMES: Tuple[str, ...] = ("red", "green", "blue")

POINT_FORMAT_DIMENSIONS = PointFormatDict(
    {
        0: POINT_FORMAT_0,
        1: POINT_FORMAT_0 + GPS_TIME_FIELDS_NAMES,
        2: POINT_FORMAT_0 + COLOR_FIELDS_NAMES,
        3: POINT_FORMAT_0 + GPS_TIME_FIELDS_NAMES + COLOR_FIELDS_NAMES,
    }
)

# sub fields of the 'bit_fields' dimension
RETURN_NUMBER_MASK_0 = 0b00000111
NUMBER_OF_RETURNS_MASK_0 = 0b00111000
SCAN_DIRECTION_FLAG_MASK_0 = 0b01000000
EDGE_OF_FLIGHT_LINE_MASK_0 = 0b10000000

# sub fields of the 'raw_classification' dimension
CLASSIFICATION_MASK_0 = 0b00011111
SYNTHETIC_MASK_0 = 0b00100000
KEY_POINT_MASK_0 = 0b01000000
WITHHELD_MASK_0 = 0b10000000

COMPOSED_FIELDS_0: Dict[str, List[SubField]] = {
    "bit_fields": [
        SubField("return_number", RETURN_NUMBER_MASK_0),
        SubField("number_of_returns", NUMBER_OF_RETURNS_MASK_0),
        SubField("scan_direction_flag", SCAN_DIRECTION_FLAG_MASK_0),
        SubField("edge_of_flight_line", EDGE_OF_FLIGHT_LINE_MASK_0),
    ],
    "raw_classification": [
        SubField("classification", CLASSIFICATION_MASK_0),
        SubField("synthetic", SYNTHETIC_MASK_0),
        SubField("key_point", KEY_POINT_MASK_0),
        SubField("withheld", WITHHELD_MASK_0),
    ],
}

# Dict giving the composed fields for each point_format_id
COMPOSED_FIELDS = PointFormatDict(
    {
        0: COMPOSED_FIELDS_0,
        1: COMPOSED_FIELDS_0,
        2: COMPOSED_FIELDS_0,
        3: COMPOSED_FIELDS_0,
    }
)

VERSION_TO_POINT_FMT: Dict[str, Tuple[int, ...]] = {
    "1.0": (0, 1),
    "1.1": (0, 1),
    "1.2": (0, 1, 2, 3),
    "1.3": (0, 1, 2, 3),
    "1.4": (0, 1, 2, 3),
}

# This Dict maps point_format_ids to their numpy.dtype
# the dtype corresponds to the packed data
POINT_FORMATS_DTYPE = PointFormatDict(
    {
        fmt_id: _point_format_to_dtype(point_fmt, DIMENSIONS_TO_TYPE)
        for fmt_id, point_fmt in POINT_FORMAT_DIMENSIONS.items()
    }
)


class DimensionKind(Enum):
    SignedInteger = 0
    UnsignedInteger = 1
    FloatingPoint = 2
    BitField = 3

    @classmethod
    def from_letter(cls, letter: str) -> "DimensionKind":
        if letter == "u":
            return cls.UnsignedInteger
        elif letter == "i":
            return cls.SignedInteger
        elif letter == "f":
            return cls.FloatingPoint
        else:
            raise ValueError(f"Unknown type letter '{letter}'")


def num_bit_set(n: int) -> int:
    """Count the number of bits that are set (1) in the number n

    Brian Kernighan's algorithm
    """
    count = 0
    while n != 0:
        count += 1
        n = n & (n - 1)
    return count


class DimensionInfo(NamedTuple):
    """Tuple that contains information of a dimension"""

    name: str
    kind: DimensionKind
    num_bits: int
    is_standard: bool = True

    @classmethod
    def from_dtype(
        cls, name: str, dtype: np.dtype, is_standard: bool = True
    ) -> "DimensionInfo":
        kind = DimensionKind.from_letter(dtype.base.kind)
        return cls(name, kind, dtype.itemsize * 8, is_standard)

    @classmethod
    def from_bitmask(
        cls, name: str, bit_mask: int, is_standard: bool = True
    ) -> "DimensionInfo":
        return cls(name, DimensionKind.BitField, num_bit_set(bit_mask), is_standard)


def supported_point_formats() -> Tuple[int, ...]:
    """Returns a tuple of the supported point formats"""
    return tuple(POINT_FORMAT_DIMENSIONS.keys())


def supported_versions() -> Tuple[str, ...]:
    """Returns a tuple of the supported LAS versions"""
    return tuple(VERSION_TO_POINT_FMT.keys())


def is_point_fmt_compatible_with_version(point_format_id: int, version: str) -> bool:
    return point_format_id in VERSION_TO_POINT_FMT.get(str(version), ())
