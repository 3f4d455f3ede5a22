""" This module contains functions to pack and unpack the sub fields
that share a single byte of a point record
"""
from typing import NamedTuple

from . import dims


def least_significant_bit_set(mask: int) -> int:
    """Return the least significant bit set

    The index is 0-indexed.
    Returns -1 is no bit is set

    >>> least_significant_bit_set(0b0000_0001)
    0
    >>> least_significant_bit_set(0b0001_0000)
    4
    >>> least_significant_bit_set(0b0000_0000)
    -1
    """
    return (mask & -mask).bit_length() - 1


def unpack(source, mask: int):
    """Extracts the sub field selected by the mask and shifts it down.

    Works on ints as well as on numpy arrays of unsigned ints

    >>> unpack(0b0010_1010, dims.NUMBER_OF_RETURNS_MASK_0)
    5
    """
    return (source & mask) >> least_significant_bit_set(mask)


def pack(value: int, mask: int) -> int:
    """Shifts the value into the position selected by the mask,
    bits that do not fit in the mask are dropped.

    Works on ints as well as on numpy arrays of unsigned ints

    >>> pack(5, dims.NUMBER_OF_RETURNS_MASK_0)
    40
    >>> pack(0b1111, dims.RETURN_NUMBER_MASK_0)
    7
    """
    return (value << least_significant_bit_set(mask)) & mask


class ReturnBitField(NamedTuple):
    """The sub fields of the 'bit_fields' byte

    return_number and number_of_returns are expected to be in 1..7 with
    return_number <= number_of_returns, this is a convention of the
    LAS standard, nothing checks it here.
    """

    return_number: int
    number_of_returns: int
    scan_direction_flag: bool
    edge_of_flight_line: bool


class ClassificationBitField(NamedTuple):
    """The sub fields of the 'raw_classification' byte"""

    classification: int
    synthetic: bool
    key_point: bool
    withheld: bool


def decode_return_field(byte: int) -> ReturnBitField:
    """
    >>> decode_return_field(0b1001_0001)
    ReturnBitField(return_number=1, number_of_returns=2, scan_direction_flag=False, edge_of_flight_line=True)
    """
    byte = int(byte)
    return ReturnBitField(
        return_number=unpack(byte, dims.RETURN_NUMBER_MASK_0),
        number_of_returns=unpack(byte, dims.NUMBER_OF_RETURNS_MASK_0),
        scan_direction_flag=bool(byte & dims.SCAN_DIRECTION_FLAG_MASK_0),
        edge_of_flight_line=bool(byte & dims.EDGE_OF_FLIGHT_LINE_MASK_0),
    )


def encode_return_field(field: ReturnBitField) -> int:
    """
    >>> encode_return_field(ReturnBitField(1, 2, False, True))
    145
    """
    return (
        pack(field.return_number, dims.RETURN_NUMBER_MASK_0)
        | pack(field.number_of_returns, dims.NUMBER_OF_RETURNS_MASK_0)
        | pack(bool(field.scan_direction_flag), dims.SCAN_DIRECTION_FLAG_MASK_0)
        | pack(bool(field.edge_of_flight_line), dims.EDGE_OF_FLIGHT_LINE_MASK_0)
    )


def decode_classification_field(byte: int) -> ClassificationBitField:
    """
    >>> decode_classification_field(0b0100_0010)
    ClassificationBitField(classification=2, synthetic=False, key_point=True, withheld=False)
    """
    byte = int(byte)
    return ClassificationBitField(
        classification=unpack(byte, dims.CLASSIFICATION_MASK_0),
        synthetic=bool(byte & dims.SYNTHETIC_MASK_0),
        key_point=bool(byte & dims.KEY_POINT_MASK_0),
        withheld=bool(byte & dims.WITHHELD_MASK_0),
    )


def encode_classification_field(field: ClassificationBitField) -> int:
    """The flags are encoded from the boolean fields, so they can be
    changed independently of the classification value

    >>> encode_classification_field(ClassificationBitField(2, True, False, True))
    162
    """
    return (
        pack(field.classification, dims.CLASSIFICATION_MASK_0)
        | pack(bool(field.synthetic), dims.SYNTHETIC_MASK_0)
        | pack(bool(field.key_point), dims.KEY_POINT_MASK_0)
        | pack(bool(field.withheld), dims.WITHHELD_MASK_0)
    )
