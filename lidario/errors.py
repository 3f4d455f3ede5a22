""" All the custom exceptions types
"""
from typing import Optional


class LidarioException(Exception):
    pass


class FormatError(LidarioException):
    """The file is not a LAS/LAZ file lidario can read
    (bad signature, extension/content mismatch, unsupported point format)
    """

    pass


class OpenError(LidarioException):
    """The backend failed to initialize or to open the underlying file"""

    pass


class HeaderError(LidarioException):
    """The header holds inconsistent or invalid values"""

    pass


class PointFormatNotSupported(FormatError, HeaderError):
    def __init__(self, point_format_id: int) -> None:
        super().__init__(f"Point format {point_format_id} is not supported")
        self.point_format_id = point_format_id


class SequentialAccessError(LidarioException):
    """A forward-only handle was asked for a point that is not the next one"""

    def __init__(self, requested_index: int, expected_index: int) -> None:
        super().__init__(
            f"Point {requested_index} requested, but this handle can only "
            f"read points in order, the next point is {expected_index}"
        )
        self.requested_index = requested_index
        self.expected_index = expected_index


# Random access on a forward-only backend is an out-of-order read
UnsupportedOperationError = SequentialAccessError


class IndexOutOfRangeError(LidarioException, IndexError):
    pass


class EndOfStreamError(IndexOutOfRangeError):
    pass


class ClosedHandleError(LidarioException):
    pass


class CodecError(LidarioException):
    """The LAZ decoder reported a failure.

    ``decoder_message`` holds the decoder's own message, untouched.
    """

    def __init__(self, message: str, decoder_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.decoder_message = message if decoder_message is None else decoder_message


class UnsupportedModeError(LidarioException):
    pass
