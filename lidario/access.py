""" Validation of the index of the points a handle is asked for.

LAS files give random access to their points, LAZ files can only
be read in order, one point after the other.
"""
import enum
from contextlib import contextmanager
from typing import Iterator

from . import errors


class AccessState(enum.Enum):
    OPEN = enum.auto()
    #: A backend read failed, the stream cannot be trusted anymore
    FAILED = enum.auto()
    CLOSED = enum.auto()


class AccessController:
    """Keeps the cursor of a handle, that is, the index of the point
    expected to be read next, and validates the indices of reads.

    >>> controller = AccessController(point_count=10, forward_only=True)
    >>> with controller.reading(0):
    ...     pass
    >>> controller.next_expected_index
    1
    >>> controller.check(5)
    Traceback (most recent call last):
    ...
    lidario.errors.SequentialAccessError: Point 5 requested, but this handle can only read points in order, the next point is 1
    """

    def __init__(self, point_count: int, forward_only: bool) -> None:
        self.point_count = point_count
        self.forward_only = forward_only
        self.state = AccessState.OPEN
        self._next_expected_index = 0

    @property
    def next_expected_index(self) -> int:
        return self._next_expected_index

    def check(self, index: int) -> None:
        """Raises if reading the point at `index` is not allowed"""
        if self.state == AccessState.CLOSED:
            raise errors.ClosedHandleError("I/O operation on closed file")
        if self.state == AccessState.FAILED:
            raise errors.CodecError(
                "A previous read failed, the file cannot be read anymore"
            )

        if index < 0:
            raise errors.IndexOutOfRangeError(
                f"Point index {index} is negative"
            )
        if index >= self.point_count:
            error_type = (
                errors.EndOfStreamError
                if self.forward_only
                else errors.IndexOutOfRangeError
            )
            raise error_type(
                f"Point index {index} is out of range, "
                f"the file has {self.point_count} points"
            )
        if self.forward_only and index != self._next_expected_index:
            raise errors.SequentialAccessError(index, self._next_expected_index)

    def advance(self, index: int) -> None:
        self._next_expected_index = index + 1

    def fail(self) -> None:
        if self.state == AccessState.OPEN:
            self.state = AccessState.FAILED

    def close(self) -> None:
        self.state = AccessState.CLOSED

    @contextmanager
    def reading(self, index: int) -> Iterator[None]:
        """Validates the index, then moves the cursor after the point
        if the body succeeds.

        On a forward only handle, a failure in the body leaves the cursor
        where it was and marks the controller as failed.
        """
        self.check(index)
        try:
            yield
        except Exception:
            if self.forward_only:
                self.fail()
            raise
        self.advance(index)
