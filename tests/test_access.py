import pytest

from lidario import errors
from lidario.access import AccessController, AccessState


def read(controller: AccessController, index: int) -> None:
    with controller.reading(index):
        pass


def test_forward_only_enforces_order():
    controller = AccessController(point_count=10, forward_only=True)

    with pytest.raises(errors.SequentialAccessError) as error:
        read(controller, 5)
    assert error.value.requested_index == 5
    assert error.value.expected_index == 0

    for i in range(5):
        read(controller, i)
    assert controller.next_expected_index == 5

    read(controller, 5)
    with pytest.raises(errors.SequentialAccessError) as error:
        read(controller, 4)
    assert error.value.expected_index == 6


def test_unsupported_operation_is_sequential_access_error():
    assert errors.UnsupportedOperationError is errors.SequentialAccessError


def test_random_access():
    controller = AccessController(point_count=10, forward_only=False)

    read(controller, 7)
    assert controller.next_expected_index == 8
    read(controller, 2)
    assert controller.next_expected_index == 3
    read(controller, 9)


@pytest.mark.parametrize("forward_only", [True, False])
def test_out_of_range(forward_only):
    controller = AccessController(point_count=3, forward_only=forward_only)

    with pytest.raises(errors.IndexOutOfRangeError):
        read(controller, -1)

    with pytest.raises(errors.IndexOutOfRangeError) as error:
        read(controller, 3)
    assert isinstance(error.value, IndexError)
    assert isinstance(error.value, errors.EndOfStreamError) == forward_only


def test_end_of_stream_is_checked_before_order():
    controller = AccessController(point_count=3, forward_only=True)
    with pytest.raises(errors.EndOfStreamError):
        read(controller, 10)


def test_failed_read_leaves_cursor_and_fails_the_controller():
    controller = AccessController(point_count=10, forward_only=True)
    read(controller, 0)

    with pytest.raises(RuntimeError):
        with controller.reading(1):
            raise RuntimeError("decoder failure")

    assert controller.next_expected_index == 1
    assert controller.state == AccessState.FAILED
    with pytest.raises(errors.CodecError):
        read(controller, 1)


def test_failed_random_read_does_not_fail_the_controller():
    controller = AccessController(point_count=10, forward_only=False)
    with pytest.raises(RuntimeError):
        with controller.reading(1):
            raise RuntimeError("short read")

    assert controller.state == AccessState.OPEN
    read(controller, 1)


@pytest.mark.parametrize("forward_only", [True, False])
def test_closed(forward_only):
    controller = AccessController(point_count=10, forward_only=forward_only)
    controller.close()
    controller.fail()

    assert controller.state == AccessState.CLOSED
    with pytest.raises(errors.ClosedHandleError):
        read(controller, 0)
