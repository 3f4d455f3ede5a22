import pytest

import lidario
from lidario import errors
from lidario.point import dims
from lidario.point.format import EXTRA_BYTES_FIELD_NAME, PointFormat


@pytest.mark.parametrize("point_format_id,size", [(0, 20), (1, 28), (2, 26), (3, 34)])
def test_point_format_size(point_format_id, size):
    point_format = PointFormat(point_format_id)
    assert point_format.size == size
    assert point_format.dtype().itemsize == size


def test_point_format_capabilities():
    assert not PointFormat(0).has_gps_time
    assert not PointFormat(0).has_color
    assert PointFormat(1).has_gps_time
    assert PointFormat(2).has_color
    assert PointFormat(3).has_gps_time and PointFormat(3).has_color


def test_sub_fields_dimensions():
    point_format = PointFormat(0)
    assert point_format["return_number"].num_bits == 3
    assert point_format["classification"].num_bits == 5
    assert point_format["withheld"].num_bits == 1
    assert "bit_fields" not in list(point_format.dimension_names)

    with pytest.raises(ValueError):
        point_format.dimension_by_name("gps_time")


def test_dtype_with_extra_bytes():
    dtype = PointFormat(1).dtype(record_length=32)
    assert dtype.itemsize == 32
    assert dtype.names[-1] == EXTRA_BYTES_FIELD_NAME

    with pytest.raises(ValueError):
        PointFormat(1).dtype(record_length=20)


@pytest.mark.parametrize("point_format_id", [4, 6, 10, 42])
def test_unsupported_point_formats(point_format_id):
    with pytest.raises(errors.PointFormatNotSupported):
        PointFormat(point_format_id)


def test_supported_point_formats_and_versions():
    assert lidario.supported_point_formats() == (0, 1, 2, 3)
    assert lidario.supported_versions() == ("1.0", "1.1", "1.2", "1.3", "1.4")
    assert dims.is_point_fmt_compatible_with_version(3, "1.2")
    assert not dims.is_point_fmt_compatible_with_version(3, "1.0")
    assert not dims.is_point_fmt_compatible_with_version(0, "2.0")
