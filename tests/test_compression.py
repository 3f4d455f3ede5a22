import numpy as np
import pytest

import lidario
from lidario import errors
from lidario.compression import (
    ILazBackend,
    LazBackend,
    compressed_id_to_uncompressed,
    is_point_format_compressed,
)

from .conftest import ALL_LAZ_BACKEND, make_points, write_las, write_laz


@pytest.mark.parametrize(
    "point_format_id,compressed",
    [(3, False), (3 | 0x80, True), (0x80, True), (3 | 0xC0, False), (0x40, False)],
)
def test_is_point_format_compressed(point_format_id, compressed):
    assert is_point_format_compressed(point_format_id) == compressed


def test_compressed_id_to_uncompressed():
    assert compressed_id_to_uncompressed(3 | 0x80) == 3
    assert compressed_id_to_uncompressed(1) == 1


def test_detect_available():
    available = LazBackend.detect_available()
    assert all(backend.is_available() for backend in available)
    assert all(isinstance(backend, ILazBackend) for backend in LazBackend)
    assert lidario.LazBackend is LazBackend


@pytest.mark.skipif(not ALL_LAZ_BACKEND, reason="No Laz Backend installed")
@pytest.mark.parametrize("laz_backend", ALL_LAZ_BACKEND)
def test_backend_creates_decoders(laz_backend):
    decoder = laz_backend.create_decoder()
    assert decoder.get_last_error() == ""
    decoder.close()


@pytest.mark.skipif(not ALL_LAZ_BACKEND, reason="No Laz Backend installed")
@pytest.mark.parametrize("laz_backend", ALL_LAZ_BACKEND)
def test_backend_open_missing_file(tmp_path, laz_backend):
    with pytest.raises(lidario.errors.CodecError):
        laz_backend.create_decoder().open_for_read(tmp_path / "missing.laz")


def assert_same_points(las_file, laz_file, count):
    for i in range(count):
        las_point, laz_point = las_file.read_point_at(i), laz_file.read_point_at(i)
        assert np.allclose(las_point.xyz(), laz_point.xyz(), rtol=0.0, atol=1e-6)
        assert las_point.intensity == laz_point.intensity
        assert las_point.returns == laz_point.returns
        assert las_point.classification_fields == laz_point.classification_fields
        assert las_point.scan_angle_rank == laz_point.scan_angle_rank
        assert las_point.user_data == laz_point.user_data
        assert las_point.point_source_id == laz_point.point_source_id
        assert las_point.has_gps_time() == laz_point.has_gps_time()
        if las_point.has_gps_time():
            assert las_point.gps_time == laz_point.gps_time
        if las_point.has_color():
            assert las_point.color == laz_point.color


@pytest.mark.skipif(not ALL_LAZ_BACKEND, reason="No Laz Backend installed")
@pytest.mark.parametrize("laz_backend", ALL_LAZ_BACKEND)
def test_read_compressed_points(tmp_path, laz_backend, point_format_id):
    points = make_points(point_format_id, 300, seed=point_format_id)
    options = dict(
        scales=(0.0001, 0.001, 0.01), offsets=(512_345.0, 4_123_456.0, -12.0)
    )
    las_path = write_las(tmp_path / "a.las", points, point_format_id, **options)
    laz_path = write_laz(tmp_path / "a.laz", points, point_format_id, **options)

    with lidario.open_lidar(las_path) as las, lidario.open_lidar(
        laz_path, laz_backend=laz_backend
    ) as laz:
        assert laz.is_compressed()
        assert laz.get_point_count() == len(points)
        assert laz.get_header().point_format_id == point_format_id

        assert_same_points(las, laz, len(points))

        with pytest.raises(errors.EndOfStreamError):
            laz.read_point_at(len(points))


@pytest.mark.skipif(not ALL_LAZ_BACKEND, reason="No Laz Backend installed")
@pytest.mark.parametrize("laz_backend", ALL_LAZ_BACKEND)
@pytest.mark.parametrize("options", [dict(version=(1, 4)), dict(record_length=34 + 5)])
def test_read_compressed_points_variants(tmp_path, laz_backend, options):
    points = make_points(3, 50, seed=7)
    las_path = write_las(tmp_path / "a.las", points, 3, **options)
    laz_path = write_laz(tmp_path / "a.laz", points, 3, **options)

    with lidario.open_lidar(las_path) as las, lidario.open_lidar(
        laz_path, mode="rh", laz_backend=laz_backend
    ) as laz:
        assert laz.get_point_count() == len(points)
        assert_same_points(las, laz, len(points))
        assert list(laz) == []
