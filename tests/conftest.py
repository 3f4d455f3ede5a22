import struct
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Tuple

import numpy as np
import pytest

import lidario
from lidario._compression.decoder import PackedPointDecoder
from lidario._compression.lazbackend import ILazBackend, ILazDecoder
from lidario.header import LAS_HEADERS_SIZE, LasHeader
from lidario.point.format import PointFormat
from lidario.typehints import PathLike
from lidario.vlrs import LASZIP_RECORD_ID, LASZIP_USER_ID

try:
    import lazrs
except ModuleNotFoundError:
    lazrs = None

try:
    import laszip
except ModuleNotFoundError:
    laszip = None

ALL_POINT_FORMATS = [0, 1, 2, 3]

ALL_LAZ_BACKEND = lidario.LazBackend.detect_available()

DEFAULT_SCALES = (0.01, 0.01, 0.01)
DEFAULT_OFFSETS = (1000.0, 2000.0, 0.0)

HEADER_STRUCT = struct.Struct("<4sHH16sBB32s32sHHHIIBHI5I3d3d6d")
VLR_HEADER_STRUCT = struct.Struct("<H16sHH32s")


def make_points(point_format_id: int, count: int, seed: int = 0) -> np.ndarray:
    """Returns `count` random points, as a numpy structured array
    with the layout of point records in a LAS file
    """
    point_format = PointFormat(point_format_id)
    rng = np.random.default_rng(seed)
    points = np.zeros(count, dtype=point_format.dtype())

    points["X"] = rng.integers(-100_000, 100_000, count)
    points["Y"] = rng.integers(-100_000, 100_000, count)
    points["Z"] = rng.integers(-5_000, 5_000, count)
    points["intensity"] = rng.integers(0, 2**16, count)
    number_of_returns = rng.integers(1, 8, count)
    return_number = np.minimum(rng.integers(1, 8, count), number_of_returns)
    points["bit_fields"] = (
        return_number
        | (number_of_returns << 3)
        | (rng.integers(0, 2, count) << 6)
        | (rng.integers(0, 2, count) << 7)
    )
    points["raw_classification"] = rng.integers(0, 256, count)
    points["scan_angle_rank"] = rng.integers(-90, 91, count)
    points["user_data"] = rng.integers(0, 256, count)
    points["point_source_id"] = rng.integers(0, 2**16, count)
    if point_format.has_gps_time:
        points["gps_time"] = rng.uniform(0, 500_000, count)
    if point_format.has_color:
        for name in ("red", "green", "blue"):
            points[name] = rng.integers(0, 2**16, count)
    return points


def las_bytes(
    points: np.ndarray,
    point_format_id: int,
    version: Tuple[int, int] = (1, 2),
    scales: Sequence[float] = DEFAULT_SCALES,
    offsets: Sequence[float] = DEFAULT_OFFSETS,
    compressed: bool = False,
    point_count: Optional[int] = None,
    record_length: Optional[int] = None,
    mins: Optional[Sequence[float]] = None,
    maxs: Optional[Sequence[float]] = None,
    with_laszip_vlr: Optional[bool] = None,
    laszip_record_data: bytes = b"\0" * 34,
) -> Tuple[bytes, bytes]:
    """Returns the header (followed by its VLRs) and the point records
    of a LAS file holding the points.

    `compressed` only sets the compression bit of the point format id
    (and adds a LASzip VLR), records are still uncompressed.
    The other optional parameters override what is computed from the points,
    to write invalid headers.
    """
    version_str = f"{version[0]}.{version[1]}"
    header_size = LAS_HEADERS_SIZE[version_str]
    if with_laszip_vlr is None:
        with_laszip_vlr = compressed

    vlrs = b""
    if with_laszip_vlr:
        vlrs += VLR_HEADER_STRUCT.pack(
            0,
            LASZIP_USER_ID.encode(),
            LASZIP_RECORD_ID,
            len(laszip_record_data),
            b"laszip parameters",
        )
        vlrs += laszip_record_data

    point_size = PointFormat(point_format_id).size
    if record_length is not None and record_length > point_size:
        dtype = PointFormat(point_format_id).dtype(record_length)
    else:
        dtype = PointFormat(point_format_id).dtype()
    if record_length is None:
        record_length = dtype.itemsize
    records = np.zeros(len(points), dtype=dtype)
    for name in points.dtype.names:
        if name in dtype.names:
            records[name] = points[name]

    if point_count is None:
        point_count = len(points)

    scales = np.array(scales, dtype=np.float64)
    offsets = np.array(offsets, dtype=np.float64)
    if len(points):
        xyz = np.stack([points["X"], points["Y"], points["Z"]], axis=1) * scales
        xyz += offsets
        computed_mins, computed_maxs = xyz.min(axis=0), xyz.max(axis=0)
    else:
        computed_mins, computed_maxs = np.zeros(3), np.zeros(3)
    mins = computed_mins if mins is None else mins
    maxs = computed_maxs if maxs is None else maxs

    by_return = [0] * 5
    if len(points):
        return_numbers = points["bit_fields"] & 0b111
        for i in range(5):
            by_return[i] = int(np.count_nonzero(return_numbers == i + 1))

    legacy_point_count = point_count if point_count <= 0xFFFF_FFFF else 0
    point_format_byte = point_format_id | 0x80 if compressed else point_format_id
    header = HEADER_STRUCT.pack(
        b"LASF",
        0,
        0,
        b"\0" * 16,
        version[0],
        version[1],
        b"lidario tests",
        b"conftest",
        1,
        2024,
        header_size,
        header_size + len(vlrs),
        1 if with_laszip_vlr else 0,
        point_format_byte,
        record_length,
        legacy_point_count,
        *by_return,
        *scales,
        *offsets,
        maxs[0],
        mins[0],
        maxs[1],
        mins[1],
        maxs[2],
        mins[2],
    )
    if version[1] >= 3:
        header += struct.pack("<Q", 0)
    if version[1] >= 4:
        header += struct.pack("<QIQ15Q", 0, 0, point_count, *by_return, *[0] * 10)
    assert len(header) == header_size

    return header + vlrs, records.tobytes()


def write_las(
    path: PathLike, points: np.ndarray, point_format_id: int, **kwargs
) -> Path:
    """Writes a LAS file, byte by byte, see `las_bytes` for the parameters"""
    path = Path(path)
    header, records = las_bytes(points, point_format_id, **kwargs)
    with open(path, mode="wb") as f:
        f.write(header)
        f.write(records)
    return path


def write_laz(
    path: PathLike, points: np.ndarray, point_format_id: int, **kwargs
) -> Path:
    """Writes a LAZ file whose points are really compressed,
    by lazrs or else by laszip. Skips the test when neither is installed.
    """
    path = Path(path)
    record_length = kwargs.get("record_length")
    num_extra_bytes = 0
    if record_length is not None:
        num_extra_bytes = record_length - PointFormat(point_format_id).size

    if lazrs is not None:
        laz_vlr = lazrs.LazVlr.new_for_compression(point_format_id, num_extra_bytes)
        header, records = las_bytes(
            points,
            point_format_id,
            compressed=True,
            laszip_record_data=bytes(laz_vlr.record_data()),
            **kwargs,
        )
        with open(path, mode="wb") as f:
            f.write(header)
            # The compressor writes the offset to the chunk table
            # where it starts, so the header and vlrs must be written first
            compressor = lazrs.LasZipCompressor(f, laz_vlr)
            compressor.compress_many(np.frombuffer(records, np.uint8))
            compressor.done()
    elif laszip is not None:
        header, records = las_bytes(points, point_format_id, **kwargs)
        with open(path, mode="wb") as f:
            zipper = laszip.LasZipper(f, header)
            zipper.compress(np.frombuffer(records, np.uint8))
            zipper.done()
    else:
        pytest.skip("Writing a LAZ file needs lazrs or laszip")
    return path


class FakeLazDecoder(PackedPointDecoder):
    """Decoder that 'decompresses' files written by `write_las`
    with `compressed=True`, whose records are not actually compressed
    """

    def __init__(self, backend: "FakeLazBackend") -> None:
        super().__init__()
        self.backend = backend

    def open_for_read(self, path: PathLike) -> bool:
        if self.backend.fail_on_open:
            self._fail("fake decoder cannot open files")
        return super().open_for_read(path)

    def _create_decompressor(self, source: BinaryIO, header: LasHeader):
        if self.backend.fail_on_start:
            raise RuntimeError("fake decoder cannot find the chunk table")
        source.seek(header.offset_to_point_data)
        return source

    def _decompress_into(self, buffer: bytearray) -> None:
        if self._points_read == self.backend.fail_at:
            raise RuntimeError("corrupted chunk")
        data = self._decompressor.read(len(buffer))
        if len(data) < len(buffer):
            raise RuntimeError("unexpected end of data")
        buffer[:] = data

    def close(self) -> None:
        self.backend.num_closes += 1
        super().close()
        if self.backend.fail_on_close:
            self._fail("fake decoder cannot close")


class FakeLazBackend(ILazBackend):
    def __init__(
        self,
        available: bool = True,
        fail_on_open: bool = False,
        fail_at: Optional[int] = None,
        fail_on_close: bool = False,
        fail_on_start: bool = False,
    ) -> None:
        self.available = available
        self.fail_on_open = fail_on_open
        self.fail_on_start = fail_on_start
        self.fail_at = fail_at
        self.fail_on_close = fail_on_close
        self.num_closes = 0
        self.decoders = []

    def is_available(self) -> bool:
        return self.available

    def create_decoder(self) -> ILazDecoder:
        decoder = FakeLazDecoder(self)
        self.decoders.append(decoder)
        return decoder

    def __repr__(self) -> str:
        return "FakeLazBackend"


@pytest.fixture(params=ALL_POINT_FORMATS)
def point_format_id(request):
    return request.param


@pytest.fixture()
def points():
    return make_points(3, 10)


@pytest.fixture()
def las_path(tmp_path, points):
    return write_las(tmp_path / "points.las", points, 3)


@pytest.fixture()
def laz_path(tmp_path, points):
    return write_las(tmp_path / "points.laz", points, 3, compressed=True)


@pytest.fixture()
def fake_backend():
    return FakeLazBackend()


@pytest.fixture(params=["las", "laz"])
def lidar_file(request, tmp_path, points):
    """Opens the same points, stored in a LAS and in a LAZ file"""
    if request.param == "las":
        path = write_las(tmp_path / "points.las", points, 3)
    else:
        path = write_las(tmp_path / "points.laz", points, 3, compressed=True)
    f = lidario.open_lidar(path, laz_backend=FakeLazBackend())
    yield f
    f.close()
