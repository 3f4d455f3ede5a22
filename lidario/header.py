""" Reading of the header of LAS/LAZ files, as it is stored on disk
"""
import io
import struct
from datetime import date, timedelta
from typing import BinaryIO, List, NamedTuple, Optional, Union
from uuid import UUID

import numpy as np

from ._compression.format import (
    compressed_id_to_uncompressed,
    is_point_format_compressed,
)
from .errors import FormatError, HeaderError
from .utils import read_string, read_uint
from .vlrs import VLRList

GENERATING_SOFTWARE_LEN = 32
SYSTEM_IDENTIFIER_LEN = 32

LAS_FILE_SIGNATURE = b"LASF"

# Position of the offset to point data field in the header
OFFSET_TO_POINT_DATA_POS = 96


class Version(NamedTuple):
    major: int
    minor: int

    def __eq__(self, other):
        if isinstance(other, str):
            return str(self) == other
        else:
            return other.major == self.major and other.minor == self.minor

    def __hash__(self):
        return hash((self.major, self.minor))

    def __str__(self):
        return f"{self.major}.{self.minor}"


class LasHeader:
    """Contains the information from the header of as LAS file,
    exactly as it is stored in the file.

    Nothing is validated here beyond what is needed to parse the bytes,
    the validation is done when normalizing it (see :mod:`lidario.canonical`).
    """

    def __init__(self) -> None:
        self.file_signature: bytes = LAS_FILE_SIGNATURE
        self.file_source_id: int = 0
        self.global_encoding: int = 0
        self.uuid: UUID = UUID(bytes_le=b"\0" * 16)
        self.version: Version = Version(1, 2)
        self.system_identifier: Union[str, bytes] = ""
        self.generating_software: Union[str, bytes] = ""
        self.creation_date: Optional[date] = None
        self.header_size: int = 0
        self.offset_to_point_data: int = 0
        self.number_of_vlrs: int = 0
        #: The point format id as stored, compression bits included
        self.point_format_id: int = 0
        self.point_data_record_length: int = 0
        #: The 32 bit point count, the only one in LAS < 1.4
        self.legacy_point_count: int = 0
        self.point_count: int = 0
        self.number_of_points_by_return: List[int] = [0] * 5
        self.scales: np.ndarray = np.array([0.01, 0.01, 0.01], dtype=np.float64)
        self.offsets: np.ndarray = np.zeros(3, dtype=np.float64)
        self.maxs: np.ndarray = np.zeros(3, dtype=np.float64)
        self.mins: np.ndarray = np.zeros(3, dtype=np.float64)
        #: Las >= 1.3
        self.start_of_waveform_data_packet_record: int = 0
        #: Las >= 1.4
        self.start_of_first_evlr: int = 0
        self.number_of_evlrs: int = 0
        self.vlrs: VLRList = VLRList()

    @property
    def are_points_compressed(self) -> bool:
        return is_point_format_compressed(self.point_format_id)

    @property
    def uncompressed_point_format_id(self) -> int:
        return compressed_id_to_uncompressed(self.point_format_id)

    @classmethod
    def read_from(cls, original_stream: BinaryIO) -> "LasHeader":
        """
        Reads the header and the VLRs from the stream

        Leaves the stream pos right before the point starts
        """
        header = cls()

        stream = io.BytesIO(cls._prefetch_header_data(original_stream))

        header.file_signature = stream.read(4)
        # This should not be possible as _prefetch already checks this
        assert header.file_signature == LAS_FILE_SIGNATURE

        header.file_source_id = read_uint(stream, 2)
        header.global_encoding = read_uint(stream, 2)
        header.uuid = UUID(bytes_le=stream.read(16))
        header.version = Version(read_uint(stream, 1), read_uint(stream, 1))

        header.system_identifier = read_string(stream, SYSTEM_IDENTIFIER_LEN)
        header.generating_software = read_string(stream, GENERATING_SOFTWARE_LEN)

        creation_day_of_year = read_uint(stream, 2)
        creation_year = read_uint(stream, 2)
        try:
            header.creation_date = date(creation_year, 1, 1) + timedelta(
                creation_day_of_year - 1
            )
        except ValueError:
            header.creation_date = None

        header.header_size = read_uint(stream, 2)
        header.offset_to_point_data = read_uint(stream, 4)
        header.number_of_vlrs = read_uint(stream, 4)

        header.point_format_id = read_uint(stream, 1)
        header.point_data_record_length = read_uint(stream, 2)

        header.legacy_point_count = read_uint(stream, 4)
        header.point_count = header.legacy_point_count
        for i in range(5):
            header.number_of_points_by_return[i] = read_uint(stream, 4)

        for i in range(3):
            header.scales[i] = struct.unpack("<d", stream.read(8))[0]
        for i in range(3):
            header.offsets[i] = struct.unpack("<d", stream.read(8))[0]
        for i in range(3):
            header.maxs[i] = struct.unpack("<d", stream.read(8))[0]
            header.mins[i] = struct.unpack("<d", stream.read(8))[0]

        if header.version.minor >= 3:
            header.start_of_waveform_data_packet_record = read_uint(stream, 8)
        if header.version.minor >= 4:
            header.start_of_first_evlr = read_uint(stream, 8)
            header.number_of_evlrs = read_uint(stream, 4)
            header.point_count = read_uint(stream, 8)
            by_return = [read_uint(stream, 8) for _ in range(15)]
            header.number_of_points_by_return = by_return[:5]

        current_pos = stream.tell()
        if current_pos > header.header_size:
            raise HeaderError("Incoherent header size")
        stream.seek(header.header_size)

        header.vlrs = VLRList.read_from(stream, num_to_read=header.number_of_vlrs)

        if stream.tell() > header.offset_to_point_data:
            raise HeaderError("Incoherent offset to point data")

        return header

    @staticmethod
    def _prefetch_header_data(source) -> bytes:
        """
        reads (and returns) from the source all the bytes that
        are between the beginning of the file and the start of point data
        (which corresponds to Header + VLRS).

        It is done in two calls to the source's `read` method
        """
        header_bytes = source.read(LAS_HEADERS_SIZE["1.1"])

        file_sig = header_bytes[: len(LAS_FILE_SIGNATURE)]
        if not file_sig:
            raise FormatError("Source is empty")
        if file_sig != LAS_FILE_SIGNATURE:
            raise FormatError(f'Invalid file signature "{file_sig}"')
        if len(header_bytes) < LAS_HEADERS_SIZE["1.1"]:
            raise HeaderError("File is to small to be a valid LAS")

        offset_to_data = int.from_bytes(
            header_bytes[OFFSET_TO_POINT_DATA_POS : OFFSET_TO_POINT_DATA_POS + 4],
            byteorder="little",
            signed=False,
        )
        if offset_to_data < len(header_bytes):
            raise HeaderError(
                f"Offset to point data ({offset_to_data}) is inside the header"
            )

        rest = source.read(offset_to_data - len(header_bytes))
        if len(rest) < offset_to_data - len(header_bytes):
            raise HeaderError("File ends before the start of point data")

        return header_bytes + rest

    def __repr__(self) -> str:
        return (
            f"<LasHeader({self.version}, point format: {self.point_format_id}, "
            f"{self.point_count} points)>"
        )


LAS_HEADERS_SIZE = {
    "1.0": 227,
    "1.1": 227,
    "1.2": 227,
    "1.3": 235,
    "1.4": 375,
}
