from typing import BinaryIO

from ..header import LasHeader
from .decoder import PackedPointDecoder
from .lazbackend import ILazBackend, ILazDecoder

try:
    import laszip
except ModuleNotFoundError:
    laszip = None


def _laszip_selection() -> int:
    return (
        laszip.DECOMPRESS_SELECTIVE_CHANNEL_RETURNS_XY
        | laszip.DECOMPRESS_SELECTIVE_Z
        | laszip.DECOMPRESS_SELECTIVE_CLASSIFICATION
        | laszip.DECOMPRESS_SELECTIVE_FLAGS
        | laszip.DECOMPRESS_SELECTIVE_INTENSITY
        | laszip.DECOMPRESS_SELECTIVE_SCAN_ANGLE
        | laszip.DECOMPRESS_SELECTIVE_USER_DATA
        | laszip.DECOMPRESS_SELECTIVE_POINT_SOURCE
        | laszip.DECOMPRESS_SELECTIVE_GPS_TIME
        | laszip.DECOMPRESS_SELECTIVE_RGB
        | laszip.DECOMPRESS_SELECTIVE_EXTRA_BYTES
    )


class LaszipBackend(ILazBackend):
    def is_available(self) -> bool:
        return laszip is not None

    def create_decoder(self) -> ILazDecoder:
        return LaszipDecoder()


class LaszipDecoder(PackedPointDecoder):
    """Decoder using the LASzip library"""

    def _create_decompressor(self, source: BinaryIO, header: LasHeader):
        # The unzipper wants to read the header itself
        source.seek(0)
        unzipper = laszip.LasUnZipper(source, _laszip_selection())
        unzipper_header = unzipper.header
        assert unzipper_header.point_data_record_length == len(self._buffer)
        return unzipper

    def _decompress_into(self, buffer: bytearray) -> None:
        self._decompressor.decompress_into(buffer)
