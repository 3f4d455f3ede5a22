from typing import BinaryIO

from ..errors import CodecError
from ..header import LasHeader
from .decoder import PackedPointDecoder
from .lazbackend import ILazBackend, ILazDecoder

try:
    import lazrs
except ModuleNotFoundError:
    lazrs = None


def _lazrs_selection() -> "lazrs.DecompressionSelection":
    # Everything a point of format 0 to 3 (and its extra bytes) holds
    selection = (
        lazrs.SELECTIVE_DECOMPRESS_XY_RETURNS_CHANNEL
        | lazrs.SELECTIVE_DECOMPRESS_Z
        | lazrs.SELECTIVE_DECOMPRESS_CLASSIFICATION
        | lazrs.SELECTIVE_DECOMPRESS_FLAGS
        | lazrs.SELECTIVE_DECOMPRESS_INTENSITY
        | lazrs.SELECTIVE_DECOMPRESS_SCAN_ANGLE
        | lazrs.SELECTIVE_DECOMPRESS_USER_DATA
        | lazrs.SELECTIVE_DECOMPRESS_POINT_SOURCE_ID
        | lazrs.SELECTIVE_DECOMPRESS_GPS_TIME
        | lazrs.SELECTIVE_DECOMPRESS_RGB
        | lazrs.SELECTIVE_DECOMPRESS_ALL_EXTRA_BYTES
    )
    return lazrs.DecompressionSelection(selection)


class LazrsBackend(ILazBackend):
    def is_available(self) -> bool:
        return lazrs is not None

    def create_decoder(self) -> ILazDecoder:
        return LazrsDecoder()


class LazrsDecoder(PackedPointDecoder):
    """Decoder using the laz-rs decompressor, single-threaded,
    as points are pulled one at a time
    """

    def _create_decompressor(self, source: BinaryIO, header: LasHeader):
        laszip_vlr = header.vlrs.laszip_vlr()
        if laszip_vlr is None:
            raise CodecError("Could not find the laszip vlr")
        if source.tell() != header.offset_to_point_data:
            source.seek(header.offset_to_point_data)
        return lazrs.LasZipDecompressor(
            source, laszip_vlr.record_data, _lazrs_selection()
        )

    def _decompress_into(self, buffer: bytearray) -> None:
        self._decompressor.decompress_many(buffer)
