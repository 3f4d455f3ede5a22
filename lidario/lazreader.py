import logging

from . import errors
from ._compression.lazbackend import ILazDecoder
from ._pointreader import IPointReader
from .point.record import RawPoint
from .typehints import PathLike

logger = logging.getLogger(__name__)


class LazPointReader(IPointReader):
    """Implementation of IPointReader on top of a LAZ decoder.

    The decoder can only go forward, so the index given to
    :meth:`read_point` is only used to give context to errors,
    callers are responsible for asking the points in order.

    Points are returned with real world coordinates, as the decoder gives them.
    """

    def __init__(self, decoder: ILazDecoder, path: PathLike) -> None:
        self._decoder = decoder
        self.path = path

    @property
    def decoder(self) -> ILazDecoder:
        return self._decoder

    def prepare(self) -> None:
        try:
            self._decoder.prepare()
        except Exception as e:
            raise self._codec_error("Failed to prepare the decoder", e) from e

    def read_point(self, index: int) -> RawPoint:
        try:
            self._decoder.read_next_point()
            raw_point = self._decoder.get_current_point_fields()
            x, y, z = self._decoder.get_coordinates()
        except Exception as e:
            raise self._codec_error(f"Failed to read point {index}", e) from e
        return raw_point._replace(X=x, Y=y, Z=z)

    def close(self) -> None:
        try:
            self._decoder.close()
        except Exception as e:
            raise self._codec_error("Failed to close the decoder", e) from e
        logger.debug(f"Decoder of '{self.path}' closed")

    def _codec_error(self, operation: str, error: Exception) -> errors.CodecError:
        if isinstance(error, errors.CodecError):
            decoder_message = error.decoder_message
        else:
            decoder_message = str(error) or self._decoder.get_last_error()
        return errors.CodecError(
            f"{operation} of '{self.path}': {decoder_message}",
            decoder_message=decoder_message,
        )
