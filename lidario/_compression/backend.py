import enum
from abc import ABCMeta
from typing import Tuple

from .lazbackend import ILazBackend, ILazDecoder
from .laszipbackend import LaszipBackend
from .lazrsbackend import LazrsBackend

_DEFAULT_BACKENDS: Tuple[ILazBackend, ...] = (
    LazrsBackend(),
    LaszipBackend(),
)


class ABCEnumMeta(enum.EnumMeta, ABCMeta):
    pass


class LazBackend(ILazBackend, enum.Enum, metaclass=ABCEnumMeta):
    """Supported backends for decoding LAZ"""

    Lazrs = 0
    """lazrs backend"""
    Laszip = 1
    """laszip backend"""

    def _get(self) -> ILazBackend:
        return _DEFAULT_BACKENDS[self.value]

    def is_available(self) -> bool:
        """Returns true if the backend is available"""
        return self._get().is_available()

    def create_decoder(self) -> ILazDecoder:
        return self._get().create_decoder()

    @classmethod
    def detect_available(cls) -> Tuple["LazBackend", ...]:
        """Returns a tuple containing the available backends in the current
        python environment
        """
        return tuple(
            laz_backend
            for backend, laz_backend in zip(_DEFAULT_BACKENDS, cls)
            if backend.is_available()
        )
