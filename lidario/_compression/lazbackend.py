from abc import ABC, abstractmethod
from typing import NamedTuple, Tuple

from ..point.record import RawPoint
from ..typehints import PathLike


class LazHeaderView(NamedTuple):
    """The header, as a LAZ decoder exposes it"""

    version_major: int
    version_minor: int
    header_size: int
    offset_to_point_data: int
    number_of_variable_length_records: int
    point_data_format: int
    point_data_record_length: int
    number_of_point_records: int
    number_of_points_by_return: Tuple[int, ...]
    x_scale_factor: float
    y_scale_factor: float
    z_scale_factor: float
    x_offset: float
    y_offset: float
    z_offset: float
    max_x: float
    min_x: float
    max_y: float
    min_y: float
    max_z: float
    min_z: float
    #: Only meaningful for LAS >= 1.4
    extended_number_of_point_records: int = 0


class ILazDecoder(ABC):
    """The interface of a LAZ decoder.

    A decoder is a forward-only point source: once opened, points are
    decoded one after the other, there is no way to go back.

    Every method may fail, failures are raised as
    :class:`lidario.errors.CodecError`.
    """

    @abstractmethod
    def open_for_read(self, path: PathLike) -> bool:
        """Opens the file, returns whether its points are compressed"""
        ...

    @abstractmethod
    def get_header(self) -> LazHeaderView:
        ...

    def prepare(self) -> None:
        """Sets up the point stream so that the first point can be read,
        decoders that do it when reading the first point keep this no-op
        """

    @abstractmethod
    def read_next_point(self) -> None:
        """Decodes the next point, which becomes the current point"""
        ...

    @abstractmethod
    def get_current_point_fields(self) -> RawPoint:
        """Returns the current point, coordinates are the stored integers"""
        ...

    @abstractmethod
    def get_coordinates(self) -> Tuple[float, float, float]:
        """Returns the real world coordinates of the current point"""
        ...

    @abstractmethod
    def close(self) -> None:
        ...

    @abstractmethod
    def get_last_error(self) -> str:
        ...


class ILazBackend(ABC):
    @abstractmethod
    def is_available(self) -> bool:
        ...

    @abstractmethod
    def create_decoder(self) -> ILazDecoder:
        ...
