import abc

from .point.record import RawPoint


class IPointReader(abc.ABC):
    """The interface to be implemented by the class that actually reads
    points from a LAS/LAZ file so that the LidarFile can use it.

    It hides whether points come from a buffer of uncompressed records
    or from a LAZ decoder.
    """

    def prepare(self) -> None:
        """Does the work needed before the first point can be read,
        readers that have nothing to prepare keep this no-op
        """

    @abc.abstractmethod
    def read_point(self, index: int) -> RawPoint:
        ...

    @abc.abstractmethod
    def close(self) -> None:
        ...
