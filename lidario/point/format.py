from typing import Iterable, List, Optional

import numpy as np

from . import dims

EXTRA_BYTES_FIELD_NAME = "ExtraBytes"


class PointFormat:
    """Class that contains the informations about the dimensions that forms a PointFormat.

    >>> fmt = PointFormat(3)
    >>> dim = fmt.dimension_by_name("classification") # or fmt["classification"]
    >>> dim.num_bits
    5
    >>> fmt.has_gps_time, fmt.has_color
    (True, True)

    Asking for a point format that lidario does not know about raises

    >>> PointFormat(6)
    Traceback (most recent call last):
    ...
    lidario.errors.PointFormatNotSupported: Point format 6 is not supported
    """

    def __init__(
        self,
        point_format_id: int,
    ):
        """
        Parameters
        ----------
        point_format_id: int
            point format id
        """
        self.id: int = point_format_id
        self.dimensions: List[dims.DimensionInfo] = []
        composed_dims = dims.COMPOSED_FIELDS[self.id]
        for dim_name in dims.POINT_FORMAT_DIMENSIONS[self.id]:
            try:
                sub_fields = composed_dims[dim_name]
            except KeyError:
                dimension = dims.DimensionInfo.from_dtype(
                    dim_name, dims.DIMENSIONS_TO_TYPE[dim_name]
                )
                self.dimensions.append(dimension)
            else:
                for sub_field in sub_fields:
                    dimension = dims.DimensionInfo.from_bitmask(
                        sub_field.name, sub_field.mask
                    )
                    self.dimensions.append(dimension)

    @property
    def dimension_names(self) -> Iterable[str]:
        """Returns the names of the dimensions contained in the point format"""
        return (dim.name for dim in self.dimensions)

    @property
    def size(self) -> int:
        """Returns the number of bytes a point takes

        >>> PointFormat(3).size
        34
        >>> PointFormat(0).size
        20
        """
        return int(sum(dim.num_bits for dim in self.dimensions) // 8)

    @property
    def has_gps_time(self) -> bool:
        return "gps_time" in dims.POINT_FORMAT_DIMENSIONS[self.id]

    @property
    def has_color(self) -> bool:
        dimensions = dims.POINT_FORMAT_DIMENSIONS[self.id]
        return all(name in dimensions for name in dims.COLOR_FIELDS_NAMES)

    def dimension_by_name(self, name: str) -> dims.DimensionInfo:
        """Returns the dimension info for the dimension by name

        ValueError is raised if the dimension does not exist un the point format

        >>> info = PointFormat(2).dimension_by_name('gps_time')
        Traceback (most recent call last):
        ...
        ValueError: Dimension 'gps_time' does not exist
        """
        for dim in self.dimensions:
            if dim.name == name:
                return dim
        raise ValueError(f"Dimension '{name}' does not exist")

    def dtype(self, record_length: Optional[int] = None) -> np.dtype:
        """Returns the numpy.dtype used to store the point records in a numpy array

        The sub fields are kept *packed* into their composed fields.

        When the record_length is bigger than the size of the point format
        the remaining bytes are exposed as an opaque 'ExtraBytes' field.

        >>> PointFormat(0).dtype(record_length=24).itemsize
        24
        """
        dtype = dims.POINT_FORMATS_DTYPE[self.id]
        if record_length is None or record_length == dtype.itemsize:
            return dtype
        if record_length < dtype.itemsize:
            raise ValueError(
                f"A record length of {record_length} bytes is too small "
                f"for point format {self.id} ({dtype.itemsize} bytes)"
            )
        descr = dtype.descr
        descr.append((EXTRA_BYTES_FIELD_NAME, f"V{record_length - dtype.itemsize}"))
        return np.dtype(descr)

    def __getitem__(self, item):
        if isinstance(item, str):
            return self.dimension_by_name(item)
        return self.dimensions[item]

    def __eq__(self, other):
        return isinstance(other, PointFormat) and self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"<PointFormat({self.id})>"
