from .dims import DimensionInfo, DimensionKind
from .format import PointFormat
from .packing import (
    ClassificationBitField,
    ReturnBitField,
    decode_classification_field,
    decode_return_field,
    encode_classification_field,
    encode_return_field,
)
from .record import (
    Color,
    CoordinateMode,
    CoordinateTransform,
    PointRecord,
    PointRecord0,
    PointRecord1,
    PointRecord2,
    PointRecord3,
    RawPoint,
    build_point,
)
