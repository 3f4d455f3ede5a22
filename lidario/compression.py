""" The functions related to the LAZ format (compressed LAS)
"""

from ._compression.backend import *
from ._compression.format import *
from ._compression.lazbackend import ILazBackend, ILazDecoder, LazHeaderView

__all__ = [
    "LazBackend",
    "ILazBackend",
    "ILazDecoder",
    "LazHeaderView",
    "is_point_format_compressed",
    "compressed_id_to_uncompressed",
]
