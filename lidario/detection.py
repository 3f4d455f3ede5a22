""" Classification of files as LAS, LAZ or something else,
based on their extension and their signature.
"""
import enum
import os

from .header import LAS_FILE_SIGNATURE
from .typehints import PathLike


class FileType(enum.Enum):
    LAS = "LAS"
    LAZ = "LAZ"
    UNKNOWN = "UNKNOWN"

    def __str__(self) -> str:
        return self.value


_EXTENSION_TO_TYPE = {
    ".las": FileType.LAS,
    ".laz": FileType.LAZ,
}


def get_file_type(path: PathLike) -> FileType:
    """Returns the type of the file.

    The extension (case does not matter) says whether it is a LAS or a LAZ,
    the file must also start with the LAS signature.
    Files that are missing, unreadable or too short are of UNKNOWN type.
    """
    extension = os.path.splitext(os.fspath(path))[1].lower()
    file_type = _EXTENSION_TO_TYPE.get(extension, FileType.UNKNOWN)
    if file_type is FileType.UNKNOWN:
        return file_type

    try:
        with open(path, mode="rb") as f:
            signature = f.read(len(LAS_FILE_SIGNATURE))
    except OSError:
        return FileType.UNKNOWN

    if signature != LAS_FILE_SIGNATURE:
        return FileType.UNKNOWN
    return file_type


def is_las_file(path: PathLike) -> bool:
    return get_file_type(path) is FileType.LAS


def is_laz_file(path: PathLike) -> bool:
    return get_file_type(path) is FileType.LAZ
