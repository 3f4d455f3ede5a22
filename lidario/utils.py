from typing import BinaryIO, Union


def read_string(
    stream: BinaryIO, length: int, encoding: str = "ascii"
) -> Union[str, bytes]:
    """
    Reads `length` bytes from the stream, and tries to decode it.
    If the decoding succeeds, returns the `str`. Otherwise the raw bytes
    are returned.

    >>> import io
    >>> read_string(io.BytesIO(b"TerraScan\\0\\0\\0"), 12)
    'TerraScan'
    """
    raw_string = stream.read(length)
    first_null_byte_pos = raw_string.find(b"\0")
    if first_null_byte_pos >= 0:
        raw_string = raw_string[:first_null_byte_pos]

    try:
        return raw_string.decode(encoding)
    except UnicodeDecodeError:
        return raw_string


def read_uint(stream: BinaryIO, num_bytes: int) -> int:
    return int.from_bytes(stream.read(num_bytes), "little", signed=False)
