""" Variable Length Records

lidario does not interpret VLRs, it only needs to walk over them
to find the one holding the LASzip parameters.
"""
from typing import BinaryIO, Optional, Union

from .utils import read_string, read_uint

RESERVED_LEN = 2
USER_ID_LEN = 16
DESCRIPTION_LEN = 32

LASZIP_USER_ID = "laszip encoded"
LASZIP_RECORD_ID = 22204


class VLR:
    def __init__(
        self,
        user_id: str,
        record_id: int,
        description: Union[str, bytes] = "",
        record_data: bytes = b"",
    ):
        self.user_id = user_id
        self.record_id = record_id
        self.description = description
        #: The record_data as bytes, length cannot exceed 65_535
        self.record_data = record_data

    def __eq__(self, other):
        return (
            self.record_id == other.record_id
            and self.user_id == other.user_id
            and self.description == other.description
            and self.record_data == other.record_data
        )

    def __repr__(self):
        return "<{}(user_id: '{}', record_id: '{}', data len: {})>".format(
            self.__class__.__name__, self.user_id, self.record_id, len(self.record_data)
        )


class VLRList(list):
    """Class responsible for managing the vlrs"""

    def get_by_id(self, user_id="", record_ids=(None,)):
        """Function to get vlrs by user_id and/or record_ids.
        Always returns a list even if only one vlr matches the user_id and record_id
        """
        return [
            vlr
            for vlr in self
            if (user_id == "" or vlr.user_id == user_id)
            and (record_ids == (None,) or vlr.record_id in record_ids)
        ]

    def laszip_vlr(self) -> Optional[VLR]:
        """Returns the VLR holding the LASzip parameters, if any"""
        vlrs = self.get_by_id(LASZIP_USER_ID, (LASZIP_RECORD_ID,))
        return vlrs[0] if vlrs else None

    def __repr__(self):
        return "[{}]".format(", ".join(repr(vlr) for vlr in self))

    @classmethod
    def read_from(cls, data_stream: BinaryIO, num_to_read: int) -> "VLRList":
        """Reads vlrs from the stream

        Parameters
        ----------
        data_stream : io.BytesIO
                      stream to read from
        num_to_read : int
                      number of vlrs to be read
        """
        vlrlist = cls()
        for _ in range(num_to_read):
            data_stream.read(RESERVED_LEN)
            user_id = data_stream.read(USER_ID_LEN).split(b"\0")[0].decode(
                errors="replace"
            )
            record_id = read_uint(data_stream, 2)
            record_data_len = read_uint(data_stream, 2)
            description = read_string(data_stream, DESCRIPTION_LEN)
            record_data_bytes = data_stream.read(record_data_len)

            vlrlist.append(VLR(user_id, record_id, description, record_data_bytes))

        return vlrlist
