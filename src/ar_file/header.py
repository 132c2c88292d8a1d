from dataclasses import dataclass
from typing import Optional

from atmfjstc.lib.iso_timestamp import iso_from_unix_time, ISOTimestamp
from atmfjstc.lib.os_forensics.posix import PosixUID, PosixGID, PosixMode, PosixFileType, PosixNumericPermissions, \
    extract_posix_file_type, extract_posix_permissions


AR_HEADER_SIZE = 60


@dataclass(frozen=True)
class ArHeader:
    """
    The decoded header of a member in an AR archive.

    Objects of this type are inert data containers; they remain valid after the iterator that produced them has moved
    on or the underlying file has been closed.

    Attributes:
        name: The member file name, with the padding spaces trimmed. For members using the BSD extended name convention
            (a name field of the form ``#1/<N>``), this is the real name read from the start of the data region.
        mtime: The modification time, in seconds since the Unix epoch.
        owner_uid: The numeric ID of the owner.
        group_gid: The numeric ID of the owner group.
        mode: The raw 8-byte mode field, exactly as it appears in the archive. Use `posix_mode` for an interpreted
            version.
        size: The length of the member data in bytes, not counting the padding byte added after odd-length data. For
            BSD extended names, this includes the name block.
        data_start: If greater than 0, the number of bytes at the start of the data region that hold the real file
            name (BSD extended name convention). The actual member content starts right after them.
        header_offset: The offset of this header from the start of the archive (i.e. counting the magic). It is set by
            the archive iterator; headers decoded directly from a byte buffer have it as None.
    """

    name: str
    mtime: int
    owner_uid: PosixUID
    group_gid: PosixGID
    mode: bytes
    size: int
    data_start: int = 0
    header_offset: Optional[int] = None

    @property
    def padded_size(self) -> int:
        """
        The space occupied by the member data in the archive, including the padding byte for odd sizes.
        """
        return self.size + (self.size & 1)

    @property
    def content_size(self) -> int:
        """
        The size of the member content proper, i.e. excluding any embedded BSD name block.
        """
        return self.size - self.data_start

    @property
    def has_extended_name(self) -> bool:
        return self.data_start > 0

    @property
    def data_offset(self) -> Optional[int]:
        """
        The offset, from the start of the archive, at which the member content starts (i.e. after the header and the
        embedded name block, if any). None if the position of the header is unknown.
        """
        if self.header_offset is None:
            return None

        return self.header_offset + AR_HEADER_SIZE + self.data_start

    @property
    def mtime_iso(self) -> Optional[ISOTimestamp]:
        """
        The modification time as an ISO timestamp, or None if it lies past the year 9999 (the field allows for 12
        digits, which is more than `datetime` can represent).
        """
        try:
            return iso_from_unix_time(self.mtime)
        except (OverflowError, ValueError):
            return None

    @property
    def posix_mode(self) -> Optional[PosixMode]:
        """
        The mode field interpreted as an octal number, as written by all common ``ar`` implementations. None if the
        field does not contain a valid octal number.
        """
        text = self.mode.strip(b' \x00')
        if (len(text) == 0) or (text.strip(b'01234567') != b''):
            return None

        return PosixMode(int(text, 8))

    @property
    def posix_file_type(self) -> Optional[PosixFileType]:
        mode = self.posix_mode

        return extract_posix_file_type(PosixMode(mode & 0xffff)) if mode is not None else None

    @property
    def posix_permissions(self) -> Optional[PosixNumericPermissions]:
        mode = self.posix_mode

        return extract_posix_permissions(mode) if mode is not None else None
