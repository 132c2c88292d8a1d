"""
Decoding of the fixed-size member headers in an AR archive.

Each header is a 60-byte record made of fixed-width ASCII fields::

    offset  size  field
         0    16  file name (padded with spaces)
        16    12  modification time (decimal)
        28     6  owner ID (decimal)
        34     6  group ID (decimal)
        40     8  file mode (octal, but kept raw here)
        48    10  data size (decimal)
        58     2  terminator, always 0x60 0x0A

Numeric fields are left-justified and padded with spaces.
"""

from typing import Callable, Optional

from atmfjstc.lib.os_forensics.posix import PosixUID, PosixGID

from .header import ArHeader, AR_HEADER_SIZE
from .errors import ArTruncatedHeaderError, ArBadHeaderTerminatorError, ArBadNumericFieldError, \
    ArInvalidExtendedNameError


AR_HEADER_TERMINATOR = b'\x60\x0a'
AR_BSD_NAME_PREFIX = '#1/'

_ASCII_DIGITS = b'0123456789'
_WHITESPACE = b' \t\r\n\x00'

UINT32_MAX = 0xffffffff
UINT64_MAX = 0xffffffffffffffff


def decode_ar_header(data: bytes, read_following: Optional[Callable[[int], bytes]] = None) -> ArHeader:
    """
    Decodes an AR member header.

    Args:
        data: A buffer starting with the 60-byte header record. Any bytes past the record are considered to be the start
            of the member data, and are used to resolve BSD extended names.
        read_following: If given, bytes following the header record are obtained by calling this function with the
            amount needed, instead of being taken from `data`. This is how streaming readers supply the name block
            without having to read ahead. The function may return fewer bytes than requested if the data ends.

    Returns:
        The decoded header. For BSD extended names, exactly `data_start` bytes following the record will have been
        consumed (either from `data` or through `read_following`).

    Raises:
        ArTruncatedHeaderError: If `data` is shorter than 60 bytes.
        ArBadHeaderTerminatorError: If the record does not end in the ``0x60 0x0A`` sequence.
        ArBadNumericFieldError: If one of the numeric fields does not contain a decimal number.
        ArInvalidExtendedNameError: If a BSD extended name is malformed or truncated.
    """

    if len(data) < AR_HEADER_SIZE:
        raise ArTruncatedHeaderError(len(data))

    record = bytes(data[:AR_HEADER_SIZE])

    if record[58:60] != AR_HEADER_TERMINATOR:
        raise ArBadHeaderTerminatorError(record[58:60])

    name = _decode_text(record[0:16])
    mtime = parse_ar_decimal_field(record[16:28], 'modification time', max_value=UINT64_MAX)
    owner_uid = parse_ar_decimal_field(record[28:34], 'owner ID', max_value=UINT32_MAX)
    group_gid = parse_ar_decimal_field(record[34:40], 'group ID', max_value=UINT32_MAX)
    mode = record[40:48]
    size = parse_ar_decimal_field(record[48:58], 'size', max_value=UINT32_MAX)

    data_start = 0

    if name.startswith(AR_BSD_NAME_PREFIX):
        name_size = _parse_bsd_name_size(name[len(AR_BSD_NAME_PREFIX):], size)

        if read_following is not None:
            name_block = read_following(name_size)
        else:
            name_block = bytes(data[AR_HEADER_SIZE:AR_HEADER_SIZE + name_size])

        name = _decode_bsd_name(name_block, name_size)
        data_start = name_size

    return ArHeader(
        name=name,
        mtime=mtime,
        owner_uid=PosixUID(owner_uid),
        group_gid=PosixGID(group_gid),
        mode=mode,
        size=size,
        data_start=data_start,
    )


def parse_ar_decimal_field(raw_value: bytes, field_name: str, max_value: Optional[int] = None) -> int:
    """
    Parses a space-padded decimal field from an AR header.

    A field consisting entirely of padding is read as 0, as some archivers leave the ownership fields blank for special
    members. Anything else that is not a string of ASCII digits (signs and underscores included) is rejected, as are
    values above `max_value`, if given.
    """

    text = raw_value.strip(_WHITESPACE)

    if len(text) == 0:
        return 0

    if text.strip(_ASCII_DIGITS) != b'':
        raise ArBadNumericFieldError(field_name, raw_value)

    value = int(text)

    if (max_value is not None) and (value > max_value):
        raise ArBadNumericFieldError(field_name, raw_value, max_value=max_value)

    return value


def _parse_bsd_name_size(raw_size: str, member_size: int) -> int:
    if (raw_size == '') or not raw_size.isascii() or not raw_size.isdigit():
        raise ArInvalidExtendedNameError(f"'{raw_size}' is not a decimal number")

    name_size = int(raw_size)

    if name_size > member_size:
        raise ArInvalidExtendedNameError(
            f"name block of {name_size} bytes does not fit in the member data ({member_size} bytes)"
        )

    return name_size


def _decode_bsd_name(name_block: bytes, name_size: int) -> str:
    if len(name_block) < name_size:
        raise ArInvalidExtendedNameError(
            f"expected a name block of {name_size} bytes, but only {len(name_block)} are available"
        )

    # The declared size is often larger than the name itself, which is always NUL-terminated
    end = name_block.find(b'\x00')
    if end == -1:
        raise ArInvalidExtendedNameError(f"no NUL terminator found in the {name_size}-byte name block")

    return _decode_text(name_block[:end])


def _decode_text(raw: bytes) -> str:
    return raw.decode('utf-8', errors='surrogateescape').strip()
