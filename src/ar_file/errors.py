"""
Exceptions raised when the data being parsed does not match the structure of an AR archive.

All of them derive from `ArFormatError`. Errors raised by the header iterator are additionally annotated with the
position in the archive where the problem was found (see `ArFormatError.at_position`).
"""

from enum import Enum
from typing import Optional


class ArFormatErrorKind(Enum):
    BAD_MAGIC = 'bad_magic'
    TRUNCATED_HEADER = 'truncated_header'
    BAD_TERMINATOR = 'bad_terminator'
    BAD_NUMERIC_FIELD = 'bad_numeric_field'
    INVALID_EXTENDED_NAME = 'invalid_extended_name'
    TRUNCATED_DATA = 'truncated_data'


class ArFormatError(Exception):
    """
    Base class for all errors signaling that the data is not a valid AR archive, or that it is corrupt.

    Attributes:
        kind: An `ArFormatErrorKind` tag identifying the type of problem, for callers that prefer to dispatch on a
            value instead of on the exception class.
        message: The description of the problem, without any position info.
        position: The offset, from the start of the archive, at which the problem was encountered, or None if it is
            not known (e.g. when a header was decoded directly with `decode_ar_header`).
    """

    kind: ArFormatErrorKind

    message: str
    position: Optional[int] = None

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)

        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message

        return f"At position {self.position}, {self.message}"

    def at_position(self, position: int) -> 'ArFormatError':
        """
        Returns a copy of this error, of the same class and with the same details, annotated with the given position.
        """
        clone = self.__class__.__new__(self.__class__)
        clone.args = self.args
        clone.__dict__.update(self.__dict__)
        clone.position = position

        return clone


class NotAnArArchiveError(ArFormatError):
    kind = ArFormatErrorKind.BAD_MAGIC

    source_name: Optional[str]

    def __init__(self, source_name: Optional[str] = None):
        quoted_name = f" '{source_name}'" if source_name is not None else ''
        super().__init__(f"not an AR archive: data{quoted_name} does not start with the magic string !<arch>")

        self.source_name = source_name


class ArTruncatedHeaderError(ArFormatError):
    kind = ArFormatErrorKind.TRUNCATED_HEADER

    available: int

    def __init__(self, available: int):
        super().__init__(f"truncated header: expected 60 bytes, but only {available} are available")

        self.available = available


class ArBadHeaderTerminatorError(ArFormatError):
    kind = ArFormatErrorKind.BAD_TERMINATOR

    found: bytes

    def __init__(self, found: bytes):
        super().__init__(f"bad header terminator: expected 0x600a, but found 0x{found.hex()}")

        self.found = found


class ArBadNumericFieldError(ArFormatError):
    kind = ArFormatErrorKind.BAD_NUMERIC_FIELD

    field_name: str
    raw_value: bytes
    max_value: Optional[int]

    def __init__(self, field_name: str, raw_value: bytes, max_value: Optional[int] = None):
        if max_value is None:
            details = f"{field_name} is not a decimal number"
        else:
            details = f"{field_name} exceeds the maximum of {max_value}"

        super().__init__(f"bad numeric field: {details} ({raw_value!r})")

        self.field_name = field_name
        self.raw_value = raw_value
        self.max_value = max_value


class ArInvalidExtendedNameError(ArFormatError):
    kind = ArFormatErrorKind.INVALID_EXTENDED_NAME

    def __init__(self, details: str):
        super().__init__(f"invalid extended name length: {details}")


class ArTruncatedDataError(ArFormatError):
    kind = ArFormatErrorKind.TRUNCATED_DATA

    member_name: str
    expected_length: int
    actual_length: int

    def __init__(self, member_name: str, expected_length: int, actual_length: int):
        super().__init__(
            f"data for member '{member_name}' is truncated: expected {expected_length} bytes, but only "
            f"{actual_length} were found"
        )

        self.member_name = member_name
        self.expected_length = expected_length
        self.actual_length = actual_length
