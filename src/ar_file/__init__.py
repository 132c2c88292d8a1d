"""
This package provides a lazy reader for the member headers of Unix ``ar`` archives (static libraries, ``.deb``
packages and the like).

An archive is a magic string followed by a sequence of members, each made of a 60-byte header and the member data. The
library decodes the headers one at a time, as they are requested, so that enumerating the members of even a very large
archive only reads the headers themselves.

The simplest way to list the members of an archive is::

    with ArFile('path/to/lib.a') as ar_file:
        for header in ar_file:
            print(header.name, header.size)

An archive already in memory, or an open file object, can be parsed directly::

    for header in parse_ar_archive(data):
        print(header)

BSD-style extended names (``#1/<length>``, with the real name stored at the start of the member data) are resolved
automatically. GNU-style extended name tables and symbol tables are not interpreted; their members are returned as-is.

The library only reads archives; there is no support for creating or modifying them.
"""

from os import PathLike
from io import IOBase
from typing import AnyStr, BinaryIO, ContextManager, Iterator, Optional, Union

from .header import ArHeader, AR_HEADER_SIZE
from .decoder import decode_ar_header, parse_ar_decimal_field, AR_HEADER_TERMINATOR, AR_BSD_NAME_PREFIX
from .iterator import ArHeaderIterator, ArIteratorState
from .source import ArByteSource, BufferByteSource, StreamByteSource, Buffer, make_ar_byte_source
from .errors import ArFormatError, ArFormatErrorKind, NotAnArArchiveError, ArTruncatedHeaderError, \
    ArBadHeaderTerminatorError, ArBadNumericFieldError, ArInvalidExtendedNameError, ArTruncatedDataError


__version__ = '0.1.0'


AR_MAGIC = b'!<arch>\n'


def parse_ar_archive(
    data_or_fileobj: Union[Buffer, BinaryIO, ArByteSource], name: Optional[str] = None
) -> ArHeaderIterator:
    """
    Starts parsing an AR archive.

    Args:
        data_or_fileobj: The archive, as either a buffer (`bytes`, `mmap` etc.), a seekable binary file object, or an
            `ArByteSource`. File objects are read from their current position onwards; they are not rewound, nor
            closed afterwards.
        name: An optional name for the archive, to be used in error messages. Not allowed with an `ArByteSource`, which
            already has a name of its own.

    Returns:
        An iterator over the member headers, positioned right after the magic string.

    Raises:
        NotAnArArchiveError: If the data does not start with the AR magic string.
        ValueError: If a `name` was given along with an `ArByteSource`.
    """

    source = make_ar_byte_source(data_or_fileobj, name=name)

    if source.read_at_most(len(AR_MAGIC)) != AR_MAGIC:
        raise NotAnArArchiveError(source.name)

    return ArHeaderIterator(source)


class ArFile(ContextManager['ArFile']):
    """
    This class provides access to the member headers of an AR archive stored in a file or file object.

    It can be opened and closed manually::

        ar_file = ArFile("lib.a")
        headers = list(ar_file.headers())
        ar_file.close()

    or used as a context manager::

        with ArFile("lib.a") as ar_file:
            for header in ar_file:
                print(header)

    By default, the archive is read as a stream: only the headers (and BSD name blocks) are read, and the member data is
    skipped using seeks. With ``in_memory=True``, the whole archive is instead loaded once and parsed as a buffer, which
    is faster for small archives that are scanned repeatedly.
    """

    _fileobj: BinaryIO
    _fileobj_owned: bool = False
    _start_offset: int

    _in_memory: bool
    _data: Optional[bytes] = None

    def __init__(self, path_or_fileobj: Union[PathLike, AnyStr, BinaryIO], in_memory: bool = False):
        """
        Args:
            path_or_fileobj: The path of the archive, or an open binary file object. A file object is used from
                wherever it is positioned at this point, and every pass over the headers goes back to that offset
                instead of the start of the file. Leaving the context does not close a file object supplied by the
                caller, though `close()` does.
            in_memory: Whether to load the whole archive into memory on the first pass, instead of streaming it.

        Raises:
            ValueError: If the file object does not support seeking.
            OSError: If the path cannot be opened.
        """

        if isinstance(path_or_fileobj, IOBase):
            if not path_or_fileobj.seekable():
                raise ValueError("File object must be seekable")

            self._fileobj = path_or_fileobj
        else:
            self._fileobj = open(path_or_fileobj, 'rb')
            self._fileobj_owned = True

        self._start_offset = self._fileobj.tell()
        self._in_memory = in_memory

    @property
    def name(self) -> Optional[str]:
        name = getattr(self._fileobj, 'name', None)

        return None if ((name is None) or (name == '')) else str(name)

    def headers(self) -> ArHeaderIterator:
        """
        Starts a new pass over the member headers in the archive.

        Do not interleave iteration over several passes (or other accesses to the underlying file object) in
        streaming mode, as they all share the file position.

        Raises:
            NotAnArArchiveError: If the file is not an AR archive.
            ValueError: If the file has been closed.
        """

        if self._fileobj.closed:
            raise ValueError("Cannot read the archive because the underlying file object has been closed")

        if self._in_memory:
            return parse_ar_archive(self._get_buffer(), name=self.name)

        self._fileobj.seek(self._start_offset)

        return parse_ar_archive(self._fileobj, name=self.name)

    def close(self):
        """
        Closes the archive, including a file object supplied by the caller. Headers obtained so far remain usable, but
        no new passes can be started.
        """

        self._data = None
        self._fileobj.close()

    def __iter__(self) -> Iterator[ArHeader]:
        return self.headers()

    def __enter__(self) -> 'ArFile':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._fileobj_owned:
            self.close()

    def _get_buffer(self) -> bytes:
        if self._data is None:
            self._fileobj.seek(self._start_offset)
            self._data = self._fileobj.read()

        return self._data
