"""
Byte sources that the archive iterator reads from.

Archives can be parsed either from a buffer fully available in memory (`bytes`, a memory-mapped file etc.) or from a
seekable binary file object. Both are accessed through the `ArByteSource` interface, so that the parsing logic is
written only once:

- `BufferByteSource` just moves an offset over a `memoryview` of the data, without any I/O
- `StreamByteSource` reads only the bytes it is asked for and seeks over the rest, so the archive never needs to be
  loaded in memory in its entirety

All positions are relative to the start of the archive (i.e. where the source was positioned when it was created).
"""

import mmap

from abc import ABCMeta, abstractmethod
from io import IOBase, TextIOBase
from os import SEEK_CUR
from typing import BinaryIO, Optional, Union

from atmfjstc.lib.binary_utils.BinaryReader import BinaryReader


Buffer = Union[bytes, bytearray, memoryview, mmap.mmap]


class ArByteSource(metaclass=ABCMeta):
    """
    Minimal interface for a forward-only cursor over the bytes of an archive.
    """

    @property
    @abstractmethod
    def name(self) -> Optional[str]:
        """
        The name of the file behind the source, if any, for use in error messages.
        """
        raise NotImplementedError

    @abstractmethod
    def tell(self) -> int:
        """
        The current position, relative to the start of the archive.
        """
        raise NotImplementedError

    @abstractmethod
    def bytes_remaining(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def read_at_most(self, n_bytes: int) -> bytes:
        """
        Reads `n_bytes` of data, returning fewer only if the data is exhausted.
        """
        raise NotImplementedError

    @abstractmethod
    def skip(self, n_bytes: int) -> int:
        """
        Moves forward over `n_bytes` of data, or up to the end of the data, whichever comes first.

        Returns:
            The number of bytes actually skipped.
        """
        raise NotImplementedError


class BufferByteSource(ArByteSource):
    _view: memoryview
    _offset: int = 0
    _name: Optional[str] = None

    def __init__(self, data: Buffer, name: Optional[str] = None):
        self._view = memoryview(data).cast('B')
        self._name = name

    @property
    def name(self) -> Optional[str]:
        return self._name

    def tell(self) -> int:
        return self._offset

    def bytes_remaining(self) -> int:
        return len(self._view) - self._offset

    def read_at_most(self, n_bytes: int) -> bytes:
        if n_bytes < 0:
            raise ValueError("The number of bytes to read cannot be negative")

        data = bytes(self._view[self._offset:self._offset + n_bytes])
        self._offset += len(data)

        return data

    def skip(self, n_bytes: int) -> int:
        if n_bytes < 0:
            raise ValueError("Number of bytes to skip must be non-negative")

        skipped = min(n_bytes, self.bytes_remaining())
        self._offset += skipped

        return skipped


class StreamByteSource(ArByteSource):
    """
    Reads an archive from a seekable binary file object, starting at its current position.

    The file object is not closed by the source.
    """

    _reader: BinaryReader
    _base_offset: int
    _name: Optional[str] = None

    def __init__(self, fileobj: BinaryIO, name: Optional[str] = None):
        if not isinstance(fileobj, IOBase):
            raise TypeError("Input must be a binary file object")
        if isinstance(fileobj, TextIOBase):
            raise TypeError("Archives must be read from binary, not text file objects")
        if not fileobj.seekable():
            raise ValueError("File object must be seekable")

        self._reader = BinaryReader(fileobj, big_endian=False)
        self._base_offset = self._reader.tell()
        self._name = name

    @property
    def name(self) -> Optional[str]:
        if self._name is not None:
            return self._name

        name = self._reader.name()

        return str(name) if name is not None else None

    def tell(self) -> int:
        return self._reader.tell() - self._base_offset

    def bytes_remaining(self) -> int:
        return self._reader.bytes_remaining()

    def read_at_most(self, n_bytes: int) -> bytes:
        return self._reader.read_at_most(n_bytes)

    def skip(self, n_bytes: int) -> int:
        if n_bytes < 0:
            raise ValueError("Number of bytes to skip must be non-negative")

        skipped = min(n_bytes, self.bytes_remaining())
        if skipped > 0:
            self._reader.seek(skipped, SEEK_CUR)

        return skipped


def make_ar_byte_source(data_or_fileobj: Union[Buffer, BinaryIO, ArByteSource], name: Optional[str] = None) \
        -> ArByteSource:
    """
    Wraps a buffer or file object in the appropriate `ArByteSource`.

    Sources are passed through unchanged. Since they carry their own name, passing a `name` along with one is an error.
    """

    if isinstance(data_or_fileobj, ArByteSource):
        if name is not None:
            raise ValueError("Cannot override the name of an existing ArByteSource; set it when creating the source")

        return data_or_fileobj
    if isinstance(data_or_fileobj, (bytes, bytearray, memoryview, mmap.mmap)):
        return BufferByteSource(data_or_fileobj, name=name)
    if isinstance(data_or_fileobj, IOBase):
        return StreamByteSource(data_or_fileobj, name=name)

    raise TypeError(
        f"Archive must be given as a bytes-like buffer or binary file object, not {type(data_or_fileobj).__name__}"
    )
