from dataclasses import replace
from enum import Enum
from typing import Iterator, Optional

from .header import ArHeader, AR_HEADER_SIZE
from .decoder import decode_ar_header
from .errors import ArFormatError, ArTruncatedDataError
from .source import ArByteSource


class ArIteratorState(Enum):
    PENDING = 'pending'
    READY = 'ready'
    EXHAUSTED = 'exhausted'
    FAILED = 'failed'


class ArHeaderIterator(Iterator[ArHeader]):
    """
    A lazy, forward-only cursor over the member headers of an AR archive.

    The iterator can be used either through the standard Python iteration protocol::

        for header in parse_ar_archive(data):
            print(header.name)

    or explicitly, via `is_exhausted`, `peek` and `advance`::

        headers = parse_ar_archive(data)
        while not headers.is_exhausted():
            print(headers.peek().name)
            headers.advance()

    Headers are decoded on demand, the first time `peek` is called for a member. Each member is visited exactly once;
    the iterator cannot be rewound.

    Any format error is fatal: once `peek` or `advance` has raised an `ArFormatError`, all subsequent calls raise the
    same error. The errors are annotated with the position in the archive where the problem was found.

    Do not create instances of this class directly; use `parse_ar_archive` or `ArFile.headers`.
    """

    _source: ArByteSource
    _state: ArIteratorState
    _current: Optional[ArHeader] = None
    _error: Optional[ArFormatError] = None

    def __init__(self, source: ArByteSource):
        self._source = source
        self._state = ArIteratorState.PENDING if source.bytes_remaining() > 0 else ArIteratorState.EXHAUSTED

    @property
    def state(self) -> ArIteratorState:
        return self._state

    @property
    def position(self) -> int:
        """
        The offset of the current member's header, relative to the start of the archive.

        While a peeked header is waiting to be consumed by `advance`, this stays at that header's offset, even though
        the underlying source has already read past it.
        """
        if self._state == ArIteratorState.READY:
            return self._current.header_offset

        return self._source.tell()

    def is_exhausted(self) -> bool:
        return self._state == ArIteratorState.EXHAUSTED

    def peek(self) -> ArHeader:
        """
        Returns the header of the current member, without moving to the next one.

        Calling this repeatedly returns the same header.

        Raises:
            ArFormatError: If the header is malformed.
            ValueError: If the iterator is already exhausted.
        """

        if self._state == ArIteratorState.READY:
            return self._current
        if self._state == ArIteratorState.FAILED:
            raise self._error
        if self._state == ArIteratorState.EXHAUSTED:
            raise ValueError("Cannot peek, the archive has no more members")

        header_offset = self._source.tell()

        try:
            header = decode_ar_header(
                self._source.read_at_most(AR_HEADER_SIZE),
                read_following=self._source.read_at_most,
            )
        except ArFormatError as e:
            self._fail(e.at_position(header_offset), e)

        self._current = replace(header, header_offset=header_offset)
        self._state = ArIteratorState.READY

        return self._current

    def advance(self):
        """
        Moves past the current member, decoding its header first if this has not already been done.

        Raises:
            ArFormatError: If the header is malformed, or the member data is truncated.
            ValueError: If the iterator is already exhausted.
        """

        header = self.peek()

        # The decoder has already consumed the BSD name block, if any
        to_skip = header.padded_size - header.data_start
        skipped = self._source.skip(to_skip)

        if skipped < header.content_size:
            self._fail(
                ArTruncatedDataError(header.name, header.content_size, skipped).at_position(header.header_offset)
            )

        self._current = None
        self._state = ArIteratorState.PENDING if self._source.bytes_remaining() > 0 else ArIteratorState.EXHAUSTED

    def __iter__(self) -> 'ArHeaderIterator':
        return self

    def __next__(self) -> ArHeader:
        if self.is_exhausted():
            raise StopIteration

        header = self.peek()
        self.advance()

        return header

    def _fail(self, error: ArFormatError, cause: Optional[BaseException] = None):
        self._current = None
        self._error = error
        self._state = ArIteratorState.FAILED

        raise error from cause
