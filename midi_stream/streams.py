"""Incremental byte cursor shared by the MIDI decoders."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

_COMPACT_THRESHOLD = 64 * 1024


class NeedMoreData(Exception):
    """Signal that a read could not be satisfied by the bytes received so far.

    This never escapes the decoder: the file decoder turns it into a
    suspension, or into :class:`~midi_stream.errors.TruncatedDataError` once
    the input is closed.
    """

    def __init__(self, offset: int, needed: int, available: int) -> None:
        super().__init__(f"need {needed} bytes at offset {offset}, have {available}")
        self.offset = offset
        self.needed = needed
        self.available = available


class ChunkBoundaryReached(Exception):
    """Signal that a read would run past the end of the enclosing chunk."""

    def __init__(self, offset: int, needed: int, limit: int) -> None:
        super().__init__(f"need {needed} bytes at offset {offset}, chunk ends at {limit}")
        self.offset = offset
        self.needed = needed
        self.limit = limit


class ByteCursor:
    """Accumulate fed bytes and read them back in order with a stateful cursor.

    Reads either return the requested bytes and advance, or report that the
    bytes have not arrived yet without moving, so the same read can be retried
    verbatim after the next :meth:`feed`.
    """

    __slots__ = ("_buffer", "_base", "_position", "_limit")

    def __init__(self, data: bytes = b""):
        self._buffer = bytearray(data)
        # Absolute stream offset of ``_buffer[0]``.
        self._base = 0
        self._position = 0
        # Absolute offset reads may not cross, if any.
        self._limit: int | None = None

    @property
    def remaining(self) -> int:
        return len(self._buffer) - self._position

    @property
    def received(self) -> int:
        return self._base + len(self._buffer)

    def tell(self) -> int:
        return self._base + self._position

    def feed(self, data: bytes) -> None:
        self._buffer.extend(data)

    @property
    def limit(self) -> int | None:
        return self._limit

    def _check_limit(self, size: int) -> None:
        if self._limit is not None and self.tell() + size > self._limit:
            raise ChunkBoundaryReached(self.tell(), size, self._limit)

    def request(self, size: int) -> bytes | None:
        if size < 0:
            raise ValueError("Size must be non-negative.")
        self._check_limit(size)
        if self.remaining < size:
            return None
        start = self._position
        self._position += size
        return bytes(self._buffer[start : start + size])

    def request_up_to(self, size: int) -> bytes:
        if size < 0:
            raise ValueError("Size must be non-negative.")
        available = min(size, self.remaining)
        start = self._position
        self._position += available
        return bytes(self._buffer[start : start + available])

    def peek(self, size: int) -> bytes | None:
        if size < 0:
            raise ValueError("Size must be non-negative.")
        self._check_limit(size)
        if self.remaining < size:
            return None
        return bytes(self._buffer[self._position : self._position + size])

    def read_exact(self, size: int) -> bytes:
        """Return ``size`` bytes or raise :class:`NeedMoreData` without moving."""

        data = self.request(size)
        if data is None:
            raise NeedMoreData(self.tell(), size, self.remaining)
        return data

    def read_byte(self) -> int:
        return self.read_exact(1)[0]

    def peek_byte(self) -> int:
        data = self.peek(1)
        if data is None:
            raise NeedMoreData(self.tell(), 1, 0)
        return data[0]

    def seek(self, offset: int) -> None:
        position = offset - self._base
        if not 0 <= position <= len(self._buffer):
            raise ValueError(f"Offset {offset} is outside the retained buffer.")
        self._position = position

    @contextmanager
    def checkpoint(self) -> Iterator[int]:
        """Rewind to the current offset if the block runs out of bytes."""

        start = self.tell()
        try:
            yield start
        except NeedMoreData:
            self.seek(start)
            raise

    @contextmanager
    def bounded(self, limit: int) -> Iterator[int]:
        """Refuse reads past the absolute offset ``limit`` inside the block.

        A read that would cross it raises :class:`ChunkBoundaryReached` as soon
        as its size is known, whether or not those bytes have arrived.
        """

        previous = self._limit
        self._limit = limit
        try:
            yield limit
        finally:
            self._limit = previous

    def compact(self, *, force: bool = False) -> None:
        """Drop bytes that were already consumed, keeping offsets stable."""

        if not force and self._position < _COMPACT_THRESHOLD:
            return
        del self._buffer[: self._position]
        self._base += self._position
        self._position = 0


__all__ = ["ByteCursor", "ChunkBoundaryReached", "NeedMoreData"]
