"""Incremental Standard MIDI File decoder.

:class:`MidiFileDecoder` is a resumable state machine::

    AWAITING_HEADER -> DECODING_TRACK(0) -> ... -> DECODING_TRACK(n-1) -> COMPLETE

with ``ERRORED`` reachable from every state. Bytes are pushed with
:meth:`MidiFileDecoder.feed` in chunks of any size; each feed advances the
machine as far as the available bytes allow and suspends at the first read
that cannot be satisfied yet. :meth:`MidiFileDecoder.close` marks the end of
the input, turning a pending read into :class:`TruncatedDataError`.

Decoding a whole buffer is the degenerate case of a single feed followed by
``close``, so both modes yield identical structures and identical errors for
the same bytes, regardless of where the chunk boundaries fall.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable, List

from .config import DecoderConfig, get_decoder_config
from .errors import MidiDecodeError, TruncatedDataError
from .header import decode_header
from .models import Header, MidiFile, Track
from .result import DriveResult
from .streams import ByteCursor, NeedMoreData
from .tracks import TrackDecoder

logger = logging.getLogger(__name__)

CompleteListener = Callable[[MidiFile], None]
ErrorListener = Callable[[MidiDecodeError], None]


class DecoderState(str, Enum):
    AWAITING_HEADER = "awaiting_header"
    DECODING_TRACK = "decoding_track"
    COMPLETE = "complete"
    ERRORED = "errored"


class MidiFileDecoder:
    """Decode a MIDI file from bytes delivered in order, all at once or piecemeal."""

    def __init__(self, *, config: DecoderConfig | None = None) -> None:
        self.config = config if config is not None else get_decoder_config()
        self._cursor = ByteCursor()
        self._state = DecoderState.AWAITING_HEADER
        self._header: Header | None = None
        self._tracks: List[Track] = []
        self._track_decoder: TrackDecoder | None = None
        self._pending: NeedMoreData | None = None
        self._result = DriveResult.suspended()
        self._closed = False
        self._complete_listeners: List[CompleteListener] = []
        self._error_listeners: List[ErrorListener] = []

    @classmethod
    def decode(cls, data: bytes, *, config: DecoderConfig | None = None) -> DriveResult:
        """Decode a complete in-memory file."""

        decoder = cls(config=config)
        decoder.feed(data)
        return decoder.close()

    @property
    def state(self) -> DecoderState:
        return self._state

    @property
    def track_index(self) -> int:
        """Index of the track being decoded (or the number decoded so far)."""

        return len(self._tracks)

    @property
    def bytes_received(self) -> int:
        return self._cursor.received

    @property
    def result(self) -> DriveResult:
        return self._result

    @property
    def closed(self) -> bool:
        return self._closed

    def on_complete(self, listener: CompleteListener) -> Callable[[], None]:
        return _register(self._complete_listeners, listener)

    def on_error(self, listener: ErrorListener) -> Callable[[], None]:
        return _register(self._error_listeners, listener)

    def feed(self, data: bytes) -> DriveResult:
        if self._closed:
            raise ValueError("Cannot feed a MIDI decoder after end of input.")
        if self._state is DecoderState.ERRORED:
            return self._result
        if self._state is DecoderState.COMPLETE:
            if data:
                logger.debug("Ignoring %d bytes after the last track", len(data))
            return self._result
        self._cursor.feed(data)
        return self._drive()

    def close(self) -> DriveResult:
        if self._closed:
            return self._result
        self._closed = True
        if self._state in (DecoderState.AWAITING_HEADER, DecoderState.DECODING_TRACK):
            self._drive()
        if self._state in (DecoderState.AWAITING_HEADER, DecoderState.DECODING_TRACK):
            pending = self._pending
            assert pending is not None
            self._fail(
                TruncatedDataError(pending.needed, pending.available, byte_offset=pending.offset)
            )
        return self._result

    def _drive(self) -> DriveResult:
        cursor = self._cursor
        try:
            if self._state is DecoderState.AWAITING_HEADER:
                self._header = decode_header(cursor)
                self._state = DecoderState.DECODING_TRACK
                cursor.compact()
            assert self._header is not None
            while len(self._tracks) < self._header.track_count:
                if self._track_decoder is None:
                    self._track_decoder = TrackDecoder(config=self.config, index=len(self._tracks))
                self._tracks.append(self._track_decoder.advance(cursor))
                self._track_decoder = None
                cursor.compact()
        except NeedMoreData as pending:
            self._pending = pending
            logger.debug(
                "Suspended at byte %d waiting for %d more bytes", pending.offset, pending.needed
            )
            return self._result
        except MidiDecodeError as error:
            self._fail(error)
            return self._result

        self._complete()
        return self._result

    def _complete(self) -> None:
        assert self._header is not None
        midi_file = MidiFile(header=self._header, tracks=tuple(self._tracks))
        self._state = DecoderState.COMPLETE
        self._pending = None
        self._result = DriveResult.completed(midi_file)
        trailing = self._cursor.remaining
        if trailing:
            logger.debug("Ignoring %d bytes after the last track", trailing)
        self._cursor.compact(force=True)
        logger.debug("Decoded MIDI file with %d tracks", len(midi_file.tracks))
        for listener in list(self._complete_listeners):
            listener(midi_file)

    def _fail(self, error: MidiDecodeError) -> None:
        self._state = DecoderState.ERRORED
        self._pending = None
        self._track_decoder = None
        self._tracks = []
        self._result = DriveResult.failed(error)
        logger.info("MIDI decode failed (%s): %s", error.kind, error)
        for listener in list(self._error_listeners):
            listener(error)


def _register(listeners: list, listener: Callable) -> Callable[[], None]:
    listeners.append(listener)

    def _unsubscribe() -> None:
        try:
            listeners.remove(listener)
        except ValueError:  # pragma: no cover - already removed
            pass

    return _unsubscribe


def decode_bytes(data: bytes, *, config: DecoderConfig | None = None) -> MidiFile:
    """Decode a complete file, raising :class:`MidiDecodeError` on malformed input."""

    return MidiFileDecoder.decode(data, config=config).unwrap()


def decode_chunks(chunks: Iterable[bytes], *, config: DecoderConfig | None = None) -> DriveResult:
    """Feed ``chunks`` in order, then signal end of input."""

    decoder = MidiFileDecoder(config=config)
    for chunk in chunks:
        if decoder.feed(chunk).is_failed():
            break
    return decoder.close()


__all__ = [
    "DecoderState",
    "MidiFileDecoder",
    "decode_bytes",
    "decode_chunks",
]
