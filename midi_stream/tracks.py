"""Resumable decoding of ``MTrk`` chunks."""
from __future__ import annotations

import logging
from typing import List

from .config import DecoderConfig
from .errors import InvalidChunkTagError, MissingEndOfTrackError
from .events import decode_event
from .models import TRACK_TAG, Event, MetaEvent, Track, end_of_track_event
from .primitives import read_tag, read_uint
from .streams import ByteCursor, ChunkBoundaryReached, NeedMoreData

logger = logging.getLogger(__name__)


class TrackDecoder:
    """Decode one track chunk, suspending whenever the cursor runs dry.

    :meth:`advance` either returns the finished :class:`Track` or raises
    :class:`~midi_stream.streams.NeedMoreData`; calling it again after more
    bytes were fed resumes at the first unit that was not complete.
    """

    def __init__(self, *, config: DecoderConfig, index: int = 0):
        self.config = config
        self.index = index
        self.running_status: int | None = None
        self.events: List[Event] = []
        self.length: int | None = None
        self._data_start = 0
        self._reached_eot = False
        self._padding = 0

    def _consumed_at(self, offset: int) -> int:
        return offset - self._data_start

    def advance(self, cursor: ByteCursor) -> Track:
        if self.length is None:
            self._read_chunk_header(cursor)
        while not self._reached_eot:
            self._decode_next_event(cursor)
            cursor.compact()
        self._skip_padding(cursor)
        logger.debug(
            "Decoded track %d: %d events in %d bytes", self.index, len(self.events), self.length
        )
        return Track(events=tuple(self.events))

    def _read_chunk_header(self, cursor: ByteCursor) -> None:
        with cursor.checkpoint() as start:
            tag = read_tag(cursor)
            if tag != TRACK_TAG:
                raise InvalidChunkTagError(TRACK_TAG, tag, byte_offset=start)
            self.length = read_uint(cursor, 4)
        self._data_start = cursor.tell()

    def _decode_next_event(self, cursor: ByteCursor) -> None:
        assert self.length is not None
        event_offset = cursor.tell()
        if self._consumed_at(event_offset) >= self.length:
            self._handle_missing_end_of_track(event_offset)
            return

        try:
            with cursor.bounded(self._data_start + self.length):
                event, running_status = decode_event(
                    cursor, self.running_status, config=self.config
                )
        except ChunkBoundaryReached:
            raise MissingEndOfTrackError(
                f"track {self.index} chunk ends inside an event", byte_offset=event_offset
            ) from None
        consumed = self._consumed_at(cursor.tell())

        self.running_status = running_status
        self.events.append(event)
        if isinstance(event, MetaEvent) and event.is_end_of_track:
            self._reached_eot = True
            self._padding = self.length - consumed

    def _handle_missing_end_of_track(self, offset: int) -> None:
        if not self.config.synthesize_end_of_track:
            raise MissingEndOfTrackError(
                f"track {self.index} has no end-of-track event", byte_offset=offset
            )
        logger.warning("Track %d has no end-of-track event; inserting one", self.index)
        self.events.append(end_of_track_event())
        self._reached_eot = True

    def _skip_padding(self, cursor: ByteCursor) -> None:
        if self._padding:
            skipped = cursor.request_up_to(self._padding)
            self._padding -= len(skipped)
            if skipped:
                logger.debug("Skipped %d bytes after end-of-track in track %d", len(skipped), self.index)
        if self._padding:
            raise NeedMoreData(cursor.tell(), self._padding, 0)


__all__ = ["TrackDecoder"]
