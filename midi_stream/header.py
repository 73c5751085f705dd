"""Decoding of the ``MThd`` header chunk."""
from __future__ import annotations

import logging

from .errors import InvalidChunkTagError, InvalidFormatTypeError, InvalidHeaderLengthError
from .models import HEADER_LENGTH, HEADER_TAG, Header
from .primitives import read_tag, read_uint
from .streams import ByteCursor

logger = logging.getLogger(__name__)

_FORMAT_TYPES = (0, 1, 2)


def decode_header(cursor: ByteCursor) -> Header:
    """Read the header chunk, validating each field as soon as it arrives.

    A track count of 0 is accepted; the file then completes with no tracks.
    """

    with cursor.checkpoint() as start:
        tag = read_tag(cursor)
        if tag != HEADER_TAG:
            raise InvalidChunkTagError(HEADER_TAG, tag, byte_offset=start)

        length_offset = cursor.tell()
        length = read_uint(cursor, 4)
        if length != HEADER_LENGTH:
            raise InvalidHeaderLengthError(length, byte_offset=length_offset)

        format_offset = cursor.tell()
        format_type = read_uint(cursor, 2)
        if format_type not in _FORMAT_TYPES:
            raise InvalidFormatTypeError(format_type, byte_offset=format_offset)

        track_count = read_uint(cursor, 2)
        time_division = read_uint(cursor, 2)

    header = Header(format_type=format_type, track_count=track_count, time_division=time_division)
    logger.debug(
        "Decoded MIDI header: format=%d tracks=%d division=0x%04X",
        format_type,
        track_count,
        time_division,
    )
    return header


__all__ = ["decode_header"]
