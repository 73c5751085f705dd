"""Fixed-width integer and variable-length quantity readers."""
from __future__ import annotations

from .errors import MalformedVLQError
from .streams import ByteCursor

DEFAULT_MAX_VLQ_BYTES = 4
_UINT_WIDTHS = (1, 2, 4)


def read_uint(cursor: ByteCursor, width: int) -> int:
    """Read a big-endian unsigned integer of 1, 2 or 4 bytes."""

    if width not in _UINT_WIDTHS:
        raise ValueError(f"Unsupported integer width: {width}")
    return int.from_bytes(cursor.read_exact(width), "big", signed=False)


def read_tag(cursor: ByteCursor) -> bytes:
    return cursor.read_exact(4)


def read_varlen(cursor: ByteCursor, *, max_bytes: int = DEFAULT_MAX_VLQ_BYTES) -> int:
    """Read a MIDI variable-length quantity.

    A partially received quantity leaves the cursor where it started. A
    quantity still continuing after ``max_bytes`` bytes raises
    :class:`MalformedVLQError` as soon as the offending byte is seen.
    """

    with cursor.checkpoint() as start:
        value = 0
        consumed = 0
        while True:
            byte = cursor.read_byte()
            value = (value << 7) | (byte & 0x7F)
            consumed += 1
            if byte & 0x80 == 0:
                return value
            if consumed >= max_bytes:
                raise MalformedVLQError(max_bytes, byte_offset=start)


__all__ = ["DEFAULT_MAX_VLQ_BYTES", "read_tag", "read_uint", "read_varlen"]
