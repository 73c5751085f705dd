"""Decoding of single track events: channel, meta and system-exclusive."""
from __future__ import annotations

from typing import Any, Dict, Tuple

from .config import DecoderConfig
from .errors import (
    InvalidEventLengthError,
    MissingRunningStatusError,
    UnknownEventTypeError,
)
from .models import (
    CHANNEL_SUBTYPES,
    META_SUBTYPES,
    ChannelEvent,
    Event,
    MetaEvent,
    SysexEvent,
)
from .primitives import read_varlen
from .streams import ByteCursor

_TEXT_META_TYPES = frozenset(range(0x01, 0x0A))
_SMPTE_FRAME_RATES = (24.0, 25.0, 29.97, 30.0)

# Allowed payload lengths for meta events with a fixed shape.
_META_LENGTHS: Dict[int, Tuple[int, ...]] = {
    0x00: (0, 2),
    0x20: (1,),
    0x21: (1,),
    0x2F: (0,),
    0x51: (3,),
    0x54: (5,),
    0x58: (4,),
    0x59: (2,),
}

_CHANNEL_FIELDS: Dict[int, Tuple[str, ...]] = {
    0x80: ("note", "velocity"),
    0x90: ("note", "velocity"),
    0xA0: ("note", "amount"),
    0xB0: ("controller", "value"),
    0xC0: ("program",),
    0xD0: ("amount",),
}


def decode_event(
    cursor: ByteCursor,
    running_status: int | None,
    *,
    config: DecoderConfig,
) -> tuple[Event, int | None]:
    """Decode the next event and return it with the updated running status.

    The cursor ends exactly past the event. When the event is not complete
    yet the cursor is left at its first byte and
    :class:`~midi_stream.streams.NeedMoreData` propagates.
    """

    with cursor.checkpoint():
        delay = read_varlen(cursor, max_bytes=config.max_vlq_bytes)
        status_offset = cursor.tell()
        status = cursor.peek_byte()
        if status & 0x80:
            cursor.read_byte()
        elif running_status is None:
            raise MissingRunningStatusError(status, byte_offset=status_offset)
        else:
            status = running_status

        if status == 0xFF:
            event = _decode_meta(cursor, delay, config)
            if config.sysex_resets_running_status:
                running_status = None
            return event, running_status

        if status in (0xF0, 0xF7):
            length = read_varlen(cursor, max_bytes=config.max_vlq_bytes)
            event = SysexEvent(delay=delay, status=status, data=cursor.read_exact(length))
            if config.sysex_resets_running_status:
                running_status = None
            return event, running_status

        if 0x80 <= status < 0xF0:
            return _decode_channel(cursor, delay, status), status

        raise UnknownEventTypeError(status, byte_offset=status_offset)


def _decode_channel(cursor: ByteCursor, delay: int, status: int) -> ChannelEvent:
    event_type = status & 0xF0
    channel = status & 0x0F
    data_length = 1 if event_type in (0xC0, 0xD0) else 2
    payload = cursor.read_exact(data_length)

    if event_type == 0xE0:
        attributes: Dict[str, int] = {"value": (payload[0] & 0x7F) | ((payload[1] & 0x7F) << 7)}
    else:
        attributes = dict(zip(_CHANNEL_FIELDS[event_type], payload))
    return ChannelEvent(
        delay=delay,
        subtype=CHANNEL_SUBTYPES[event_type],
        channel=channel,
        attributes=attributes,
    )


def _decode_meta(cursor: ByteCursor, delay: int, config: DecoderConfig) -> MetaEvent:
    meta_type = cursor.read_byte()
    length_offset = cursor.tell()
    length = read_varlen(cursor, max_bytes=config.max_vlq_bytes)
    subtype = META_SUBTYPES.get(meta_type, "unknown")

    expected = _META_LENGTHS.get(meta_type)
    if expected is not None and length not in expected:
        raise InvalidEventLengthError(subtype, length, expected, byte_offset=length_offset)

    payload = cursor.read_exact(length)
    return MetaEvent(
        delay=delay,
        subtype=subtype,
        meta_type=meta_type,
        data=payload,
        attributes=_meta_attributes(meta_type, payload, config),
    )


def _meta_attributes(meta_type: int, payload: bytes, config: DecoderConfig) -> Dict[str, Any]:
    if meta_type == 0x00:
        return {"number": int.from_bytes(payload, "big") if payload else None}
    if meta_type in _TEXT_META_TYPES:
        return {"text": payload.decode(config.text_encoding, errors="replace")}
    if meta_type == 0x20:
        return {"channel": payload[0]}
    if meta_type == 0x21:
        return {"port": payload[0]}
    if meta_type == 0x51:
        return {"tempo": int.from_bytes(payload, "big", signed=False)}
    if meta_type == 0x54:
        hour_byte, minute, second, frame, subframe = payload
        return {
            "frame_rate": _SMPTE_FRAME_RATES[(hour_byte >> 5) & 0x03],
            "hour": hour_byte & 0x1F,
            "minute": minute,
            "second": second,
            "frame": frame,
            "subframe": subframe,
        }
    if meta_type == 0x58:
        numerator, denominator_power, metronome, thirty_seconds = payload
        return {
            "numerator": numerator,
            "denominator": 2**denominator_power,
            "metronome": metronome,
            "thirty_seconds": thirty_seconds,
        }
    if meta_type == 0x59:
        key = payload[0] - 256 if payload[0] > 127 else payload[0]
        return {"key": key, "major": payload[1] == 0}
    if meta_type == 0x7F:
        return {"data": payload}
    return {}


__all__ = ["decode_event"]
