from __future__ import annotations

import pytest

from midi_stream.config import DecoderConfig
from midi_stream.errors import (
    InvalidEventLengthError,
    MissingRunningStatusError,
    UnknownEventTypeError,
)
from midi_stream.events import decode_event
from midi_stream.models import ChannelEvent, MetaEvent, SysexEvent
from midi_stream.streams import ByteCursor, NeedMoreData

from tests.helpers import channel, meta, sysex, tempo, text_meta

CONFIG = DecoderConfig()


def _decode(data: bytes, running_status: int | None = None, *, config: DecoderConfig = CONFIG):
    cursor = ByteCursor(data)
    event, status = decode_event(cursor, running_status, config=config)
    assert cursor.remaining == 0, "event decoder must stop exactly after the event"
    return event, status


@pytest.mark.parametrize(
    ("status", "data", "subtype", "attributes"),
    [
        (0x80, (60, 64), "note_off", {"note": 60, "velocity": 64}),
        (0x91, (60, 100), "note_on", {"note": 60, "velocity": 100}),
        (0xA2, (61, 33), "note_aftertouch", {"note": 61, "amount": 33}),
        (0xB3, (7, 127), "controller", {"controller": 7, "value": 127}),
        (0xC4, (1,), "program_change", {"program": 1}),
        (0xD5, (90,), "channel_aftertouch", {"amount": 90}),
        (0xE6, (0x00, 0x40), "pitch_bend", {"value": 0x2000}),
    ],
)
def test_channel_events(status, data, subtype, attributes) -> None:
    event, running_status = _decode(channel(10, status, *data))

    assert isinstance(event, ChannelEvent)
    assert event.kind == "channel"
    assert event.delay == 10
    assert event.subtype == subtype
    assert event.channel == status & 0x0F
    assert event.attributes == attributes
    assert running_status == status


def test_running_status_is_inherited() -> None:
    cursor = ByteCursor(channel(0, 0x90, 60, 100) + channel(0, None, 62, 100))

    first, status = decode_event(cursor, None, config=CONFIG)
    second, status = decode_event(cursor, status, config=CONFIG)

    assert first == ChannelEvent(0, "note_on", 0, {"note": 60, "velocity": 100})
    assert second == ChannelEvent(0, "note_on", 0, {"note": 62, "velocity": 100})
    assert status == 0x90


def test_data_byte_without_running_status_fails() -> None:
    cursor = ByteCursor(b"\x00\x40\x40")

    with pytest.raises(MissingRunningStatusError) as excinfo:
        decode_event(cursor, None, config=CONFIG)

    assert excinfo.value.kind == "MissingRunningStatus"
    assert excinfo.value.byte_offset == 1


@pytest.mark.parametrize("status", [0xF1, 0xF2, 0xF4, 0xF8, 0xFE])
def test_unknown_status_fails(status: int) -> None:
    with pytest.raises(UnknownEventTypeError) as excinfo:
        decode_event(ByteCursor(bytes([0x00, status, 0x00])), None, config=CONFIG)

    assert excinfo.value.status == status
    assert excinfo.value.byte_offset == 1


def test_set_tempo() -> None:
    event, _ = _decode(b"\x00\xFF\x51\x03\x09\x27\xC0")

    assert isinstance(event, MetaEvent)
    assert event.subtype == "set_tempo"
    assert event.attributes == {"tempo": 600000}
    assert event.bpm == pytest.approx(100.0)


def test_time_signature() -> None:
    event, _ = _decode(meta(0, 0x58, bytes([6, 3, 24, 8])))

    assert event.subtype == "time_signature"
    assert event.attributes == {
        "numerator": 6,
        "denominator": 8,
        "metronome": 24,
        "thirty_seconds": 8,
    }


@pytest.mark.parametrize(
    ("payload", "key", "major"),
    [
        (bytes([0, 0]), 0, True),
        (bytes([0xFD, 1]), -3, False),
        (bytes([4, 0]), 4, True),
    ],
)
def test_key_signature(payload: bytes, key: int, major: bool) -> None:
    event, _ = _decode(meta(0, 0x59, payload))

    assert event.attributes == {"key": key, "major": major}


@pytest.mark.parametrize(
    ("meta_type", "subtype"),
    [
        (0x01, "text"),
        (0x02, "copyright_notice"),
        (0x03, "sequence_name"),
        (0x04, "instrument_name"),
        (0x05, "lyrics"),
        (0x06, "marker"),
        (0x07, "cue_point"),
        (0x08, "program_name"),
        (0x09, "device_name"),
    ],
)
def test_text_events(meta_type: int, subtype: str) -> None:
    event, _ = _decode(text_meta(5, meta_type, "Caf\xe9"))

    assert event.subtype == subtype
    assert event.delay == 5
    assert event.attributes == {"text": "Caf\xe9"}


def test_text_encoding_is_configurable() -> None:
    config = DecoderConfig(text_encoding="utf-8")
    event, _ = _decode(meta(0, 0x03, "Café".encode("utf-8")), config=config)

    assert event.attributes["text"] == "Café"


def test_sequence_number_and_prefixes() -> None:
    numbered, _ = _decode(meta(0, 0x00, b"\x00\x07"))
    unnumbered, _ = _decode(meta(0, 0x00))
    channel_prefix, _ = _decode(meta(0, 0x20, b"\x09"))
    port_prefix, _ = _decode(meta(0, 0x21, b"\x01"))

    assert numbered.attributes == {"number": 7}
    assert unnumbered.attributes == {"number": None}
    assert channel_prefix.attributes == {"channel": 9}
    assert port_prefix.attributes == {"port": 1}


def test_smpte_offset() -> None:
    event, _ = _decode(meta(0, 0x54, bytes([0x61, 2, 3, 4, 5])))

    assert event.subtype == "smpte_offset"
    assert event.attributes == {
        "frame_rate": 30.0,
        "hour": 1,
        "minute": 2,
        "second": 3,
        "frame": 4,
        "subframe": 5,
    }


def test_sequencer_specific_and_unknown_meta_keep_raw_payload() -> None:
    specific, _ = _decode(meta(0, 0x7F, b"\x00\x00\x41\x01"))
    unknown, _ = _decode(meta(0, 0x60, b"\x01\x02"))

    assert specific.subtype == "sequencer_specific"
    assert specific.attributes == {"data": b"\x00\x00\x41\x01"}
    assert unknown.subtype == "unknown"
    assert unknown.meta_type == 0x60
    assert unknown.data == b"\x01\x02"


def test_end_of_track() -> None:
    event, _ = _decode(b"\x00\xFF\x2F\x00")

    assert event.is_end_of_track
    assert event.attributes == {}


@pytest.mark.parametrize(
    ("meta_type", "payload"),
    [
        (0x2F, b"\x00"),
        (0x51, b"\x07\xA1"),
        (0x58, b"\x04\x02\x18"),
        (0x59, b"\x00"),
        (0x00, b"\x01"),
    ],
)
def test_fixed_shape_meta_with_wrong_length_fails(meta_type: int, payload: bytes) -> None:
    with pytest.raises(InvalidEventLengthError) as excinfo:
        decode_event(ByteCursor(meta(0, meta_type, payload)), None, config=CONFIG)

    assert excinfo.value.kind == "InvalidEventLength"
    assert excinfo.value.byte_offset == 3


@pytest.mark.parametrize("status", [0xF0, 0xF7])
def test_sysex_events(status: int) -> None:
    payload = b"\x43\x12\x00\xF7"
    event, _ = _decode(sysex(96, payload, status=status))

    assert event == SysexEvent(delay=96, status=status, data=payload)
    assert event.kind == "sysex"


def test_meta_and_sysex_preserve_running_status_by_default() -> None:
    _, after_meta = _decode(tempo(0, 500_000), 0x92)
    _, after_sysex = _decode(sysex(0, b"\x01\xF7"), 0x92)

    assert after_meta == 0x92
    assert after_sysex == 0x92


def test_meta_and_sysex_can_reset_running_status() -> None:
    config = DecoderConfig(running_status_after_sysex="reset")

    _, after_meta = _decode(tempo(0, 500_000), 0x92, config=config)
    _, after_sysex = _decode(sysex(0, b"\x01\xF7"), 0x92, config=config)

    assert after_meta is None
    assert after_sysex is None


def test_incomplete_event_rewinds_to_its_first_byte() -> None:
    data = tempo(200, 500_000)
    cursor = ByteCursor(b"\x00")
    cursor.request(1)
    cursor.feed(data[:-1])

    with pytest.raises(NeedMoreData):
        decode_event(cursor, None, config=CONFIG)
    assert cursor.tell() == 1

    cursor.feed(data[-1:])
    event, _ = decode_event(cursor, None, config=CONFIG)
    assert event.delay == 200
    assert event.attributes == {"tempo": 500_000}
    assert cursor.remaining == 0
