"""Immutable data model produced by the MIDI decoders."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Tuple, Union

HEADER_TAG = b"MThd"
TRACK_TAG = b"MTrk"
HEADER_LENGTH = 6

CHANNEL_SUBTYPES: Mapping[int, str] = MappingProxyType(
    {
        0x80: "note_off",
        0x90: "note_on",
        0xA0: "note_aftertouch",
        0xB0: "controller",
        0xC0: "program_change",
        0xD0: "channel_aftertouch",
        0xE0: "pitch_bend",
    }
)

META_SUBTYPES: Mapping[int, str] = MappingProxyType(
    {
        0x00: "sequence_number",
        0x01: "text",
        0x02: "copyright_notice",
        0x03: "sequence_name",
        0x04: "instrument_name",
        0x05: "lyrics",
        0x06: "marker",
        0x07: "cue_point",
        0x08: "program_name",
        0x09: "device_name",
        0x20: "channel_prefix",
        0x21: "port_prefix",
        0x2F: "end_of_track",
        0x51: "set_tempo",
        0x54: "smpte_offset",
        0x58: "time_signature",
        0x59: "key_signature",
        0x7F: "sequencer_specific",
    }
)

END_OF_TRACK = 0x2F


def _freeze(attributes: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(attributes or {}))


def _attribute_key(attributes: Mapping[str, Any]) -> tuple:
    return tuple(sorted(attributes.items()))


@dataclass(frozen=True)
class Header:
    """Fields of the ``MThd`` chunk."""

    format_type: int
    track_count: int
    time_division: int

    @property
    def uses_smpte(self) -> bool:
        return bool(self.time_division & 0x8000)

    @property
    def ticks_per_beat(self) -> int | None:
        if self.uses_smpte:
            return None
        return self.time_division & 0x7FFF

    @property
    def smpte_frames_per_second(self) -> int | None:
        # The high byte holds the frame rate as a negative two's-complement value.
        if not self.uses_smpte:
            return None
        return 256 - (self.time_division >> 8)

    @property
    def ticks_per_frame(self) -> int | None:
        if not self.uses_smpte:
            return None
        return self.time_division & 0xFF


@dataclass(frozen=True)
class ChannelEvent:
    """Voice message addressed to one of the sixteen MIDI channels."""

    kind: ClassVar[str] = "channel"

    delay: int
    subtype: str
    channel: int
    attributes: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", _freeze(self.attributes))

    # Explicit because the read-only attributes view is not hashable.
    def __hash__(self) -> int:
        return hash((self.delay, self.subtype, self.channel, _attribute_key(self.attributes)))


@dataclass(frozen=True)
class MetaEvent:
    """Non-MIDI information stored in the file (tempo, names, markers...)."""

    kind: ClassVar[str] = "meta"

    delay: int
    subtype: str
    meta_type: int
    data: bytes = b""
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", _freeze(self.attributes))

    def __hash__(self) -> int:
        return hash(
            (self.delay, self.subtype, self.meta_type, self.data, _attribute_key(self.attributes))
        )

    @property
    def is_end_of_track(self) -> bool:
        return self.meta_type == END_OF_TRACK

    @property
    def bpm(self) -> float | None:
        tempo = self.attributes.get("tempo") if self.subtype == "set_tempo" else None
        if not tempo:
            return None
        return 60_000_000.0 / float(tempo)


@dataclass(frozen=True)
class SysexEvent:
    """System-exclusive message introduced by ``0xF0`` or an ``0xF7`` escape."""

    kind: ClassVar[str] = "sysex"

    delay: int
    status: int
    data: bytes = b""


Event = Union[ChannelEvent, MetaEvent, SysexEvent]


@dataclass(frozen=True)
class Track:
    """Events of one ``MTrk`` chunk, ending with an end-of-track meta event."""

    events: Tuple[Event, ...]

    @property
    def end_of_track(self) -> MetaEvent:
        last = self.events[-1]
        assert isinstance(last, MetaEvent) and last.is_end_of_track
        return last

    @property
    def duration(self) -> int:
        return sum(event.delay for event in self.events)


@dataclass(frozen=True)
class MidiFile:
    """Decoded header and tracks, in declared order."""

    header: Header
    tracks: Tuple[Track, ...]


def end_of_track_event(delay: int = 0) -> MetaEvent:
    return MetaEvent(delay=delay, subtype="end_of_track", meta_type=END_OF_TRACK)


__all__ = [
    "CHANNEL_SUBTYPES",
    "ChannelEvent",
    "END_OF_TRACK",
    "Event",
    "HEADER_LENGTH",
    "HEADER_TAG",
    "Header",
    "META_SUBTYPES",
    "MetaEvent",
    "MidiFile",
    "SysexEvent",
    "TRACK_TAG",
    "Track",
    "end_of_track_event",
]
