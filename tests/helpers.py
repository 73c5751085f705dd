from __future__ import annotations

import struct
from typing import Iterator, Sequence


def vlq(value: int) -> bytes:
    buffer = [value & 0x7F]
    value >>= 7
    while value:
        buffer.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(buffer))


def header_chunk(format_type: int = 1, track_count: int = 1, division: int = 480) -> bytes:
    return b"MThd" + struct.pack(">IHHH", 6, format_type, track_count, division)


def track_chunk(track_bytes: bytes, *, length: int | None = None) -> bytes:
    declared = len(track_bytes) if length is None else length
    return b"MTrk" + struct.pack(">I", declared) + track_bytes


def midi_file(*tracks: bytes, format_type: int = 1, division: int = 480) -> bytes:
    chunks = [header_chunk(format_type, len(tracks), division)]
    chunks.extend(track_chunk(track) for track in tracks)
    return b"".join(chunks)


def meta(delay: int, meta_type: int, payload: bytes = b"") -> bytes:
    return vlq(delay) + bytes([0xFF, meta_type]) + vlq(len(payload)) + payload


def text_meta(delay: int, meta_type: int, text: str) -> bytes:
    return meta(delay, meta_type, text.encode("latin-1"))


def end_of_track(delay: int = 0) -> bytes:
    return meta(delay, 0x2F)


def tempo(delay: int, microseconds: int) -> bytes:
    return meta(delay, 0x51, microseconds.to_bytes(3, "big"))


def channel(delay: int, status: int | None, *data: int) -> bytes:
    """Encode a channel event; ``status=None`` relies on running status."""

    head = vlq(delay)
    if status is not None:
        head += bytes([status])
    return head + bytes(data)


def sysex(delay: int, payload: bytes, *, status: int = 0xF0) -> bytes:
    return vlq(delay) + bytes([status]) + vlq(len(payload)) + payload


def conductor_track() -> bytes:
    return b"".join(
        [
            text_meta(0, 0x04, ""),
            tempo(0, 500_000),
            text_meta(0, 0x03, "Sequence Name"),
            meta(0, 0x58, bytes([6, 3, 24, 8])),
            meta(0, 0x59, bytes([0, 0])),
            end_of_track(),
        ]
    )


SCALE = (64, 66, 68, 69, 71, 73, 75, 76)


def piano_track() -> bytes:
    parts = [
        text_meta(0, 0x04, "Acoustic Grand Piano"),
        text_meta(0, 0x03, "My New Track"),
        channel(0, 0xB0, 7, 127),
        channel(0, 0xC0, 1),
    ]
    for note in SCALE[:4]:
        parts.append(channel(0, 0x90, note, 127))
        parts.append(channel(480, 0x80, note, 127))
    # Upper half: note-on with velocity 0 as note-off, all under running status.
    parts.append(channel(0, 0x90, SCALE[4], 127))
    parts.append(channel(480, None, SCALE[4], 0))
    for note in SCALE[5:]:
        parts.append(channel(0, None, note, 127))
        parts.append(channel(480, None, note, 0))
    parts.append(sysex(0, bytes([0x7E, 0x7F, 0x09, 0x01, 0xF7])))
    parts.append(channel(0, 0xE0, 0x00, 0x40))
    parts.append(end_of_track())
    return b"".join(parts)


def sample_file() -> bytes:
    """Two-track format 1 file at 480 ticks per beat."""

    return midi_file(conductor_track(), piano_track())


def split_every(data: bytes, size: int) -> Iterator[bytes]:
    for start in range(0, len(data), size):
        yield data[start : start + size]


def split_at(data: bytes, boundaries: Sequence[int]) -> list[bytes]:
    edges = [0, *sorted(boundaries), len(data)]
    return [data[start:end] for start, end in zip(edges, edges[1:])]
