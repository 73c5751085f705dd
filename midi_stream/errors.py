"""Structural errors raised while decoding MIDI byte streams."""
from __future__ import annotations

from typing import ClassVar


class MidiDecodeError(ValueError):
    """Base error for malformed MIDI data.

    Every subclass names its ``kind`` and records the absolute ``byte_offset``
    in the input stream where the violation was observed.
    """

    kind: ClassVar[str] = "MidiDecodeError"

    def __init__(self, detail: str, *, byte_offset: int) -> None:
        super().__init__(f"Invalid MIDI file: {detail} (at byte {byte_offset})")
        self.detail = detail
        self.byte_offset = byte_offset

    @property
    def message(self) -> str:
        return str(self)

    def as_dict(self) -> dict[str, object]:
        return {"kind": self.kind, "message": self.message, "byte_offset": self.byte_offset}


class InvalidChunkTagError(MidiDecodeError):
    """Raised when a chunk tag does not match the expected constant."""

    kind = "InvalidChunkTag"

    def __init__(self, expected: bytes, found: bytes, *, byte_offset: int) -> None:
        super().__init__(
            f"expected chunk tag {expected!r}, found {found!r}", byte_offset=byte_offset
        )
        self.expected = expected
        self.found = found


class InvalidHeaderLengthError(MidiDecodeError):
    """Raised when the header chunk declares a length other than six."""

    kind = "InvalidHeaderLength"

    def __init__(self, length: int, *, byte_offset: int) -> None:
        super().__init__(f"header chunk length is {length}, expected 6", byte_offset=byte_offset)
        self.length = length


class InvalidFormatTypeError(MidiDecodeError):
    """Raised when the header format type is not 0, 1 or 2."""

    kind = "InvalidFormatType"

    def __init__(self, format_type: int, *, byte_offset: int) -> None:
        super().__init__(f"unsupported format type {format_type}", byte_offset=byte_offset)
        self.format_type = format_type


class MalformedVLQError(MidiDecodeError):
    """Raised when a variable-length quantity exceeds the maximum width."""

    kind = "MalformedVLQ"

    def __init__(self, max_bytes: int, *, byte_offset: int) -> None:
        super().__init__(
            f"variable-length quantity longer than {max_bytes} bytes", byte_offset=byte_offset
        )
        self.max_bytes = max_bytes


class MissingRunningStatusError(MidiDecodeError):
    """Raised when a data byte appears before any status byte in a track."""

    kind = "MissingRunningStatus"

    def __init__(self, data_byte: int, *, byte_offset: int) -> None:
        super().__init__(
            f"data byte 0x{data_byte:02X} without running status", byte_offset=byte_offset
        )
        self.data_byte = data_byte


class UnknownEventTypeError(MidiDecodeError):
    """Raised when a status byte matches no event family."""

    kind = "UnknownEventType"

    def __init__(self, status: int, *, byte_offset: int) -> None:
        super().__init__(f"unknown event status 0x{status:02X}", byte_offset=byte_offset)
        self.status = status


class InvalidEventLengthError(MidiDecodeError):
    """Raised when a fixed-shape meta event declares the wrong payload length."""

    kind = "InvalidEventLength"

    def __init__(self, subtype: str, length: int, expected: tuple[int, ...], *, byte_offset: int) -> None:
        allowed = " or ".join(str(value) for value in expected)
        super().__init__(
            f"{subtype} payload is {length} bytes, expected {allowed}", byte_offset=byte_offset
        )
        self.subtype = subtype
        self.length = length
        self.expected = expected


class MissingEndOfTrackError(MidiDecodeError):
    """Raised when a track chunk ends without an end-of-track event."""

    kind = "MissingEndOfTrack"


class TruncatedDataError(MidiDecodeError):
    """Raised when the input ends while a read is still pending."""

    kind = "TruncatedData"

    def __init__(self, needed: int, available: int, *, byte_offset: int) -> None:
        super().__init__(
            f"unexpected end of data, needed {needed} bytes but only {available} arrived",
            byte_offset=byte_offset,
        )
        self.needed = needed
        self.available = available


__all__ = [
    "InvalidChunkTagError",
    "InvalidEventLengthError",
    "InvalidFormatTypeError",
    "InvalidHeaderLengthError",
    "MalformedVLQError",
    "MidiDecodeError",
    "MissingEndOfTrackError",
    "MissingRunningStatusError",
    "TruncatedDataError",
    "UnknownEventTypeError",
]
