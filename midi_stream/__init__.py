"""Incremental decoder for Standard MIDI Files."""

import logging

from .config import DecoderConfig, get_decoder_config, load_decoder_config
from .decoder import DecoderState, MidiFileDecoder, decode_bytes, decode_chunks
from .errors import (
    InvalidChunkTagError,
    InvalidEventLengthError,
    InvalidFormatTypeError,
    InvalidHeaderLengthError,
    MalformedVLQError,
    MidiDecodeError,
    MissingEndOfTrackError,
    MissingRunningStatusError,
    TruncatedDataError,
    UnknownEventTypeError,
)
from .models import ChannelEvent, Event, Header, MetaEvent, MidiFile, SysexEvent, Track
from .result import DriveResult, DriveStatus
from .streams import ByteCursor

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ByteCursor",
    "ChannelEvent",
    "DecoderConfig",
    "DecoderState",
    "DriveResult",
    "DriveStatus",
    "Event",
    "Header",
    "InvalidChunkTagError",
    "InvalidEventLengthError",
    "InvalidFormatTypeError",
    "InvalidHeaderLengthError",
    "MalformedVLQError",
    "MetaEvent",
    "MidiDecodeError",
    "MidiFile",
    "MidiFileDecoder",
    "MissingEndOfTrackError",
    "MissingRunningStatusError",
    "SysexEvent",
    "Track",
    "TruncatedDataError",
    "UnknownEventTypeError",
    "decode_bytes",
    "decode_chunks",
    "get_decoder_config",
    "load_decoder_config",
]
