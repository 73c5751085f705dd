"""Decoder configuration loaded from JSON resources."""

from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

_CONFIG_RESOURCE = "decoder.json"
_DECODER_CONFIG_CACHE: DecoderConfig | None = None

MISSING_END_OF_TRACK_POLICIES = ("error", "synthesize")
RUNNING_STATUS_POLICIES = ("preserve", "reset")

_DEFAULT_MAX_VLQ_BYTES = 4
_DEFAULT_TEXT_ENCODING = "latin-1"


@dataclass(frozen=True)
class DecoderConfig:
    """Tunable decoding behaviour.

    ``missing_end_of_track`` chooses between failing a track chunk that runs
    out without an end-of-track event (``"error"``) and appending one
    (``"synthesize"``). ``running_status_after_sysex`` decides whether meta and
    system-exclusive events keep (``"preserve"``) or clear (``"reset"``) the
    running status of the track.
    """

    max_vlq_bytes: int = _DEFAULT_MAX_VLQ_BYTES
    missing_end_of_track: str = "error"
    running_status_after_sysex: str = "preserve"
    text_encoding: str = _DEFAULT_TEXT_ENCODING

    @property
    def synthesize_end_of_track(self) -> bool:
        return self.missing_end_of_track == "synthesize"

    @property
    def sysex_resets_running_status(self) -> bool:
        return self.running_status_after_sysex == "reset"


def get_decoder_config() -> DecoderConfig:
    """Return the cached decoder configuration."""

    global _DECODER_CONFIG_CACHE
    if _DECODER_CONFIG_CACHE is None:
        _DECODER_CONFIG_CACHE = load_decoder_config()
    return _DECODER_CONFIG_CACHE


def reset_decoder_config_cache() -> None:
    """Reset the cached configuration for subsequent reloads."""

    global _DECODER_CONFIG_CACHE
    _DECODER_CONFIG_CACHE = None


def load_decoder_config(path: str | Path | None = None) -> DecoderConfig:
    """Load configuration from ``path`` or the bundled JSON resource."""

    data = _read_config_data(path)
    section = data.get("decoder") if isinstance(data, Mapping) else None
    if not isinstance(section, Mapping):
        return DecoderConfig()
    return DecoderConfig(
        max_vlq_bytes=_coerce_positive_int(section.get("max_vlq_bytes"), default=_DEFAULT_MAX_VLQ_BYTES),
        missing_end_of_track=_coerce_choice(
            section.get("missing_end_of_track"), MISSING_END_OF_TRACK_POLICIES
        ),
        running_status_after_sysex=_coerce_choice(
            section.get("running_status_after_sysex"), RUNNING_STATUS_POLICIES
        ),
        text_encoding=_coerce_encoding(section.get("text_encoding")),
    )


def _read_config_data(path: str | Path | None) -> Mapping[str, Any]:
    if path is not None:
        return _load_json_from_path(Path(path).expanduser())
    return _load_default_config_data()


def _load_json_from_path(path: Path) -> Mapping[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    return _parse_json(raw)


def _load_default_config_data() -> Mapping[str, Any]:
    try:
        resource = resources.files(__package__).joinpath(_CONFIG_RESOURCE)
        raw = resource.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return {}
    return _parse_json(raw)


def _parse_json(raw: str) -> Mapping[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if isinstance(parsed, Mapping):
        return parsed
    return {}


def _coerce_positive_int(value: Any, *, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        candidate = int(value)
    elif isinstance(value, str):
        try:
            candidate = int(float(value))
        except ValueError:
            return default
    else:
        return default
    if candidate <= 0:
        return default
    return candidate


def _coerce_choice(value: Any, choices: tuple[str, ...]) -> str:
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in choices:
            return candidate
    return choices[0]


def _coerce_encoding(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        return _DEFAULT_TEXT_ENCODING
    candidate = value.strip()
    try:
        codecs.lookup(candidate)
    except LookupError:
        return _DEFAULT_TEXT_ENCODING
    return candidate


__all__ = [
    "DecoderConfig",
    "MISSING_END_OF_TRACK_POLICIES",
    "RUNNING_STATUS_POLICIES",
    "get_decoder_config",
    "load_decoder_config",
    "reset_decoder_config_cache",
]
