"""Outcome of driving the file decoder after a feed or close."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import MidiDecodeError
from .models import MidiFile


class DriveStatus(str, Enum):
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class DriveResult:
    """Discriminated union: still waiting for bytes, a decoded file, or an error."""

    status: DriveStatus
    value: Optional[MidiFile] = None
    error: Optional[MidiDecodeError] = None

    @classmethod
    def suspended(cls) -> "DriveResult":
        return cls(status=DriveStatus.SUSPENDED)

    @classmethod
    def completed(cls, value: MidiFile) -> "DriveResult":
        return cls(status=DriveStatus.COMPLETED, value=value)

    @classmethod
    def failed(cls, error: MidiDecodeError) -> "DriveResult":
        return cls(status=DriveStatus.FAILED, error=error)

    def is_suspended(self) -> bool:
        return self.status is DriveStatus.SUSPENDED

    def is_completed(self) -> bool:
        return self.status is DriveStatus.COMPLETED

    def is_failed(self) -> bool:
        return self.status is DriveStatus.FAILED

    def unwrap(self) -> MidiFile:
        if self.error is not None:
            raise self.error
        if self.value is None:
            raise RuntimeError("Tried to unwrap a suspended decode result")
        return self.value


__all__ = ["DriveResult", "DriveStatus"]
