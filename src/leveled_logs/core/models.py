"""Core data models for leveled logging."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .serialization import to_jsonable

Metadata = dict[str, Any]


class LogLevel(str, Enum):
    """Filterable severities, most severe first."""

    FATAL = "fatal"
    ERROR = "error"
    INFO = "info"
    VERBOSE = "verbose"
    DEBUG = "debug"


class DisplayKind(str, Enum):
    """Entry-point names; OK renders differently but filters as INFO."""

    OK = "ok"
    INFO = "info"
    ERROR = "error"
    DEBUG = "debug"
    FATAL = "fatal"
    VERBOSE = "verbose"

    @property
    def level(self) -> LogLevel:
        if self is DisplayKind.OK:
            return LogLevel.INFO
        return LogLevel(self.value)


_NUMERIC_LEVELS: dict[LogLevel, int] = {
    LogLevel.FATAL: 0,
    LogLevel.ERROR: 1,
    LogLevel.INFO: 2,
    LogLevel.VERBOSE: 4,
    LogLevel.DEBUG: 5,
}


def numeric_level(level: LogLevel | str | None) -> int:
    """Return the filter rank of a level; unknown values rank -1."""
    try:
        return _NUMERIC_LEVELS[LogLevel(level)]
    except (ValueError, KeyError):
        return -1


@dataclass(frozen=True, slots=True)
class LogMessage:
    """The three-way rendering of a single call, minus the console side effect."""

    raw: str
    diff: str
    level: LogLevel
    type: DisplayKind


@dataclass(frozen=True, slots=True)
class LogReturn:
    """Value handed back to the caller of a leveled entry point."""

    log_message: LogMessage
    metadata: Metadata | None = None


class LogRow(BaseModel):
    """Row shape accepted by persistence sinks."""

    log: str = Field(description="Raw log text.")
    level: LogLevel = Field(description="Filterable severity of the entry.")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_event(cls, log: str, level: LogLevel, metadata: Metadata | None) -> LogRow:
        """Build a JSON-safe row without touching the caller's metadata."""
        data = to_jsonable(metadata) if metadata else {}
        if not isinstance(data, dict):
            data = {"message": data}
        return cls(log=log, level=level, metadata=data)
