"""Exceptions raised by the logging pipeline itself."""

from __future__ import annotations


class LeveledLogsError(Exception):
    """Base class for configuration faults in the logging pipeline."""


class StackUnavailableError(LeveledLogsError):
    """Structured metadata was rendered but no stack could be resolved."""
