"""Core logging pipeline: normalization, enrichment, rendering and delivery."""

from __future__ import annotations

from .colors import Colors
from .config import LogsConfig, PersistenceCredentials, resolve_logs_config
from .diagnostics import enrich, git_revision
from .errors import (
    LogError,
    capture_stack,
    error_record,
    exception_message,
    exception_stack,
    normalize,
)
from .exceptions import LeveledLogsError, StackUnavailableError
from .formats import comment_body, comment_metadata, to_diff
from .logs import Logs
from .models import (
    DisplayKind,
    LogLevel,
    LogMessage,
    LogReturn,
    LogRow,
    Metadata,
    numeric_level,
)
from .pretty_logs import ConsoleStreams, PrettyLogs

__all__ = [
    "Colors",
    "ConsoleStreams",
    "DisplayKind",
    "LeveledLogsError",
    "LogError",
    "LogLevel",
    "LogMessage",
    "LogReturn",
    "LogRow",
    "Logs",
    "LogsConfig",
    "Metadata",
    "PersistenceCredentials",
    "PrettyLogs",
    "StackUnavailableError",
    "capture_stack",
    "comment_body",
    "comment_metadata",
    "enrich",
    "error_record",
    "exception_message",
    "exception_stack",
    "git_revision",
    "normalize",
    "numeric_level",
    "resolve_logs_config",
    "to_diff",
]
