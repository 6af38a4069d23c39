"""Leveled logging with console, diff-comment and JSON renderings.

Usage::

    from leveled_logs import Logs, LogLevel

    logs = Logs(LogLevel.DEBUG)
    result = logs.error("upstream timed out", {"route": "/api/items"})
    result.log_message.diff  # fenced diff block for a comment body
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "Colors",
    "DisplayKind",
    "LogLevel",
    "LogReturn",
    "Logs",
    "LogsConfig",
    "Metadata",
    "PrettyLogs",
    "clean_captured_logs",
    "clean_log_string",
]

try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("leveled-logs")
except Exception:  # pragma: no cover
    __version__ = "0.0.0"

from leveled_logs.core import (  # noqa: E402
    Colors,
    DisplayKind,
    LogLevel,
    LogReturn,
    Logs,
    LogsConfig,
    Metadata,
    PrettyLogs,
)
from leveled_logs.utils import clean_captured_logs, clean_log_string  # noqa: E402
