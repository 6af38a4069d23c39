"""Helpers for asserting on captured console output."""

from __future__ import annotations

import re
from collections.abc import Iterable

_ANSI_AND_SPACE_RE = re.compile(r"\x1b\[\d+m|\s")


def clean_log_string(log_string: str) -> str:
    """Strip ANSI color codes and all whitespace from rendered output."""
    return _ANSI_AND_SPACE_RE.sub("", log_string).strip()


def clean_captured_logs(captured: str | Iterable[str]) -> list[str]:
    """Split captured stream text into rendered entries and clean each one.

    Entries are separated by the leading tab (optionally after a color
    code) that starts every rendered message.
    """
    if isinstance(captured, str):
        chunks = re.split(r"\n(?=(?:\x1b\[\d+m)*\t\S)", captured.rstrip("\n"))
    else:
        chunks = list(captured)
    return [clean_log_string(chunk) for chunk in chunks if chunk.strip()]
