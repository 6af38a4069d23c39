"""JSON metadata blocks appended to posted comments."""

from __future__ import annotations

from typing import Any

from ..models import LogLevel
from ..serialization import to_json_text


def comment_metadata(metadata: Any, level: LogLevel | str) -> str:
    """Serialize metadata for a comment body.

    Fatal metadata is shown as a visible JSON block; everything else is
    hidden in an HTML comment.
    """
    pretty = to_json_text(metadata)
    if LogLevel(level) is LogLevel.FATAL:
        return "\n".join(["```json", pretty, "```"])
    return "\n".join(["<!--", pretty, "-->"])


def comment_body(diff: str, metadata: Any, level: LogLevel | str) -> str:
    """Compose the full comment body from the diff text and its metadata."""
    if not metadata:
        return diff
    return "\n".join([diff, comment_metadata(metadata, level)])
