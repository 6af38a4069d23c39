"""Best-effort diagnostic enrichment of log metadata."""

from __future__ import annotations

import logging
import re
import subprocess
from functools import lru_cache
from types import FrameType
from typing import Any

from .errors import capture_stack, format_frame

logger = logging.getLogger(__name__)

_CALLER_RE = re.compile(r"at (\S+)")

# Captured from inside enrich(): [header, enrich, entry point, original caller].
_CALLER_LINE = 3


@lru_cache(maxsize=1)
def git_revision() -> str | None:
    """Short commit hash of the working directory, or None outside a checkout."""
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("git revision unavailable: %s", e)
        return None
    return proc.stdout.strip()[:7] or None


def _caller_from_line(line: str) -> str | None:
    m = _CALLER_RE.search(line)
    return m.group(1) if m else None


def enrich(
    metadata: Any = None,
    *,
    frame: FrameType | None = None,
    revision: bool = False,
) -> Any:
    """Coerce metadata to a dict and attach ``caller`` (and ``revision``).

    ``frame`` is the originating user frame. Without it the caller is read
    from a fixed depth of the current stack, which only holds when this is
    called directly from a leveled entry point.
    """
    if not metadata:
        metadata = {}
    elif isinstance(metadata, (str, int, float)):
        metadata = {"message": metadata}

    if not isinstance(metadata, dict):
        return metadata

    if frame is not None:
        caller = _caller_from_line(format_frame(frame))
    else:
        lines = capture_stack().split("\n")
        caller = _caller_from_line(lines[_CALLER_LINE]) if len(lines) > _CALLER_LINE else None
    if caller:
        metadata["caller"] = caller

    if revision:
        metadata["revision"] = git_revision()

    return metadata
