"""Text encodings of a log event besides the console rendering."""

from __future__ import annotations

from .comment import comment_body, comment_metadata
from .diff import DIFF_FOOTER, DIFF_HEADER, DIFF_PREFIXES, to_diff

__all__ = [
    "DIFF_FOOTER",
    "DIFF_HEADER",
    "DIFF_PREFIXES",
    "comment_body",
    "comment_metadata",
    "to_diff",
]
