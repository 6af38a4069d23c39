"""Diff-syntax rendering for comment bodies.

Renderers that colorize diff blocks show ``-`` lines red, ``+`` lines green,
``!`` lines orange, ``#`` lines gray and ``@@ ... @@`` lines purple.
"""

from __future__ import annotations

from ..models import DisplayKind

DIFF_PREFIXES: dict[str, str] = {
    DisplayKind.FATAL.value: "-",
    DisplayKind.OK.value: "+",
    DisplayKind.ERROR.value: "!",
}
DEFAULT_PREFIX = "#"

DIFF_HEADER = "```diff"
DIFF_FOOTER = "```"


def to_diff(type: DisplayKind | str, message: str) -> str:
    """Wrap ``message`` in a fenced diff block with a per-type line prefix."""
    kind = type.value if isinstance(type, DisplayKind) else str(type)
    lines = message.strip().split("\n")

    selected = DIFF_PREFIXES.get(kind)
    if selected:
        body = "\n".join(f"{selected} {line}" for line in lines)
    elif kind == DisplayKind.DEBUG.value:
        body = "\n".join(f"@@ {line} @@" for line in lines)
    else:
        body = "\n".join(f"{DEFAULT_PREFIX} {line}" for line in lines)

    return "\n".join([DIFF_HEADER, body, DIFF_FOOTER])
