"""Colorized, symbol-prefixed console rendering."""

from __future__ import annotations

import os
import re
import sys
import sysconfig
import unicodedata
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .colors import Colors
from .errors import capture_stack, exception_stack
from .exceptions import StackUnavailableError
from .models import DisplayKind
from .serialization import to_json_text

SYMBOLS: dict[DisplayKind, str] = {
    DisplayKind.FATAL: "×",
    DisplayKind.OK: "✓",
    DisplayKind.ERROR: "⚠",
    DisplayKind.INFO: "›",
    DisplayKind.DEBUG: "››",
    DisplayKind.VERBOSE: "💬",
}

# (console stream, color) per kind.
STYLES: dict[DisplayKind, tuple[str, Colors]] = {
    DisplayKind.FATAL: ("error", Colors.FG_RED),
    DisplayKind.OK: ("primary", Colors.FG_GREEN),
    DisplayKind.ERROR: ("warn", Colors.FG_YELLOW),
    DisplayKind.INFO: ("info", Colors.DIM),
    DisplayKind.DEBUG: ("debug", Colors.FG_MAGENTA),
    DisplayKind.VERBOSE: ("debug", Colors.DIM),
}

TRIVIAL_LENGTH = 12
STACK_ARROW = "  ↳  "

_RESERVED_KEYS = ("message", "name", "stack")
_AT_RE = re.compile(r"^\s*at\s+")
_FRAME_FILE_RE = re.compile(r"\((.*):\d+\)$")

# Interpreter, installed packages, console scripts and this library.
_FOREIGN_DIRS: tuple[str, ...] = tuple(
    {
        os.path.join(os.path.realpath(path), "")
        for key, path in sysconfig.get_paths().items()
        if key in ("stdlib", "platstdlib", "purelib", "platlib", "scripts")
    }
    | {os.path.join(os.path.dirname(os.path.dirname(os.path.realpath(__file__))), "")}
)


def is_user_frame(line: str) -> bool:
    """True for an ``at ...`` stack line pointing into application code."""
    m = _FRAME_FILE_RE.search(line)
    if not m:
        return False
    filename = m.group(1)
    if filename.startswith("<"):
        return False
    return not os.path.realpath(filename).startswith(_FOREIGN_DIRS)


def _display_width(text: str) -> int:
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in text)


@dataclass(frozen=True, slots=True)
class ConsoleStreams:
    """Route the five logical console streams to stdout/stderr."""

    stderr_streams: frozenset[str] = frozenset({"warn", "error"})

    def write(self, stream: str, text: str) -> None:
        target = sys.stderr if stream in self.stderr_streams else sys.stdout
        print(text, file=target)


class PrettyLogs:
    """Console renderer for the six display kinds.

    Every call renders the message first, then either a string payload or
    the non-reserved metadata fields followed by a dimmed stack trace.
    """

    def __init__(self, *, suppress_trivial: bool = True, streams: ConsoleStreams | None = None) -> None:
        self.suppress_trivial = suppress_trivial
        self.streams = streams or ConsoleStreams()

    def fatal(self, message: str, metadata: Any = None) -> None:
        self.render(DisplayKind.FATAL, message, metadata)

    def error(self, message: str, metadata: Any = None) -> None:
        self.render(DisplayKind.ERROR, message, metadata)

    def ok(self, message: str, metadata: Any = None) -> None:
        self.render(DisplayKind.OK, message, metadata)

    def info(self, message: str, metadata: Any = None) -> None:
        self.render(DisplayKind.INFO, message, metadata)

    def debug(self, message: str, metadata: Any = None) -> None:
        self.render(DisplayKind.DEBUG, message, metadata)

    def verbose(self, message: str, metadata: Any = None) -> None:
        self.render(DisplayKind.VERBOSE, message, metadata)

    def render(self, kind: DisplayKind | str, message: str, metadata: Any = None) -> None:
        """Render a message and optional metadata for ``kind``."""
        kind = DisplayKind(kind)
        self._log(kind, message)

        if isinstance(metadata, str):
            self._log(kind, metadata)
            return
        if metadata is None:
            return

        stack = self._resolve_stack(metadata)

        remaining = self._strip_reserved(metadata)
        if remaining:
            self._log(kind, remaining)

        if isinstance(stack, str):
            text = stack
        elif isinstance(stack, (list, tuple)):
            text = "\n".join(str(line) for line in stack)
        else:
            raise StackUnavailableError(
                "stack must be resolvable when non-string metadata is supplied"
            )
        pretty = self._format_stack_trace(text, lines_to_remove=1)
        self._log(kind, self._colorize_text(pretty, Colors.DIM))

    def _resolve_stack(self, metadata: Any) -> Any:
        stack: Any = None
        if isinstance(metadata, Mapping):
            error = metadata.get("error")
            if isinstance(error, BaseException):
                stack = exception_stack(error)
            elif isinstance(error, Mapping):
                stack = error.get("stack")
            if not stack:
                stack = metadata.get("stack")
        elif isinstance(metadata, BaseException):
            stack = exception_stack(metadata)

        if stack is None or (isinstance(stack, (str, list, tuple)) and not stack):
            header, *frames = capture_stack().split("\n")
            stack = "\n".join([header, *(line for line in frames if is_user_frame(line))])
        return stack

    @staticmethod
    def _strip_reserved(metadata: Any) -> Any:
        if isinstance(metadata, Mapping):
            return {
                k: v for k, v in metadata.items() if k not in _RESERVED_KEYS and not callable(v)
            }
        if isinstance(metadata, BaseException):
            return None
        return metadata

    @staticmethod
    def _colorize_text(text: str, color: Colors | str | None) -> str:
        if not color:
            raise ValueError(f"Invalid color: {color!r}")
        code = color.value if isinstance(color, Colors) else color
        return f"{code}{text}{Colors.RESET.value}"

    @staticmethod
    def _format_stack_trace(stack: str, lines_to_remove: int = 0, prefix: str = "") -> str:
        lines = stack.split("\n")[lines_to_remove:]
        return "\n".join(f"{prefix}{_AT_RE.sub(STACK_ARROW, line, count=1)}" for line in lines)

    def _log(self, kind: DisplayKind, message: Any) -> None:
        symbol = SYMBOLS[kind]
        text = message if isinstance(message, str) else to_json_text(message)

        pad = " " * _display_width(symbol)
        log_string = "\n".join(
            f"\t{symbol if i == 0 else pad} {line}" for i, line in enumerate(text.split("\n"))
        )

        # Symbol-only output carries no information.
        if self.suppress_trivial and len(log_string) <= TRIVIAL_LENGTH:
            return

        stream, color = STYLES[kind]
        self.streams.write(stream, self._colorize_text(log_string, color))
