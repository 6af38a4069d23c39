"""Exception normalization and stack text helpers.

Stack text uses one header line followed by one frame per line, most recent
call first::

    ValueError: boom
        at handler (/app/jobs.py:41)
        at run (/app/main.py:12)
"""

from __future__ import annotations

import sys
import traceback
from types import FrameType
from typing import Any


def format_frame(frame: FrameType, lineno: int | None = None) -> str:
    """Format a single frame as an ``at <qualname> (<file>:<line>)`` line."""
    code = frame.f_code
    name = getattr(code, "co_qualname", code.co_name)
    return f"    at {name} ({code.co_filename}:{lineno if lineno is not None else frame.f_lineno})"


def _walk(frame: FrameType | None) -> list[str]:
    return [format_frame(f, lineno) for f, lineno in traceback.walk_stack(frame)]


def capture_stack(frame: FrameType | None = None, *, header: str = "Error") -> str:
    """Return the current call stack as text, starting at ``frame``.

    Defaults to the frame that called this function.
    """
    if frame is None:
        frame = sys._getframe(1)
    return "\n".join([header, *_walk(frame)])


class LogError(Exception):
    """Exception that records the call stack at construction time."""

    def __init__(self, *args: object) -> None:
        super().__init__(*args)
        self.stack_frames = _walk(sys._getframe(1))


def exception_message(exc: BaseException) -> str:
    """The error text; a lone string argument is used as given."""
    if len(exc.args) == 1 and isinstance(exc.args[0], str):
        return exc.args[0]
    return str(exc)


def exception_stack(exc: BaseException) -> str | None:
    """Return stack text for an exception, or None when it has none."""
    frames: list[str] | None = getattr(exc, "stack_frames", None)
    if not frames:
        collected = []
        tb = exc.__traceback__
        while tb is not None:
            collected.append(format_frame(tb.tb_frame, tb.tb_lineno))
            tb = tb.tb_next
        frames = collected[::-1]
    if not frames:
        return None

    name = type(exc).__name__
    message = exception_message(exc)
    header = f"{name}: {message}" if message else name
    return "\n".join([header, *frames])


def error_record(exc: BaseException) -> dict[str, Any]:
    """Convert an exception into a plain ``{message, name, stack}`` record."""
    stack = exception_stack(exc)
    return {
        "message": exception_message(exc),
        "name": type(exc).__name__,
        "stack": stack.split("\n") if stack else None,
    }


def normalize(value: Any, _seen: set[int] | None = None) -> Any:
    """Replace exceptions anywhere inside ``value`` with error records.

    Dicts and lists are converted in place; pass a copy if the original
    must survive.
    """
    if isinstance(value, BaseException):
        return error_record(value)

    if isinstance(value, (dict, list)):
        seen = _seen if _seen is not None else set()
        if id(value) in seen:
            return value
        seen.add(id(value))
        if isinstance(value, dict):
            for key in list(value):
                value[key] = normalize(value[key], seen)
        else:
            for i, item in enumerate(value):
                value[i] = normalize(item, seen)

    return value
