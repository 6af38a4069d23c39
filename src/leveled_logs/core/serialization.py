"""JSON helpers shared by the console renderer, comments and sinks."""

from __future__ import annotations

import logging
from typing import Any

from pydantic_core import PydanticSerializationError, to_json, to_jsonable_python

from .errors import error_record

logger = logging.getLogger(__name__)

CIRCULAR = "[Circular]"


def _fallback(value: Any) -> Any:
    if isinstance(value, BaseException):
        return error_record(value)
    return str(value)


def drop_cycles(value: Any, _parents: tuple[int, ...] = ()) -> Any:
    """Copy dicts and lists, replacing back-references with ``[Circular]``."""
    if not isinstance(value, (dict, list, tuple)):
        return value
    if id(value) in _parents:
        return CIRCULAR
    parents = (*_parents, id(value))
    if isinstance(value, dict):
        return {k: drop_cycles(v, parents) for k, v in value.items()}
    return [drop_cycles(v, parents) for v in value]


def to_jsonable(value: Any) -> Any:
    """Return a JSON-compatible copy of ``value`` (exceptions become records)."""
    try:
        return to_jsonable_python(value, fallback=_fallback)
    except PydanticSerializationError as e:
        logger.debug("Retrying serialization without cycles: %s", e)
        return to_jsonable_python(drop_cycles(value), fallback=_fallback)


def to_json_text(value: Any, *, indent: int | None = 2) -> str:
    """Serialize ``value`` at full depth, pretty-printed by default."""
    try:
        data = to_json(value, indent=indent, fallback=_fallback)
    except PydanticSerializationError as e:
        logger.debug("Retrying serialization without cycles: %s", e)
        data = to_json(drop_cycles(value), indent=indent, fallback=_fallback)
    return data.decode("utf-8")
