from __future__ import annotations

import json
from typing import Any

from leveled_logs.core.serialization import CIRCULAR, drop_cycles, to_json_text, to_jsonable


def test_drop_cycles_marks_back_references() -> None:
    payload: dict[str, Any] = {"items": [1, 2]}
    payload["items"].append(payload)

    assert drop_cycles(payload) == {"items": [1, 2, CIRCULAR]}
    assert payload["items"][2] is payload


def test_drop_cycles_keeps_shared_values() -> None:
    shared = {"k": 1}

    assert drop_cycles({"a": shared, "b": shared}) == {"a": {"k": 1}, "b": {"k": 1}}


def test_to_json_text_survives_cycles() -> None:
    payload: dict[str, Any] = {"name": "loop"}
    payload["self"] = payload

    assert json.loads(to_json_text(payload)) == {"name": "loop", "self": CIRCULAR}
    assert to_jsonable(payload) == {"name": "loop", "self": CIRCULAR}


def test_exceptions_become_records() -> None:
    data = to_jsonable({"error": KeyError("missing")})

    assert data["error"]["name"] == "KeyError"
    assert data["error"]["message"] == "missing"
