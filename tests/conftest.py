from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from leveled_logs.core import diagnostics


class RecordingSink:
    """Sink that stores every row it receives."""

    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []

    async def insert(self, row: dict[str, Any]) -> None:
        self.rows.append(row)


class FlakySink(RecordingSink):
    """Sink that rejects the first ``failures`` inserts."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.calls = 0

    async def insert(self, row: dict[str, Any]) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"sink unavailable (call {self.calls})")
        await super().insert(row)


class BlockingSink(RecordingSink):
    """Sink that holds every insert until ``release`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    async def insert(self, row: dict[str, Any]) -> None:
        self.started.set()
        await asyncio.to_thread(self.release.wait)
        await super().insert(row)


class RecordingStreams:
    """Console streams replacement that keeps (stream, text) pairs."""

    def __init__(self) -> None:
        self.writes: list[tuple[str, str]] = []

    def write(self, stream: str, text: str) -> None:
        self.writes.append((stream, text))


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def flaky_sink() -> Callable[[int], FlakySink]:
    def _make(failures: int) -> FlakySink:
        return FlakySink(failures)

    return _make


@pytest.fixture
def blocking_sink() -> Iterator[BlockingSink]:
    sink = BlockingSink()
    yield sink
    sink.release.set()


@pytest.fixture
def recording_streams() -> RecordingStreams:
    return RecordingStreams()


@pytest.fixture
def fixed_revision(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(diagnostics, "git_revision", lambda: "abc1234")
    return "abc1234"
