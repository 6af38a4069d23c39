from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import httpx
import pytest

from leveled_logs.core.config import PersistenceCredentials
from leveled_logs.core.delivery import (
    BackgroundLoop,
    DeliveryQueue,
    IssueTarget,
    JsonlFileSink,
    RestInsertSink,
    deliver_comment,
)
from leveled_logs.core.models import LogLevel, LogRow
from leveled_logs.core.pretty_logs import PrettyLogs
from leveled_logs.utils import clean_log_string


def _row(log: str) -> LogRow:
    return LogRow(log=log, level=LogLevel.INFO)


@pytest.fixture
def runner() -> Iterator[BackgroundLoop]:
    loop = BackgroundLoop(name="test-delivery")
    yield loop
    loop.stop()


@pytest.fixture
def console(recording_streams) -> PrettyLogs:
    return PrettyLogs(streams=recording_streams)


def _reported(recording_streams) -> str:
    return clean_log_string("".join(text for _, text in recording_streams.writes))


def test_rows_are_delivered_in_order(runner, console, recording_sink) -> None:
    queue = DeliveryQueue(recording_sink, concurrency=1, console=console, runner=runner)

    for i in range(5):
        queue.submit(_row(f"row {i}"))

    assert queue.flush(timeout=5)
    assert queue.pending == 0
    assert [row["log"] for row in recording_sink.rows] == [f"row {i}" for i in range(5)]
    assert recording_sink.rows[0] == {"log": "row 0", "level": "info", "metadata": {}}


def test_retries_until_success(runner, console, recording_streams, flaky_sink) -> None:
    sink = flaky_sink(2)
    queue = DeliveryQueue(sink, retry_limit=2, retry_delay=0, console=console, runner=runner)

    queue.submit(_row("eventually delivered"))

    assert queue.flush(timeout=5)
    assert sink.calls == 3
    assert [row["log"] for row in sink.rows] == ["eventually delivered"]
    reported = _reported(recording_streams)
    assert reported.count(clean_log_string("Error sending log, retrying:")) == 2
    assert clean_log_string("Max retry limit reached") not in reported


def test_exhausted_retries_drop_and_report(runner, console, recording_streams, flaky_sink) -> None:
    sink = flaky_sink(10)
    queue = DeliveryQueue(sink, retry_limit=1, retry_delay=0, console=console, runner=runner)

    queue.submit(_row("never delivered"))

    assert queue.flush(timeout=5)
    assert sink.calls == 2
    assert sink.rows == []
    reported = _reported(recording_streams)
    assert clean_log_string("Error sending log, retrying:") in reported
    assert clean_log_string("Error sending log:") in reported
    assert clean_log_string("Max retry limit reached for log:") in reported
    assert "neverdelivered" in reported
    assert {stream for stream, _ in recording_streams.writes} == {"error"}


def test_full_queue_drops_oldest(runner, console, recording_streams, blocking_sink) -> None:
    queue = DeliveryQueue(blocking_sink, concurrency=1, queue_size=1, console=console, runner=runner)

    queue.submit(_row("first"))
    assert blocking_sink.started.wait(5)
    queue.submit(_row("second"))
    queue.submit(_row("third"))

    assert not queue.flush(timeout=0.2)
    blocking_sink.release.set()

    assert queue.flush(timeout=5)
    assert [row["log"] for row in blocking_sink.rows] == ["first", "third"]
    reported = _reported(recording_streams)
    assert clean_log_string("Log queue full, dropping oldest log:") in reported
    assert '"second"' in reported


def test_flush_times_out_while_sink_is_blocked(runner, console, blocking_sink) -> None:
    queue = DeliveryQueue(blocking_sink, console=console, runner=runner)

    queue.submit(_row("slow row"))

    assert blocking_sink.started.wait(5)
    assert queue.flush(timeout=0.05) is False
    assert queue.pending == 1

    blocking_sink.release.set()
    assert queue.flush(timeout=5)


def test_close_stops_workers(runner, console, recording_sink) -> None:
    queue = DeliveryQueue(recording_sink, concurrency=3, console=console, runner=runner)
    queue.submit(_row("before close"))

    queue.close(timeout=5)

    assert [row["log"] for row in recording_sink.rows] == ["before close"]
    assert queue._workers == []


@pytest.mark.parametrize(
    "kwargs",
    [{"concurrency": 0}, {"retry_limit": -1}, {"queue_size": 0}],
)
def test_invalid_policy_is_rejected(recording_sink, kwargs) -> None:
    with pytest.raises(ValueError):
        DeliveryQueue(recording_sink, **kwargs)


def test_background_loop_lifecycle() -> None:
    loop = BackgroundLoop(name="test-lifecycle")
    assert not loop.running

    async def answer() -> int:
        return 42

    assert loop.spawn(answer()).result(timeout=5) == 42
    assert loop.running

    loop.stop()
    assert not loop.running
    loop.stop()


@pytest.mark.asyncio
async def test_jsonl_file_sink_appends_lines(tmp_path) -> None:
    path = tmp_path / "logs.jsonl"
    sink = JsonlFileSink(path)

    await sink.insert({"log": "one", "level": "info", "metadata": {}})
    await sink.insert({"log": "two", "level": "error", "metadata": {"k": 1}})

    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line) for line in lines] == [
        {"log": "one", "level": "info", "metadata": {}},
        {"log": "two", "level": "error", "metadata": {"k": 1}},
    ]


@pytest.mark.asyncio
async def test_rest_insert_sink_posts_row() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201)

    sink = RestInsertSink(
        PersistenceCredentials(endpoint="https://db.example.test/", key="secret"),
        transport=httpx.MockTransport(handler),
    )

    await sink.insert({"log": "stored", "level": "info", "metadata": {}})

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/rest/v1/logs"
    assert request.headers["apikey"] == "secret"
    assert request.headers["Authorization"] == "Bearer secret"
    assert json.loads(request.content) == {"log": "stored", "level": "info", "metadata": {}}


@pytest.mark.asyncio
async def test_rest_insert_sink_raises_on_error_status() -> None:
    sink = RestInsertSink(
        PersistenceCredentials(endpoint="https://db.example.test", key="secret", table="events"),
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )

    assert sink.url == "https://db.example.test/rest/v1/events"
    with pytest.raises(httpx.HTTPStatusError):
        await sink.insert({"log": "rejected", "level": "info", "metadata": {}})


class _FailingPoster:
    async def create_comment(self, *, owner: str, repo: str, issue_number: int, body: str) -> None:
        raise RuntimeError("comment API unavailable")


@pytest.mark.asyncio
async def test_deliver_comment_swallows_failures(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="leveled_logs.core.delivery.comments")

    await deliver_comment(_FailingPoster(), IssueTarget("acme", "widgets", 7), "body")

    assert "Failed to post log comment to acme/widgets#7" in caplog.text


@pytest.mark.asyncio
async def test_shutdown_before_first_row_is_a_noop(recording_sink) -> None:
    queue = DeliveryQueue(recording_sink)

    await queue._shutdown()
    queue.close(timeout=1)

    assert queue._workers == []
    assert queue.pending == 0
