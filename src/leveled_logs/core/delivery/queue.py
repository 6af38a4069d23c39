"""Bounded, retrying delivery of log rows to a persistence sink."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Any

from ..models import LogRow
from ..pretty_logs import PrettyLogs
from .loop import BackgroundLoop
from .sinks import LogSink

logger = logging.getLogger(__name__)

_STOP = object()


class DeliveryQueue:
    """Fire-and-forget FIFO in front of a sink.

    Rows are processed by ``concurrency`` workers. Each row gets one attempt
    plus ``retry_limit`` retries spaced ``retry_delay`` seconds apart, then
    it is dropped. When ``queue_size`` rows are already waiting, the oldest
    one is dropped to make room. Every drop is reported on the console
    error stream; nothing is raised to the submitter.
    """

    def __init__(
        self,
        sink: LogSink,
        *,
        concurrency: int = 6,
        retry_limit: int = 0,
        retry_delay: float = 1.0,
        queue_size: int = 1000,
        console: PrettyLogs | None = None,
        runner: BackgroundLoop | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if retry_limit < 0:
            raise ValueError("retry_limit must be >= 0")
        if queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        self.sink = sink
        self.concurrency = concurrency
        self.retry_limit = retry_limit
        self.retry_delay = retry_delay
        self.queue_size = queue_size
        self.console = console or PrettyLogs()
        self.runner = runner or BackgroundLoop()

        self._queue: asyncio.Queue[Any] | None = None
        self._workers: list[asyncio.Task[None]] = []
        self._pending = 0
        self._cond = threading.Condition()

    @property
    def pending(self) -> int:
        """Rows submitted but not yet delivered or dropped."""
        with self._cond:
            return self._pending

    def submit(self, row: LogRow) -> None:
        """Enqueue a row without blocking the caller."""
        with self._cond:
            self._pending += 1
        self.runner.call(self._enqueue, row)

    def flush(self, timeout: float | None = None) -> bool:
        """Block until every submitted row is settled; False on timeout."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while self._pending > 0:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._cond.wait(remaining)
        return True

    def close(self, timeout: float | None = 10.0) -> None:
        """Drain the queue and stop the workers."""
        self.flush(timeout)
        if self._queue is None or not self.runner.running:
            return
        future = self.runner.spawn(self._shutdown())
        try:
            future.result(timeout)
        except TimeoutError:
            logger.warning("Delivery workers did not stop within %ss", timeout)

    async def _shutdown(self) -> None:
        queue = self._queue
        if queue is None:
            return
        for _ in self._workers:
            await queue.put(_STOP)
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None

    def _settle(self) -> None:
        with self._cond:
            self._pending -= 1
            self._cond.notify_all()

    def _enqueue(self, row: LogRow) -> None:
        # Runs on the loop thread.
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.queue_size)
            self._workers = [
                asyncio.create_task(self._worker(self._queue)) for _ in range(self.concurrency)
            ]

        if self._queue.full():
            dropped = self._queue.get_nowait()
            logger.warning("Delivery queue full (%s rows); dropping oldest", self.queue_size)
            self._report("Log queue full, dropping oldest log:", dropped.model_dump(mode="json"))
            self._settle()
        self._queue.put_nowait(row)

    async def _worker(self, queue: asyncio.Queue[Any]) -> None:
        while True:
            row = await queue.get()
            if row is _STOP:
                break
            try:
                await self._deliver(row)
            finally:
                self._settle()

    async def _deliver(self, row: LogRow) -> bool:
        payload = row.model_dump(mode="json")
        attempts = self.retry_limit + 1
        for attempt in range(1, attempts + 1):
            try:
                await self.sink.insert(payload)
                return True
            except Exception as e:
                logger.warning("Log delivery failed (attempt %s/%s): %s", attempt, attempts, e)
                if attempt >= attempts:
                    self._report("Error sending log:", e)
                    break
                self._report("Error sending log, retrying:", e)
                await asyncio.sleep(self.retry_delay)

        self._report("Max retry limit reached for log:", payload)
        return False

    def _report(self, message: str, detail: Any) -> None:
        try:
            self.console.fatal(message, detail)
        except Exception:
            logger.exception("Failed to report delivery problem: %s", message)
