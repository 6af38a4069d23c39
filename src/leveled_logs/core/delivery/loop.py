"""Background event loop used for fire-and-forget work."""

from __future__ import annotations

import asyncio
import atexit
import concurrent.futures
import logging
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackgroundLoop:
    """An asyncio loop running in a daemon thread, started on first use.

    Synchronous callers hand work to it without waiting for completion.
    """

    def __init__(self, name: str = "leveled-logs-delivery") -> None:
        self.name = name
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._loop is not None

    def start(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is not None:
                return self._loop

            loop = asyncio.new_event_loop()
            ready = threading.Event()

            def run() -> None:
                asyncio.set_event_loop(loop)
                loop.call_soon(ready.set)
                try:
                    loop.run_forever()
                finally:
                    loop.run_until_complete(loop.shutdown_asyncgens())
                    loop.close()

            thread = threading.Thread(target=run, name=self.name, daemon=True)
            thread.start()
            ready.wait()

            self._loop = loop
            self._thread = thread
            atexit.register(self.stop)
            logger.debug("Started background loop %s", self.name)
            return loop

    def call(self, callback: Any, *args: Any) -> None:
        """Schedule a plain callback on the loop thread."""
        self.start().call_soon_threadsafe(callback, *args)

    def spawn(self, coro: Coroutine[Any, Any, T]) -> concurrent.futures.Future[T]:
        """Run a coroutine on the loop; the returned future is never awaited by us."""
        return asyncio.run_coroutine_threadsafe(coro, self.start())

    def stop(self, timeout: float | None = 5.0) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = None
            self._thread = None
        if loop is None or thread is None:
            return

        atexit.unregister(self.stop)
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout)
        if thread.is_alive():
            logger.warning("Background loop %s did not stop within %ss", self.name, timeout)
