"""Leveled logging facade.

Each entry point produces three renderings of one event: colorized console
output (as a side effect), diff-annotated comment text, and a JSON-safe row
for the optional persistence sink.
"""

from __future__ import annotations

import concurrent.futures
import logging
import sys
from typing import Any, ClassVar

from .config import LogsConfig, resolve_logs_config
from .delivery import BackgroundLoop, CommentPoster, DeliveryQueue, IssueTarget, LogSink, RestInsertSink
from .delivery.comments import deliver_comment
from .diagnostics import enrich
from .errors import LogError, normalize
from .formats import comment_body, to_diff
from .models import DisplayKind, LogLevel, LogMessage, LogReturn, LogRow, Metadata, numeric_level
from .pretty_logs import PrettyLogs

logger = logging.getLogger(__name__)


class Logs:
    """Entry points ``ok/info/error/debug/fatal/verbose``.

    Levels ranked above ``max_visible_level`` skip console output. By default
    they still return a ``LogReturn``; ``LogsConfig.silence_filtered`` makes
    them return None instead.
    """

    # Shared by every facade; rendering keeps no per-instance state.
    console: ClassVar[PrettyLogs]

    def __init__(
        self,
        config: LogsConfig | LogLevel | str = LogLevel.INFO,
        *,
        sink: LogSink | None = None,
        commenter: CommentPoster | None = None,
        comment_target: IssueTarget | None = None,
        runner: BackgroundLoop | None = None,
    ) -> None:
        if not isinstance(config, LogsConfig):
            config = LogsConfig(max_visible_level=config)
        self.config = config
        self._max_level = numeric_level(config.max_visible_level)

        Logs.console = PrettyLogs(suppress_trivial=config.suppress_trivial)

        if sink is None and config.persistence_credentials is not None:
            sink = RestInsertSink(config.persistence_credentials)
        self.sink = sink
        self.commenter = commenter
        self.comment_target = comment_target

        self._runner = runner or BackgroundLoop()
        self._delivery: DeliveryQueue | None = None
        if sink is not None:
            self._delivery = DeliveryQueue(
                sink,
                concurrency=config.concurrency,
                retry_limit=config.retry_limit,
                retry_delay=config.retry_delay,
                queue_size=config.queue_size,
                console=Logs.console,
                runner=self._runner,
            )
        self._comment_futures: set[concurrent.futures.Future[None]] = set()

    @classmethod
    def from_env(cls, config: LogsConfig | None = None, **kwargs: Any) -> Logs:
        """Build a facade with ``LEVELED_LOGS_*`` overrides applied."""
        return cls(resolve_logs_config(config), **kwargs)

    def ok(self, log: str, metadata: Any = None, *, post_comment: bool = False) -> LogReturn | None:
        metadata = enrich(metadata, frame=sys._getframe(1), revision=self._with_revision)
        return self._log(DisplayKind.OK, log, metadata, post_comment=post_comment)

    def info(self, log: str, metadata: Any = None, *, post_comment: bool = False) -> LogReturn | None:
        metadata = enrich(metadata, frame=sys._getframe(1), revision=self._with_revision)
        return self._log(DisplayKind.INFO, log, metadata, post_comment=post_comment)

    def error(self, log: str, metadata: Any = None, *, post_comment: bool = False) -> LogReturn | None:
        metadata = enrich(metadata, frame=sys._getframe(1), revision=self._with_revision)
        return self._log(DisplayKind.ERROR, log, metadata, post_comment=post_comment)

    def debug(self, log: str, metadata: Any = None, *, post_comment: bool = False) -> LogReturn | None:
        metadata = enrich(metadata, frame=sys._getframe(1), revision=self._with_revision)
        return self._log(DisplayKind.DEBUG, log, metadata, post_comment=post_comment)

    def fatal(self, log: str, metadata: Any = None, *, post_comment: bool = False) -> LogReturn | None:
        """Log a fatal event; without metadata a full error with stack is synthesized."""
        if metadata is None or metadata == "":
            metadata = self._error_metadata(LogError(log))
        elif isinstance(metadata, BaseException):
            metadata = self._error_metadata(metadata)

        metadata = enrich(metadata, frame=sys._getframe(1), revision=self._with_revision)
        return self._log(DisplayKind.FATAL, log, metadata, post_comment=post_comment)

    def verbose(self, log: str, metadata: Any = None, *, post_comment: bool = False) -> LogReturn | None:
        metadata = enrich(metadata, frame=sys._getframe(1), revision=self._with_revision)
        return self._log(DisplayKind.VERBOSE, log, metadata, post_comment=post_comment)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait for queued rows and comments; False if ``timeout`` expired."""
        done = True
        if self._delivery is not None:
            done = self._delivery.flush(timeout)
        if self._comment_futures:
            _, not_done = concurrent.futures.wait(list(self._comment_futures), timeout=timeout)
            done = done and not not_done
        return done

    def close(self, timeout: float | None = 10.0) -> None:
        self.flush(timeout)
        if self._delivery is not None:
            self._delivery.close(timeout)
        self._runner.stop(timeout)

    def __enter__(self) -> Logs:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def _with_revision(self) -> bool:
        return self._delivery is not None

    @staticmethod
    def _error_metadata(error: BaseException) -> Metadata:
        metadata = normalize(error)
        stack = metadata["stack"]
        # Line 1 is the frame that created the error.
        if stack and len(stack) > 1:
            del stack[1]
        return metadata

    def _log(
        self,
        kind: DisplayKind,
        log: str,
        metadata: Any,
        *,
        post_comment: bool = False,
    ) -> LogReturn | None:
        level = kind.level
        visible = numeric_level(level) <= self._max_level
        if not visible and self.config.silence_filtered:
            return None

        if visible:
            Logs.console.render(kind, log, metadata)

        diff = to_diff(kind, log)
        result = LogReturn(
            log_message=LogMessage(raw=log, diff=diff, level=level, type=kind),
            metadata=metadata,
        )

        if self.config.should_persist(level):
            self._save(log, level, metadata)

        if post_comment and visible:
            self._post_comment(diff, metadata, level)

        return result

    def _save(self, log: str, level: LogLevel, metadata: Any) -> None:
        delivery = self._delivery
        if delivery is None:
            return
        try:
            delivery.submit(LogRow.from_event(log, level, metadata))
        except Exception as e:
            logger.warning("Failed to enqueue log row: %s", e)
            Logs.console.fatal("Error adding logs to queue", e)

    def _post_comment(self, diff: str, metadata: Any, level: LogLevel) -> None:
        if self.commenter is None or self.comment_target is None:
            logger.debug("post_comment requested but no commenter/target is configured")
            return

        body = comment_body(diff, metadata, level)
        future = self._runner.spawn(deliver_comment(self.commenter, self.comment_target, body))
        self._comment_futures.add(future)
        future.add_done_callback(self._comment_futures.discard)
