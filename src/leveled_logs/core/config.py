"""Facade configuration and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

from .models import LogLevel, numeric_level


@dataclass(frozen=True, slots=True)
class PersistenceCredentials:
    endpoint: str
    key: str
    table: str = "logs"


@dataclass(frozen=True, slots=True)
class LogsConfig:
    max_visible_level: LogLevel = LogLevel.INFO

    # Remote persistence (optional)
    persistence_credentials: PersistenceCredentials | None = None
    # None: persist every level that is visible.
    levels_to_persist: tuple[LogLevel, ...] | None = None

    # Delivery policy
    retry_limit: int = 0
    retry_delay: float = 1.0
    concurrency: int = 6
    queue_size: int = 1000

    # Console behaviour
    suppress_trivial: bool = True
    # Filtered levels return None instead of a LogReturn.
    silence_filtered: bool = False

    @property
    def max_rank(self) -> int:
        return numeric_level(self.max_visible_level)

    def should_persist(self, level: LogLevel) -> bool:
        if self.levels_to_persist is None:
            return numeric_level(level) <= self.max_rank
        return level in self.levels_to_persist


def _env_int(name: str, *, minimum: int) -> int | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def resolve_logs_config(cfg: LogsConfig | None) -> LogsConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = LogsConfig()

    level = os.getenv("LEVELED_LOGS_LEVEL")
    if level:
        try:
            cfg = replace(cfg, max_visible_level=LogLevel(level.strip().lower()))
        except ValueError as exc:
            valid = ", ".join(lvl.value for lvl in LogLevel)
            raise ValueError(f"LEVELED_LOGS_LEVEL must be one of: {valid}") from exc

    retry_limit = _env_int("LEVELED_LOGS_RETRY_LIMIT", minimum=0)
    if retry_limit is not None:
        cfg = replace(cfg, retry_limit=retry_limit)

    concurrency = _env_int("LEVELED_LOGS_CONCURRENCY", minimum=1)
    if concurrency is not None:
        cfg = replace(cfg, concurrency=concurrency)

    endpoint = os.getenv("LEVELED_LOGS_ENDPOINT")
    key = os.getenv("LEVELED_LOGS_KEY")
    if endpoint or key:
        if not (endpoint and key):
            raise ValueError("LEVELED_LOGS_ENDPOINT and LEVELED_LOGS_KEY must be set together")
        cfg = replace(cfg, persistence_credentials=PersistenceCredentials(endpoint=endpoint, key=key))

    return cfg
