"""Persistence sinks: anything that accepts one ``{log, level, metadata}`` row."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import aiofiles
import httpx

from ..config import PersistenceCredentials
from ..serialization import to_json_text


class LogSink(Protocol):
    """Sink interface: store a row or raise."""

    async def insert(self, row: dict[str, Any]) -> None:
        """Persist one JSON-safe row."""
        ...


@dataclass(frozen=True, slots=True)
class RestInsertSink:
    """Insert rows through a PostgREST-style ``/rest/v1/<table>`` endpoint."""

    credentials: PersistenceCredentials
    timeout: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    @property
    def url(self) -> str:
        return f"{self.credentials.endpoint.rstrip('/')}/rest/v1/{self.credentials.table}"

    async def insert(self, row: dict[str, Any]) -> None:
        headers = {
            "apikey": self.credentials.key,
            "Authorization": f"Bearer {self.credentials.key}",
            "Prefer": "return=minimal",
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(self.url, json=row, headers=headers)
            resp.raise_for_status()


@dataclass(slots=True)
class JsonlFileSink:
    """Append each row as one JSON line to a local file."""

    path: Path
    encoding: str = "utf-8"
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def insert(self, row: dict[str, Any]) -> None:
        line = to_json_text(row, indent=None) + "\n"
        async with self._lock:
            async with aiofiles.open(self.path, mode="a", encoding=self.encoding) as f:
                await f.write(line)
