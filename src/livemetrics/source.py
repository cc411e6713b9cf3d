"""Snapshot sources: where the controller pulls metric values from."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Mapping, Protocol

from aiohttp import ClientError, ClientSession, ClientTimeout
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from . import settings
from .exceptions import MalformedSnapshotError, SnapshotFetchError


class SnapshotPayload(BaseModel):
    """Body returned by a snapshot endpoint. A missing ``metrics`` key is an empty snapshot."""

    metrics: dict[str, Any] = Field(default_factory=dict)


def parse_snapshot(body: str | bytes) -> dict[str, Any]:
    """Parse a raw JSON body into a ``{name: value}`` mapping.

    Values are passed through untouched; validating them is the controller's job
    so that one bad metric does not discard the whole snapshot.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedSnapshotError(f"Snapshot is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedSnapshotError(f"Snapshot must be a JSON object, got {type(data).__name__}")
    try:
        payload = SnapshotPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedSnapshotError(f"Snapshot has an unexpected shape: {e}") from e
    if "metrics" not in data:
        logger.debug("Snapshot has no 'metrics' field, treating as empty")
    return payload.metrics


class SnapshotSource(Protocol):
    async def fetch(self) -> Mapping[str, Any]:
        """Return the current ``{name: value}`` mapping or raise ``SnapshotError``."""
        ...


class HttpSnapshotSource:
    """Fetches snapshots from a JSON endpoint over HTTP."""

    def __init__(self, url: str | None = None, timeout: float | None = None, session: ClientSession | None = None):
        self.url = url or settings.SNAPSHOT_URL
        self.timeout = ClientTimeout(total=timeout if timeout is not None else settings.FETCH_TIMEOUT_S)
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def fetch(self) -> dict[str, Any]:
        logger.debug(f"Fetching snapshot from {self.url}")
        session = await self._get_session()
        try:
            async with session.get(self.url, timeout=self.timeout) as response:
                if response.status < 200 or response.status >= 300:
                    response_text = await response.text()
                    raise SnapshotFetchError(
                        f"Snapshot request to {self.url} failed: {response.status} - {response_text[:200]}",
                        status=response.status,
                    )
                body = await response.read()
        except SnapshotFetchError:
            raise
        except asyncio.TimeoutError as e:
            raise SnapshotFetchError(f"Snapshot request to {self.url} timed out after {self.timeout.total}s") from e
        except ClientError as e:
            raise SnapshotFetchError(f"Snapshot request to {self.url} failed: {type(e).__name__}: {e}") from e
        return parse_snapshot(body)

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None
