"""Fakes shared by the controller and display tests."""

import asyncio
from collections import deque

from livemetrics.exceptions import SnapshotFetchError

T0 = 1_700_000_040_000  # minute aligned
POLL = 10_000
WINDOW = 300_000


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def advance(self, ms: int) -> None:
        self.now += ms

    def __call__(self) -> int:
        return self.now


class FakeSource:
    """Replays queued snapshots; an Exception instance in the queue is raised instead."""

    def __init__(self, *responses):
        self.responses = deque(responses)
        self.calls = 0

    def queue(self, *responses):
        self.responses.extend(responses)

    async def fetch(self):
        self.calls += 1
        if not self.responses:
            raise SnapshotFetchError("no snapshot queued")
        response = self.responses.popleft()
        if isinstance(response, Exception):
            raise response
        return response


class BlockingSource:
    """Holds every fetch until ``release`` is set."""

    def __init__(self, snapshot):
        self.snapshot = snapshot
        self.release = asyncio.Event()
        self.started = asyncio.Event()
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return self.snapshot
