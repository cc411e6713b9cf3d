"""
Dashboard controller.

Owns every ``Series`` keyed by metric name and drives the poll cycle: fetch a
snapshot, stamp it once, fan it out one sample per metric, re-render each
updated series and hand the scene to the display host.

Ticks fire on a fixed cadence that is not delayed by slow fetches. A tick that
fires while the previous fetch is still in flight is skipped, and a snapshot
stamped earlier than the last applied one is rejected, so snapshots are
always applied in arrival order.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
from types import MappingProxyType
from typing import Any, Callable, Mapping

from loguru import logger

from . import settings
from .display import Display
from .exceptions import InvalidSampleError, SnapshotError
from .renderer import now_ms, render
from .series import Sample, Series
from .source import SnapshotSource


class MetricState(enum.Enum):
    UNSEEN = "unseen"
    ACTIVE = "active"


class DashboardController:
    """Holds the dashboard state and the timer that keeps it fresh."""

    def __init__(
        self,
        *,
        source: SnapshotSource,
        display: Display,
        window_ms: int | None = None,
        poll_interval_ms: int | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._source = source
        self._display = display
        self.window_ms = window_ms if window_ms is not None else settings.WINDOW_MS
        self.poll_interval_ms = poll_interval_ms if poll_interval_ms is not None else settings.POLL_INTERVAL_MS
        settings.check_window(self.window_ms, self.poll_interval_ms)
        self._clock = clock
        self._series: dict[str, Series] = {}
        self._last_applied: int | None = None
        self._in_flight = False
        self._timer_task: asyncio.Task[None] | None = None
        self._tick_tasks: set[asyncio.Task[bool]] = set()
        self.tick_count = 0
        self.skipped_ticks = 0
        self.failed_ticks = 0

    # --- State -------------------------------------------------------------

    @property
    def series(self) -> Mapping[str, Series]:
        return MappingProxyType(self._series)

    def state(self, name: str) -> MetricState:
        return MetricState.ACTIVE if name in self._series else MetricState.UNSEEN

    @property
    def running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    # --- Poll cycle --------------------------------------------------------

    async def on_tick(self) -> bool:
        """
        Run one fetch-and-update cycle.

        Returns:
            True if a snapshot was applied, False if the tick was skipped or
            the fetch failed. Fetch failures leave every series untouched.
        """
        self.tick_count += 1
        if self._in_flight:
            self.skipped_ticks += 1
            logger.warning(f"Tick #{self.tick_count} skipped: previous snapshot fetch still in flight")
            return False

        self._in_flight = True
        try:
            try:
                metrics = await self._source.fetch()
            except SnapshotError as e:
                self.failed_ticks += 1
                logger.warning(f"Tick #{self.tick_count}: snapshot unavailable, keeping existing series: {e}")
                return False
            timestamp = self._clock()
            updated = self.apply_snapshot(metrics, timestamp)
            logger.debug(f"Tick #{self.tick_count}: updated {len(updated)}/{len(metrics)} metrics at {timestamp}")
            return True
        finally:
            self._in_flight = False

    def apply_snapshot(self, metrics: Mapping[str, Any], timestamp: int) -> list[str]:
        """Apply one snapshot stamped at ``timestamp``. Returns the names that were updated."""
        if self._last_applied is not None and timestamp < self._last_applied:
            logger.warning(
                f"Rejecting snapshot stamped {timestamp}: older than last applied snapshot {self._last_applied}"
            )
            return []
        self._last_applied = timestamp

        updated: list[str] = []
        for name, value in metrics.items():
            try:
                sample = Sample.create(timestamp, value)
            except InvalidSampleError as e:
                logger.warning(f"Skipping metric {name!r} this tick: {e}")
                continue

            series = self._series.get(name)
            if series is None:
                series = Series.create(name, sample, window_ms=self.window_ms)
                self._series[name] = series
                self._display.attach(name, render(name, series, self._clock(), window_ms=self.window_ms))
                logger.info(f"Metric {name!r} is now active")
            else:
                if sample.timestamp < series.latest.timestamp:
                    logger.warning(f"Skipping stale sample for {name!r} at {sample.timestamp}")
                    continue
                evicted = series.push(sample, now=timestamp)
                if evicted:
                    logger.debug(f"Metric {name!r}: evicted {evicted} samples outside the window")
                self._display.replace(name, render(name, series, self._clock(), window_ms=self.window_ms))
            updated.append(name)
        return updated

    # --- Scheduling --------------------------------------------------------

    async def start(self) -> None:
        """Run one tick immediately, then keep ticking every poll interval."""
        if self.running:
            return
        logger.info(
            f"Dashboard started: polling every {self.poll_interval_ms}ms, window {self.window_ms}ms"
        )
        self._spawn_tick()
        self._timer_task = asyncio.create_task(self._timer(), name="dashboard-timer")

    async def stop(self) -> None:
        """Cancel the timer and any in-flight tick, then drop all series."""
        tasks = [self._timer_task, *self._tick_tasks]
        for task in tasks:
            if task is None:
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._timer_task = None
        self._tick_tasks.clear()
        self._series.clear()
        self._last_applied = None
        logger.info("Dashboard stopped")

    async def _timer(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self.poll_interval_ms / 1000
        next_run = loop.time() + interval
        while True:
            await asyncio.sleep(max(0.0, next_run - loop.time()))
            next_run += interval
            self._spawn_tick()

    def _spawn_tick(self) -> None:
        task = asyncio.create_task(self._guarded_tick(), name=f"dashboard-tick-{self.tick_count + 1}")
        self._tick_tasks.add(task)
        task.add_done_callback(self._tick_tasks.discard)

    async def _guarded_tick(self) -> bool:
        try:
            return await self.on_tick()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failed_ticks += 1
            logger.exception(f"Unexpected error during tick: {e}")
            return False
