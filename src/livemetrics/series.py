"""
Windowed time series buffers.

A ``Series`` holds the samples of a single metric ordered by timestamp. Samples
are appended in poll order, so the buffer is always time-sorted and eviction
only ever needs to look at the front. Eviction happens at push time; between
pushes a series may briefly hold samples older than the window.
"""

from __future__ import annotations

import math
import numbers
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterator

from . import settings
from .exceptions import InvalidSampleError, OutOfOrderSampleError


def _is_real(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class Sample:
    """A single metric value with the time (ms since epoch) it was observed."""

    timestamp: int
    value: float

    @classmethod
    def create(cls, timestamp: object, value: object) -> "Sample":
        """Validate raw input and build a sample."""
        if not _is_real(timestamp):
            raise InvalidSampleError(f"timestamp must be a number, got {type(timestamp).__name__}")
        if not _is_real(value):
            raise InvalidSampleError(f"value must be a number, got {type(value).__name__}")
        # Integers beyond float range (valid JSON) overflow on conversion.
        try:
            as_float = float(timestamp)
        except OverflowError as e:
            raise InvalidSampleError("timestamp is too large to represent") from e
        if not math.isfinite(as_float):
            raise InvalidSampleError(f"timestamp must be finite, got {as_float!r}")
        try:
            number = float(value)
        except OverflowError as e:
            raise InvalidSampleError("value is too large to represent") from e
        if not math.isfinite(number):
            raise InvalidSampleError(f"value must be finite, got {number!r}")
        return cls(timestamp=int(timestamp), value=number)


@dataclass(slots=True)
class Series:
    """Bounded, time-ordered history of samples for one metric."""

    name: str
    window_ms: int = settings.WINDOW_MS
    _samples: Deque[Sample] = field(default_factory=deque, repr=False)

    @classmethod
    def create(cls, name: str, initial: Sample, window_ms: int | None = None) -> "Series":
        """Create a series holding exactly ``initial``."""
        if not isinstance(name, str) or not name:
            raise InvalidSampleError("series name must be a non-empty string")
        if not isinstance(initial, Sample):
            raise InvalidSampleError(f"expected a Sample, got {type(initial).__name__}")
        if window_ms is None:
            window_ms = settings.WINDOW_MS
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")
        series = cls(name=name, window_ms=window_ms)
        series._samples.append(initial)
        return series

    # --- Mutation ----------------------------------------------------------

    def push(self, sample: Sample, now: int | None = None) -> int:
        """
        Evict samples older than the window, then append ``sample``.

        Args:
            sample: The new sample. Must not be older than the current latest
                sample; equal timestamps are kept in insertion order.
            now: Current time in ms used for the eviction cutoff. Defaults to
                the sample's own timestamp.

        Returns:
            The number of samples evicted.
        """
        latest = self._samples[-1]
        if sample.timestamp < latest.timestamp:
            raise OutOfOrderSampleError(
                f"{self.name}: sample at {sample.timestamp} is older than latest {latest.timestamp}"
            )
        if now is None:
            now = sample.timestamp
        evicted = self._evict(now)
        self._samples.append(sample)
        return evicted

    def _evict(self, now: int) -> int:
        cutoff = now - self.window_ms
        evicted = 0
        while self._samples and self._samples[0].timestamp < cutoff:
            self._samples.popleft()
            evicted += 1
        return evicted

    # --- Read-only views ---------------------------------------------------

    def samples(self) -> tuple[Sample, ...]:
        """Return a point-in-time copy of the retained samples."""
        return tuple(self._samples)

    def max_value(self) -> float:
        return max(sample.value for sample in self._samples)

    @property
    def latest(self) -> Sample:
        return self._samples[-1]

    @property
    def earliest(self) -> Sample:
        return self._samples[0]

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(tuple(self._samples))
