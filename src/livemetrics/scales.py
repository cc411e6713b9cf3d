"""
Scales and tick helpers for the chart renderer.

Linear scales map a numeric domain onto a pixel range. Tick steps follow the
usual 1, 2 and 5 times a power of ten progression, and ``nice()`` widens a
domain outwards until both ends land on a multiple of the step.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)

MINUTE_MS = 60 * 1000


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _step_factor(error: float) -> int:
    if error >= _E10:
        return 10
    if error >= _E5:
        return 5
    if error >= _E2:
        return 2
    return 1


def tick_increment(start: float, stop: float, count: int) -> float:
    """
    Return the tick increment for ``[start, stop]``.

    Positive results are the step itself; negative results are the inverse of
    the step (``-1 / step``) so that fractional steps stay exact integers.
    Returns 0 when the span is empty.
    """
    if count <= 0:
        return 0.0
    step = (stop - start) / count
    if step <= 0 or not math.isfinite(step):
        return 0.0
    power = math.floor(math.log10(step))
    error = step / 10**power
    factor = _step_factor(error)
    if power >= 0:
        return factor * 10**power
    return -(10 ** (-power)) / factor


def tick_step(start: float, stop: float, count: int) -> float:
    """Return the absolute tick step for ``[start, stop]`` (order independent)."""
    reverse = stop < start
    inc = tick_increment(stop, start, count) if reverse else tick_increment(start, stop, count)
    if inc == 0:
        return 0.0
    step = -1 / inc if inc < 0 else inc
    return -step if reverse else step


def _tick_spec(start: float, stop: float, count: float) -> tuple[int, int, float]:
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / 10**power
    factor = _step_factor(error)
    if power < 0:
        inc = 10 ** (-power) / factor
        i1 = _round_half_up(start * inc)
        i2 = _round_half_up(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10**power * factor
        i1 = _round_half_up(start / inc)
        i2 = _round_half_up(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1
    if i2 < i1 and 0.5 <= count < 2:
        return _tick_spec(start, stop, count * 2)
    return i1, i2, inc


def ticks(start: float, stop: float, count: int) -> list[float]:
    """Return roughly ``count`` round values spanning ``[start, stop]``."""
    if count <= 0:
        return []
    if start == stop:
        return [float(start)]
    reverse = stop < start
    lo, hi = (stop, start) if reverse else (start, stop)
    i1, i2, inc = _tick_spec(lo, hi, count)
    if i2 < i1:
        return []
    if inc < 0:
        values = [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
    else:
        values = [float((i1 + i) * inc) for i in range(i2 - i1 + 1)]
    if reverse:
        values.reverse()
    return values


def precision_fixed(step: float) -> int:
    """Number of decimals needed to tell apart ticks ``step`` apart."""
    step = abs(step)
    if step == 0 or not math.isfinite(step):
        return 0
    # Round the exponent through a formatted string so 0.1 stays -1 and not -1.0000000000000002.
    exponent = int(f"{step:e}".split("e")[1])
    return max(0, -exponent)


def tick_format(start: float, stop: float, count: int, trim: bool = False) -> Callable[[float], str]:
    """
    Fixed-point formatter with thousands separators, precise enough for the tick step.

    With ``trim`` insignificant trailing zeros after the decimal point are
    dropped, so ``7.0`` prints as ``7`` while ``4.5`` keeps its decimal.
    """
    precision = precision_fixed(tick_step(start, stop, count))

    def fmt(value: float) -> str:
        text = f"{value:,.{precision}f}"
        if trim and "." in text:
            text = text.rstrip("0").rstrip(".")
        # Avoid rendering "-0" for values that round to zero.
        if text.startswith("-") and float(text.replace(",", "")) == 0:
            text = text[1:]
        return text

    return fmt


@dataclass(frozen=True, slots=True)
class LinearScale:
    """Linear map from ``domain`` onto ``range``."""

    domain: tuple[float, float]
    range: tuple[float, float]

    @property
    def degenerate(self) -> bool:
        return self.domain[0] == self.domain[1]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d0 == d1:
            # Collapsed domain: everything sits on the start of the range (the baseline).
            return float(r0)
        t = (value - d0) / (d1 - d0)
        return r0 + t * (r1 - r0)

    def nice(self, count: int = 10) -> "LinearScale":
        """Return a copy whose domain is extended to round values."""
        d0, d1 = self.domain
        start, stop = d0, d1
        reverse = stop < start
        if reverse:
            start, stop = stop, start
        if start == stop:
            return self
        prestep = None
        for _ in range(10):
            step = tick_increment(start, stop, count)
            if step == prestep:
                break
            if step > 0:
                start = math.floor(start / step) * step
                stop = math.ceil(stop / step) * step
            elif step < 0:
                start = math.ceil(start * step) / step
                stop = math.floor(stop * step) / step
            else:
                break
            prestep = step
        # Adding 0.0 folds -0.0 produced by the inverse-step branch back to 0.0.
        start, stop = float(start) + 0.0, float(stop) + 0.0
        domain = (stop, start) if reverse else (start, stop)
        return LinearScale(domain=domain, range=self.range)

    def ticks(self, count: int = 10) -> list[float]:
        return ticks(self.domain[0], self.domain[1], count)

    def tick_format(self, count: int = 10, trim: bool = False) -> Callable[[float], str]:
        return tick_format(self.domain[0], self.domain[1], count, trim=trim)


@dataclass(frozen=True, slots=True)
class TimeScale(LinearScale):
    """Linear scale over UTC milliseconds with one tick per whole minute."""

    def minute_ticks(self, every: int = 1) -> list[int]:
        start, stop = sorted(self.domain)
        interval = MINUTE_MS * every
        first = math.ceil(start / interval) * interval
        return list(range(int(first), int(stop) + 1, interval))

    @staticmethod
    def format_minute(timestamp_ms: float) -> str:
        """12-hour ``hh:mm`` in UTC, the usual label for minute ticks on a time axis."""
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime("%I:%M")
