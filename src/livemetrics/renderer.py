"""Chart renderer: turns a series into a complete scene."""

from __future__ import annotations

import time

from . import settings
from .scales import LinearScale, TimeScale
from .scene import Axis, Label, Margin, Polyline, Scene, Tick
from .series import Series

DEFAULT_MARGIN = Margin(top=5, right=35, bottom=20, left=5)
Y_TICK_COUNT = 5


def now_ms() -> int:
    return int(time.time() * 1000)


def render(
    name: str,
    series: Series,
    now: int | None = None,
    *,
    window_ms: int | None = None,
    width: int | None = None,
    height: int | None = None,
    margin: Margin = DEFAULT_MARGIN,
) -> Scene:
    """
    Build the scene for ``series``.

    The time axis spans ``[now - window, now]`` where ``now`` is the wall clock
    at render time, so the line may end slightly left of the right edge when
    the last sample is a little old. The value axis spans ``[0, max]`` widened
    to round numbers; an all-zero series collapses onto the baseline.
    """
    if now is None:
        now = now_ms()
    if window_ms is None:
        window_ms = series.window_ms
    width = width or settings.CHART_WIDTH
    height = height or settings.CHART_HEIGHT

    samples = series.samples()

    x = TimeScale(domain=(now - window_ms, now), range=(margin.left, width - margin.right))
    y = LinearScale(
        domain=(0.0, series.max_value()),
        range=(height - margin.bottom, margin.top),
    ).nice()
    axis_fmt = y.tick_format(Y_TICK_COUNT)
    # The value label uses the finer default tick step so it keeps its decimals.
    value_fmt = y.tick_format(trim=True)

    x_axis = Axis(
        orient="bottom",
        offset=height - margin.bottom,
        domain=x.domain,
        range=x.range,
        ticks=tuple(Tick(position=x(t), value=t, label=TimeScale.format_minute(t)) for t in x.minute_ticks()),
    )
    y_axis = Axis(
        orient="right",
        offset=width - margin.right,
        domain=y.domain,
        range=y.range,
        ticks=tuple(Tick(position=y(v), value=v, label=axis_fmt(v)) for v in y.ticks(Y_TICK_COUNT)),
    )

    line = Polyline(points=tuple((x(sample.timestamp), y(sample.value)) for sample in samples))

    return Scene(
        name=name,
        width=width,
        height=height,
        now=now,
        x_axis=x_axis,
        y_axis=y_axis,
        line=line,
        value_label=Label("value", width - margin.right - 5, height - margin.bottom - 50, value_fmt(samples[-1].value)),
        title_label=Label("title", width - margin.right - 5, height - margin.bottom - 10, name),
    )
