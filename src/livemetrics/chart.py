"""Box-drawing text charts for terminal hosts."""

from math import ceil, floor, isfinite, isnan
from typing import Callable, Optional

from .scene import Scene

SYMBOLS = ["┼", "┤", "╶", "╴", "─", "╰", "╭", "╮", "╯", "│"]


def plot(values: list, minimum: float, maximum: float, height: int = 6, fmt: Optional[Callable] = None) -> str:
    """
    Draw ``values`` as a text chart, one column per value.

    NaN entries leave a gap in the line. The vertical range is fixed to
    ``[minimum, maximum]``; a collapsed range draws a single baseline row.
    """
    if not values or all(isnan(v) for v in values):
        return ""
    if minimum > maximum:
        raise ValueError("The min value cannot exceed the max value.")

    fmt = fmt or "{:8.2f}".format
    interval = maximum - minimum
    ratio = height / interval if interval > 0 else 1

    min2 = int(floor(minimum * ratio))
    max2 = int(ceil(maximum * ratio)) if interval > 0 else min2
    rows = max2 - min2

    labels = [fmt(maximum - (y * interval / (rows if rows else 1))) + " " for y in range(rows + 1)]
    offset = max(len(label) for label in labels) + 1

    def scaled(v):
        return int(round(min(max(v, minimum), maximum) * ratio) - min2)

    width = len(values) + offset
    result = [[" "] * width for _ in range(rows + 1)]

    for row, label in enumerate(labels):
        for i, ch in enumerate(label.rjust(offset - 1)):
            result[row][i] = ch
        result[row][offset - 1] = SYMBOLS[1]
    result[rows][offset - 1] = SYMBOLS[0]

    first = values[0]
    if isfinite(first):
        result[rows - scaled(first)][offset - 1] = SYMBOLS[0]

    for x in range(len(values) - 1):
        d0, d1 = values[x], values[x + 1]

        if isnan(d0) and isnan(d1):
            continue
        if isnan(d0):
            result[rows - scaled(d1)][x + offset] = SYMBOLS[2]
            continue
        if isnan(d1):
            result[rows - scaled(d0)][x + offset] = SYMBOLS[3]
            continue

        y0, y1 = scaled(d0), scaled(d1)
        if y0 == y1:
            result[rows - y0][x + offset] = SYMBOLS[4]
            continue

        result[rows - y1][x + offset] = SYMBOLS[5] if y0 > y1 else SYMBOLS[6]
        result[rows - y0][x + offset] = SYMBOLS[7] if y0 > y1 else SYMBOLS[8]
        for y in range(min(y0, y1) + 1, max(y0, y1)):
            result[rows - y][x + offset] = SYMBOLS[9]

    return "\n".join("".join(row).rstrip() for row in result)


def resample(scene: Scene, columns: int) -> list[float]:
    """
    Bucket the scene's line into ``columns`` slots across the time axis.

    Each slot holds the value of the last point falling into it (NaN when
    empty), recovered from pixel space through the axes.
    """
    x0, x1 = scene.x_axis.range
    (d0, d1), (r0, r1) = scene.y_axis.domain, scene.y_axis.range
    span = x1 - x0
    out = [float("nan")] * columns
    for px, py in scene.line.points:
        col = int((px - x0) / span * (columns - 1) + 0.5) if span else 0
        if not 0 <= col < columns:
            continue
        out[col] = d0 if r0 == r1 or d0 == d1 else d0 + (py - r0) / (r1 - r0) * (d1 - d0)
    return out


def render_text(scene: Scene, columns: int = 60, height: int = 6) -> str:
    """Render a scene as a text chart followed by its value label."""
    lo, hi = sorted(scene.y_axis.domain)
    labels = {tick.value: tick.label for tick in scene.y_axis.ticks}

    def fmt(value: float) -> str:
        return labels.get(value, f"{value:.4g}")

    # Only the points carry data; interior gaps between polls are bridged by the line.
    values = resample(scene, columns)
    known = [i for i, v in enumerate(values) if not isnan(v)]
    for a, b in zip(known, known[1:]):
        for i in range(a + 1, b):
            values[i] = values[a] + (values[b] - values[a]) * (i - a) / (b - a)

    chart = plot(values, lo, hi, height=height, fmt=fmt)
    if not chart:
        return "Waiting for data..."
    return f"{chart}\n{scene.value_label.text:>{columns}}"
