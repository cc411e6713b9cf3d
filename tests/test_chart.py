import math

import pytest

from livemetrics.chart import plot, render_text, resample
from livemetrics.display import TerminalDisplay
from livemetrics.renderer import render
from livemetrics.series import Sample, Series

from helpers.fakes import T0, WINDOW


def _series(values, step=10_000):
    series = Series.create("cpu", Sample.create(T0, values[0]), window_ms=WINDOW)
    for i, value in enumerate(values[1:], start=1):
        series.push(Sample.create(T0 + i * step, value))
    return series


def test_plot_flat_line_for_collapsed_range():
    chart = plot([0.0, 0.0, 0.0], 0.0, 0.0, height=6, fmt=lambda v: f"{v:g}")
    assert chart.splitlines() == ["0 ┼──"]


def test_plot_rising_line():
    chart = plot([0.0, 1.0, 2.0], 0.0, 2.0, height=2, fmt=lambda v: f"{v:g}")
    rows = chart.splitlines()
    assert len(rows) == 3
    assert rows[0].startswith("2 ┤")
    assert rows[-1].startswith("0 ┼")
    assert "╯" in chart and "╭" in chart


def test_plot_rejects_inverted_range():
    with pytest.raises(ValueError):
        plot([1.0], 2.0, 1.0)


def test_resample_recovers_values_at_sample_columns():
    series = _series([5, 7])
    scene = render("cpu", series, now=T0 + 10_000)
    values = resample(scene, 31)
    assert values[-1] == pytest.approx(7)
    assert values[-2] == pytest.approx(5)
    assert all(math.isnan(v) for v in values[:-2])


def test_render_text_includes_value_label():
    series = _series([1, 4, 2, 8])
    text = render_text(render("cpu", series, now=T0 + 30_000), columns=40, height=4)
    assert text.splitlines()[-1].strip() == "8"
    assert "┤" in text


def test_terminal_display_renders_one_panel_per_metric():
    display = TerminalDisplay(source_label="http://example/data.json")
    display.attach("cpu", render("cpu", _series([1, 2]), now=T0 + 10_000))
    display.attach("rps", render("rps", _series([3]), now=T0))
    display.replace("cpu", render("cpu", _series([1, 2, 3]), now=T0 + 20_000))

    layout = display.render()
    assert layout["charts"] is not None
    assert list(display.scenes) == ["cpu", "rps"]
    assert display.last_update is not None
