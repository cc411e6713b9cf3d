import pytest

from livemetrics.renderer import render
from livemetrics.scene import Margin
from livemetrics.series import Sample, Series

from helpers.fakes import T0, WINDOW

BASELINE = 200 - Margin().bottom


def _series(*points, name="cpu"):
    (t, v), *rest = points
    series = Series.create(name, Sample.create(t, v), window_ms=WINDOW)
    for t, v in rest:
        series.push(Sample.create(t, v))
    return series


def test_two_samples_render_two_point_line_with_latest_label():
    series = _series((T0, 5), (T0 + 10_000, 7))
    scene = render("cpu", series, now=T0 + 10_000)

    assert len(scene.line.points) == 2
    assert scene.value_label.text == "7"
    assert scene.title_label.text == "cpu"
    assert scene.y_axis.domain == (0.0, 7.0)
    (x0, y0), (x1, y1) = scene.line.points
    assert x1 == pytest.approx(350 - 35)
    assert y1 == pytest.approx(5)
    assert y0 == pytest.approx(BASELINE - 5 / 7 * (BASELINE - 5))
    assert x0 < x1


def test_axes_use_wall_clock_now_not_last_sample():
    series = _series((T0, 1), (T0 + 10_000, 2))
    scene = render("cpu", series, now=T0 + 10_400)
    assert scene.x_axis.domain == (T0 + 10_400 - WINDOW, T0 + 10_400)
    assert scene.line.points[-1][0] < 350 - 35


def test_axis_ticks():
    series = _series((T0, 40), (T0 + 10_000, 93))
    scene = render("cpu", series, now=T0)
    assert [tick.label for tick in scene.x_axis.ticks] == ["10:09", "10:10", "10:11", "10:12", "10:13", "10:14"]
    assert scene.y_axis.domain == (0.0, 100.0)
    assert [tick.label for tick in scene.y_axis.ticks] == ["0", "20", "40", "60", "80", "100"]
    assert scene.y_axis.ticks[-1].position == pytest.approx(5)


def test_render_is_deterministic():
    series = _series((T0, 1.5), (T0 + 10_000, 2.25), (T0 + 20_000, 0.75))
    first = render("cpu", series, now=T0 + 20_000)
    second = render("cpu", series, now=T0 + 20_000)
    assert first == second
    assert first.to_svg() == second.to_svg()


def test_all_zero_series_renders_flat_baseline():
    series = _series((T0, 0), (T0 + 10_000, 0))
    scene = render("cpu", series, now=T0 + 10_000)
    assert scene.y_axis.domain == (0.0, 0.0)
    assert [y for _, y in scene.line.points] == [BASELINE, BASELINE]
    assert scene.value_label.text == "0"


def test_render_does_not_mutate_series():
    series = _series((T0, 3), (T0 + 10_000, 4))
    before = series.samples()
    render("cpu", series, now=T0 + WINDOW * 2)
    assert series.samples() == before


def test_svg_contains_scene_parts():
    series = _series((T0, 5), (T0 + 10_000, 7), name="a<b")
    svg = render("a<b", series, now=T0 + 10_000).to_svg()
    assert svg.startswith('<svg class="graph"')
    assert 'class="line"' in svg
    assert "a&lt;b" in svg
    assert svg.count('class="tick"') > 0


@pytest.mark.parametrize("value, label", [(4.5, "4.5"), (0.45, "0.45"), (12345.6, "12,346")])
def test_value_label_keeps_significant_decimals(value, label):
    scene = render("cpu", _series((T0, value)), now=T0)
    assert scene.value_label.text == label


def test_value_label_is_finer_than_axis_ticks():
    scene = render("cpu", _series((T0, 4.5)), now=T0)
    assert scene.value_label.text == "4.5"
    assert [tick.label for tick in scene.y_axis.ticks] == ["0", "1", "2", "3", "4"]
