import asyncio

import pytest
from aiohttp.test_utils import TestClient, TestServer
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from livemetrics.exporter import create_metrics_app, json_snapshot
from livemetrics.renderer import render
from livemetrics.series import Sample, Series
from livemetrics.web import WebDisplay, create_app

from helpers.fakes import T0, WINDOW


def _request(app, path):
    async def _go():
        async with TestClient(TestServer(app)) as client:
            response = await client.get(path)
            return response.status, response.content_type, await response.text()

    return asyncio.run(_go())


def _scene(name, *values):
    series = Series.create(name, Sample.create(T0, values[0]), window_ms=WINDOW)
    for i, value in enumerate(values[1:], start=1):
        series.push(Sample.create(T0 + i * 10_000, value))
    return render(name, series, now=T0 + len(values) * 10_000)


def test_web_display_replaces_svg():
    display = WebDisplay(refresh_seconds=10)
    display.attach("cpu", _scene("cpu", 1))
    first = display.svgs["cpu"]
    display.replace("cpu", _scene("cpu", 1, 2))
    assert display.svgs["cpu"] != first
    assert list(display.svgs) == ["cpu"]


def test_web_display_rejects_double_attach_and_unknown_replace():
    display = WebDisplay(refresh_seconds=10)
    display.attach("cpu", _scene("cpu", 1))
    with pytest.raises(KeyError):
        display.attach("cpu", _scene("cpu", 1))
    with pytest.raises(KeyError):
        display.replace("mem", _scene("mem", 1))


def test_index_page_lists_charts_and_refreshes():
    display = WebDisplay(refresh_seconds=10)
    display.attach("cpu", _scene("cpu", 1, 2))
    display.attach("rps", _scene("rps", 5))
    status, content_type, body = _request(create_app(display), "/")
    assert status == 200
    assert content_type == "text/html"
    assert 'http-equiv="refresh" content="10"' in body
    assert body.count('<svg class="graph"') == 2


def test_chart_endpoint_serves_svg_or_404():
    display = WebDisplay(refresh_seconds=10)
    display.attach("cpu", _scene("cpu", 1))
    status, content_type, body = _request(create_app(display), "/charts/cpu.svg")
    assert status == 200
    assert content_type == "image/svg+xml"
    assert body == display.svgs["cpu"]

    status, _, _ = _request(create_app(display), "/charts/nope.svg")
    assert status == 404


def test_json_snapshot_flattens_registry():
    registry = CollectorRegistry()
    Gauge("queue_depth", "Queue depth", registry=registry).set(4)
    Counter("requests", "Requests", ["route"], registry=registry).labels(route="/a").inc(2)
    Histogram("latency_seconds", "Latency", registry=registry).observe(0.25)

    metrics = json_snapshot(registry)["metrics"]
    assert metrics["queue_depth"] == 4
    assert metrics['requests_total{route="/a"}'] == 2
    assert metrics["latency_seconds_count"] == 1
    assert metrics["latency_seconds_sum"] == 0.25
    assert not any(name.endswith(("_bucket", "_created")) for name in metrics)


def test_json_snapshot_escapes_label_values():
    registry = CollectorRegistry()
    errors = Counter("errors", "Errors", ["route", "method"], registry=registry)
    errors.labels(route='/a",method="GET', method="POST").inc()
    errors.labels(route="/a", method="GET").inc(3)
    Gauge("paths", "Paths", ["path"], registry=registry).labels(path="C:\\tmp\nx").set(1)

    metrics = json_snapshot(registry)["metrics"]
    assert metrics['errors_total{method="POST",route="/a\\",method=\\"GET"}'] == 1
    assert metrics['errors_total{method="GET",route="/a"}'] == 3
    assert metrics['paths{path="C:\\\\tmp\\nx"}'] == 1


def test_exporter_serves_snapshot_endpoint():
    registry = CollectorRegistry()
    Gauge("temperature", "Temperature", registry=registry).set(21.5)
    app = create_metrics_app(registry, endpoint="/api/relay/metrics/data.json")

    async def _go():
        async with TestClient(TestServer(app)) as client:
            first = await (await client.get("/api/relay/metrics/data.json")).json()
            second = await (await client.get("/api/relay/metrics/data.json")).json()
            health = await client.get("/health")
            return first, second, health.status

    first, second, health_status = asyncio.run(_go())
    assert first["metrics"]["temperature"] == 21.5
    assert first["metrics"]["livemetrics_snapshot_requests_total"] == 1
    assert second["metrics"]["livemetrics_snapshot_requests_total"] == 2
    assert health_status == 200
