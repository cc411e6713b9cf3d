"""
Snapshot exporter.

Serves the JSON snapshot that dashboards poll: ``{"metrics": {name: value}}``
built from a prometheus_client registry. Counters and gauges export their
current value; histograms and summaries export their ``_count`` and ``_sum``.
Labelled metrics are flattened into ``name{label="value"}`` keys.
"""

import math
import time

from aiohttp import web
from loguru import logger
from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge

from . import settings

_EXPORTED_SUFFIXES = ("", "_total", "_count", "_sum")

# Keep global references so repeated calls don't register the same metric name twice.
_counter_cache: dict[str, Counter] = {}
_gauge_cache: dict[str, Gauge] = {}


def _escape_label_value(value: str) -> str:
    # Same escaping as the Prometheus text exposition format.
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _sample_key(name: str, labels: dict[str, str]) -> str:
    if not labels:
        return name
    inner = ",".join(f'{key}="{_escape_label_value(labels[key])}"' for key in sorted(labels))
    return f"{name}{{{inner}}}"


def json_snapshot(registry: CollectorRegistry = REGISTRY) -> dict:
    """Collect every exportable sample in ``registry`` into a snapshot body."""
    metrics: dict[str, float] = {}
    for family in registry.collect():
        for sample in family.samples:
            suffix = sample.name[len(family.name):] if sample.name.startswith(family.name) else None
            if suffix not in _EXPORTED_SUFFIXES:
                continue
            if not math.isfinite(sample.value):
                continue
            metrics[_sample_key(sample.name, sample.labels)] = sample.value
    return {"metrics": metrics}


def GaugeWithParams(metric_name: str, description: str, registry: CollectorRegistry = REGISTRY) -> Gauge:
    key = f"{id(registry)}:{metric_name}"
    if key not in _gauge_cache:
        _gauge_cache[key] = Gauge(metric_name, description, registry=registry)
    return _gauge_cache[key]


def CounterWithParams(metric_name: str, description: str, registry: CollectorRegistry = REGISTRY) -> Counter:
    key = f"{id(registry)}:{metric_name}"
    if key not in _counter_cache:
        _counter_cache[key] = Counter(metric_name, description, registry=registry)
    return _counter_cache[key]


def create_metrics_app(registry: CollectorRegistry = REGISTRY, endpoint: str | None = None) -> web.Application:
    endpoint = endpoint or settings.EXPORTER_ENDPOINT
    app = web.Application()
    requests_served = CounterWithParams(
        "livemetrics_snapshot_requests", "Snapshots served by the exporter", registry=registry
    )
    started = GaugeWithParams("livemetrics_exporter_start_time_seconds", "Exporter start time", registry=registry)
    started.set(time.time())

    async def data_handler(request):
        requests_served.inc()
        snapshot = json_snapshot(registry)
        logger.debug(f"Serving snapshot with {len(snapshot['metrics'])} metrics")
        return web.json_response(snapshot)

    async def health_handler(request):
        return web.json_response({"status": "healthy", "timestamp": time.time()})

    app.router.add_get(endpoint, data_handler)
    app.router.add_get("/health", health_handler)
    return app
