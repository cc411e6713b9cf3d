"""Browser host: serves the current scenes as an auto-refreshing HTML page."""

from __future__ import annotations

import time
from html import escape
from typing import Optional

from aiohttp import web
from loguru import logger

from . import settings
from .display import MemoryDisplay
from .scene import Scene

PAGE_STYLE = """
body { font-family: sans-serif; background: #fafafa; margin: 1em; }
.graphs { display: flex; flex-wrap: wrap; gap: 1em; }
.graph { width: 350px; height: 200px; background: white; border: 1px solid #ddd; }
.graph .line { stroke: steelblue; stroke-width: 1.5; }
.graph .axis path, .graph .axis line { stroke: #999; fill: none; }
.graph .axis text { font-size: 10px; fill: #555; }
.graph .value { font-size: 24px; fill: #333; }
.graph .title { font-size: 12px; fill: #777; }
"""


class WebDisplay(MemoryDisplay):
    """Keeps the latest SVG per metric; the page is rebuilt on every request."""

    def __init__(self, refresh_seconds: float | None = None):
        super().__init__()
        self.svgs: dict[str, str] = {}
        self.refresh_seconds = refresh_seconds or settings.POLL_INTERVAL_MS / 1000

    def attach(self, name: str, scene: Scene) -> None:
        super().attach(name, scene)
        self.svgs[name] = scene.to_svg()

    def replace(self, name: str, scene: Scene) -> None:
        super().replace(name, scene)
        self.svgs[name] = scene.to_svg()

    def page(self) -> str:
        graphs = "".join(self.svgs.values()) or "<p>Waiting for data...</p>"
        return (
            "<!doctype html><html><head><meta charset=\"utf-8\">"
            f'<meta http-equiv="refresh" content="{self.refresh_seconds:g}">'
            f"<title>Metrics</title><style>{PAGE_STYLE}</style></head>"
            f'<body><div class="main"><div class="graphs">{graphs}</div></div></body></html>'
        )


def create_app(display: WebDisplay) -> web.Application:
    app = web.Application()

    async def index_handler(request):
        return web.Response(text=display.page(), content_type="text/html")

    async def chart_handler(request):
        name = request.match_info["name"]
        svg = display.svgs.get(name)
        if svg is None:
            raise web.HTTPNotFound(text=f"Unknown metric: {escape(name)}")
        return web.Response(text=svg, content_type="image/svg+xml")

    async def health_handler(request):
        return web.json_response({"status": "healthy", "metrics": len(display.svgs), "timestamp": time.time()})

    app.router.add_get("/", index_handler)
    app.router.add_get("/charts/{name}.svg", chart_handler)
    app.router.add_get("/health", health_handler)
    return app


class AppServer:
    """Runs an aiohttp application on a TCP site until stopped."""

    def __init__(self, app: web.Application, host: str, port: int):
        self.app = app
        self.host = host
        self.port = port
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

    async def start(self) -> None:
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        self.site = web.TCPSite(self.runner, self.host, self.port)
        await self.site.start()
        logger.info(f"Serving on http://{self.host}:{self.port}")

    async def stop(self) -> None:
        if self.site:
            await self.site.stop()
            self.site = None
        if self.runner:
            await self.runner.cleanup()
            logger.info(f"Server on {self.host}:{self.port} cleaned up.")
            self.runner = None
