"""Command line entry point: ``livemetrics watch`` and ``livemetrics serve``."""

import argparse
import asyncio
import sys

from loguru import logger
from rich.console import Console

from . import settings
from .controller import DashboardController
from .display import TerminalDisplay
from .exporter import create_metrics_app
from .source import HttpSnapshotSource
from .web import AppServer, WebDisplay, create_app


def configure_logging(quiet: bool, level: str | None = None) -> None:
    """Route loguru output. While the terminal dashboard owns the screen only a log file may receive records."""
    logger.remove()
    level = level or settings.LOG_LEVEL
    if settings.LOG_FILE:
        logger.add(settings.LOG_FILE, level=level, rotation="10 MB")
    if quiet:
        if not settings.LOG_FILE:
            logger.add(lambda _: None, level=level)
    else:
        logger.add(sys.stderr, level=level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="livemetrics", description="Live sliding-window metrics dashboard.")
    parser.add_argument("--log-level", dest="log_level", default=None, help="Loguru level (default: LOG_LEVEL).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    watch = subparsers.add_parser("watch", help="Poll a snapshot endpoint and chart every metric.")
    watch.add_argument("url", nargs="?", default=settings.SNAPSHOT_URL, help="Snapshot JSON endpoint.")
    watch.add_argument("--interval", type=int, default=settings.POLL_INTERVAL_MS, help="Poll interval in ms.")
    watch.add_argument("--window", type=int, default=settings.WINDOW_MS, help="Window per chart in ms.")
    watch.add_argument("--timeout", type=float, default=settings.FETCH_TIMEOUT_S, help="Fetch timeout in seconds.")
    watch.add_argument(
        "--web",
        dest="web",
        action="store_true",
        help="Serve the charts as an auto-refreshing web page instead of the terminal dashboard.",
    )
    watch.add_argument("--host", default=settings.DASHBOARD_HOST, help="Web dashboard host.")
    watch.add_argument("--port", type=int, default=settings.DASHBOARD_PORT, help="Web dashboard port.")

    serve = subparsers.add_parser("serve", help="Export this process's prometheus metrics as a JSON snapshot.")
    serve.add_argument("--host", default=settings.EXPORTER_HOST)
    serve.add_argument("--port", type=int, default=settings.EXPORTER_PORT)
    serve.add_argument("--endpoint", default=settings.EXPORTER_ENDPOINT)
    return parser


async def watch(args: argparse.Namespace) -> None:
    source = HttpSnapshotSource(args.url, timeout=args.timeout)
    server = None
    if args.web:
        display = WebDisplay(refresh_seconds=args.interval / 1000)
        server = AppServer(create_app(display), args.host, args.port)
        await server.start()
    else:
        display = TerminalDisplay(source_label=args.url)

    controller = DashboardController(
        source=source, display=display, window_ms=args.window, poll_interval_ms=args.interval
    )
    await controller.start()
    try:
        if isinstance(display, TerminalDisplay):
            await display.run()
        else:
            await asyncio.Event().wait()
    finally:
        await controller.stop()
        await source.close()
        if server is not None:
            await server.stop()


async def serve(args: argparse.Namespace) -> None:
    server = AppServer(create_metrics_app(endpoint=args.endpoint), args.host, args.port)
    await server.start()
    logger.info(f"Snapshot endpoint: http://{args.host}:{args.port}{args.endpoint}")
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    terminal_dashboard = args.command == "watch" and not args.web
    configure_logging(quiet=terminal_dashboard, level=args.log_level)

    try:
        if args.command == "watch":
            asyncio.run(watch(args))
        else:
            asyncio.run(serve(args))
    except KeyboardInterrupt:
        Console().print("[bold yellow]Stopped.[/]")


if __name__ == "__main__":
    main()
