"""
Display hosts for rendered scenes.

The controller only ever talks to a host through ``attach`` (first scene for a
metric) and ``replace`` (every later scene). Hosts own the actual screen and
decide how a scene is drawn.
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol

from blessed import Terminal
from loguru import logger
from rich.align import Align
from rich.columns import Columns
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from .chart import render_text
from .scene import Scene


class Display(Protocol):
    def attach(self, name: str, scene: Scene) -> None:
        """Show ``scene`` for a metric that has no chart yet."""
        ...

    def replace(self, name: str, scene: Scene) -> None:
        """Swap the chart for ``name`` with ``scene`` in its entirety."""
        ...


class MemoryDisplay:
    """Keeps the latest scene per metric in attach order. Used headless and in tests."""

    def __init__(self) -> None:
        self.scenes: dict[str, Scene] = {}
        self.attached: list[str] = []
        self.replaced: list[str] = []

    def attach(self, name: str, scene: Scene) -> None:
        if name in self.scenes:
            raise KeyError(f"Scene for {name!r} is already attached")
        self.scenes[name] = scene
        self.attached.append(name)

    def replace(self, name: str, scene: Scene) -> None:
        if name not in self.scenes:
            raise KeyError(f"No scene attached for {name!r}")
        self.scenes[name] = scene
        self.replaced.append(name)


class TerminalDisplay(MemoryDisplay):
    """Rich-based live terminal dashboard with one panel per metric."""

    def __init__(self, source_label: str = "", refresh_interval: float = 1.0):
        super().__init__()
        self.term = Terminal()
        self.console = Console()
        self.layout = Layout()
        self.source_label = source_label
        self.refresh_interval = refresh_interval
        self.start_time = time.time()
        self.last_update: float | None = None
        self.setup_layout()

    def setup_layout(self):
        self.layout.split(
            Layout(name="header", size=3),
            Layout(name="charts", ratio=1),
            Layout(name="footer", size=3),
        )

    def attach(self, name: str, scene: Scene) -> None:
        super().attach(name, scene)
        self.last_update = time.time()

    def replace(self, name: str, scene: Scene) -> None:
        super().replace(name, scene)
        self.last_update = time.time()

    def chart_columns(self) -> int:
        """Chart width in characters, sized so two panels fit side by side."""
        try:
            terminal_width = self.term.width or 120
            return max(30, terminal_width // 2 - 16)
        except Exception:
            return 44

    def generate_header(self):
        runtime = int(time.time() - self.start_time)
        if self.last_update is None:
            status = "Waiting for data..."
        else:
            status = f"Last update {time.strftime('%H:%M:%S', time.localtime(self.last_update))}"
        text = Text(f"{self.source_label}  ·  {status}  ·  up {runtime // 60:02d}:{runtime % 60:02d}", style="bold")
        return Panel(Align.center(text), style="bold white on black", padding=(0, 1))

    def generate_charts(self):
        if not self.scenes:
            return Panel("Waiting for data...", title="Metrics", border_style="cyan")
        columns = self.chart_columns()
        panels = [
            Panel(
                Text(render_text(scene, columns=columns), no_wrap=True, overflow="ignore"),
                title=name,
                border_style="green",
                width=columns + 4,
                padding=(0, 1),
            )
            for name, scene in self.scenes.items()
        ]
        return Columns(panels)

    def generate_footer(self):
        footer_text = Text("Press Ctrl+C to exit", style="bold white on blue")
        return Panel(Align.center(footer_text), style="bold white on black", padding=(0, 1))

    def render(self):
        self.layout["header"].update(self.generate_header())
        self.layout["charts"].update(self.generate_charts())
        self.layout["footer"].update(self.generate_footer())
        return self.layout

    async def run(self, stop_event: asyncio.Event | None = None):
        """Redraw the layout until cancelled or ``stop_event`` is set."""
        stop_event = stop_event or asyncio.Event()
        try:
            with Live(self.render(), console=self.console, refresh_per_second=2, screen=True) as live:
                while not stop_event.is_set():
                    try:
                        live.update(self.render())
                    except Exception as e:
                        logger.exception(f"Error rendering dashboard: {e}")
                        live.update(Panel(f"Dashboard rendering error: {e}", style="red"))
                    await asyncio.sleep(self.refresh_interval)
        except KeyboardInterrupt:
            self.console.print("\n[bold yellow]Dashboard stopped.[/]")
