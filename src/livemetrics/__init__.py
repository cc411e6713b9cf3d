"""
Live sliding-window metrics dashboard.

A ``DashboardController`` polls a snapshot endpoint, keeps a bounded time
window of samples per metric and hands freshly rendered scenes to a display
host (terminal or browser) after every tick.
"""

from .controller import DashboardController, MetricState
from .renderer import render
from .scene import Scene
from .series import Sample, Series

__all__ = [
    "DashboardController",
    "MetricState",
    "Sample",
    "Scene",
    "Series",
    "render",
]
