import pytest

from livemetrics.controller import DashboardController
from livemetrics.display import MemoryDisplay

from helpers.fakes import POLL, WINDOW, FakeClock, FakeSource


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def display():
    return MemoryDisplay()


@pytest.fixture
def make_controller(clock, display):
    def _make(source=None, **kwargs):
        kwargs.setdefault("window_ms", WINDOW)
        kwargs.setdefault("poll_interval_ms", POLL)
        return DashboardController(source=source or FakeSource(), display=display, clock=clock, **kwargs)

    return _make
