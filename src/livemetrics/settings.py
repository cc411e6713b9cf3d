import os

from dotenv import load_dotenv
from loguru import logger


DOTENV_PATH = os.getenv("DOTENV_PATH", ".env")
if os.path.exists(DOTENV_PATH):
    load_dotenv(dotenv_path=DOTENV_PATH)
else:
    logger.debug(f"No .env file found at {DOTENV_PATH}, using defaults/environment variables")


# Snapshot source
SNAPSHOT_URL = os.getenv("SNAPSHOT_URL", "http://localhost:3000/api/relay/metrics/data.json")
FETCH_TIMEOUT_S = float(os.getenv("FETCH_TIMEOUT_S", "8"))

# Window / polling (milliseconds)
WINDOW_MS = int(os.getenv("WINDOW_MS", str(5 * 60 * 1000)))  # graphs show 5 minutes worth of data
POLL_INTERVAL_MS = int(os.getenv("POLL_INTERVAL_MS", str(10 * 1000)))  # update every 10 seconds

# Chart geometry
CHART_WIDTH = int(os.getenv("CHART_WIDTH", "350"))
CHART_HEIGHT = int(os.getenv("CHART_HEIGHT", "200"))

# Web dashboard host
DASHBOARD_HOST = os.getenv("DASHBOARD_HOST", "127.0.0.1")
DASHBOARD_PORT = int(os.getenv("DASHBOARD_PORT", 8010))

# Snapshot exporter
EXPORTER_HOST = os.getenv("EXPORTER_HOST", "0.0.0.0")
EXPORTER_PORT = int(os.getenv("EXPORTER_PORT", 3000))
EXPORTER_ENDPOINT = os.getenv("EXPORTER_ENDPOINT", "/api/relay/metrics/data.json")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE") or None


def check_window(window_ms: int, poll_interval_ms: int) -> None:
    """Validate the window/poll relationship, warning when the window holds few points."""
    if window_ms <= 0 or poll_interval_ms <= 0:
        raise ValueError("window and poll interval must be positive")
    if window_ms < 10 * poll_interval_ms:
        logger.warning(
            f"Window of {window_ms}ms is less than 10x the poll interval ({poll_interval_ms}ms); "
            f"charts will show at most {window_ms // poll_interval_ms + 1} points"
        )


check_window(WINDOW_MS, POLL_INTERVAL_MS)
