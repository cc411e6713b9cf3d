import pytest

from livemetrics import settings
from livemetrics.cli import build_parser


def test_watch_defaults_come_from_settings():
    args = build_parser().parse_args(["watch"])
    assert args.url == settings.SNAPSHOT_URL
    assert args.interval == settings.POLL_INTERVAL_MS
    assert args.window == settings.WINDOW_MS
    assert args.web is False


def test_watch_overrides():
    args = build_parser().parse_args(
        ["watch", "http://relay:3000/api/relay/metrics/data.json", "--interval", "5000", "--window", "60000", "--web"]
    )
    assert args.url.startswith("http://relay:3000")
    assert args.interval == 5000
    assert args.window == 60000
    assert args.web is True


def test_serve_endpoint_option():
    args = build_parser().parse_args(["serve", "--port", "4000", "--endpoint", "/data.json"])
    assert args.command == "serve"
    assert args.port == 4000
    assert args.endpoint == "/data.json"


def test_command_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_check_window_rejects_non_positive_values():
    with pytest.raises(ValueError):
        settings.check_window(0, 10_000)
