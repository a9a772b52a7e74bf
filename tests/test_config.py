"""Tests for settings resolution from environment and overrides."""

import logging
from datetime import datetime
from pathlib import Path

import pytest

from slot_notifier.config import (
    DEFAULT_INTERVAL_SECONDS,
    LoggingConfig,
    load_logging_config,
    load_settings,
    one_year_from,
    parse_duration,
    parse_time_of_day,
)
from slot_notifier.errors import ConfigError
from slot_notifier.models import NotifierKind


NOW = datetime(2026, 10, 19, 14, 5)


@pytest.mark.parametrize(
    "text, seconds",
    [("60", 60.0), ("1.5", 1.5), ("90s", 90.0), ("5m", 300.0), ("1h30m", 5400.0), ("250ms", 0.25)],
)
def test_parse_duration(text, seconds):
    assert parse_duration(text) == pytest.approx(seconds)


@pytest.mark.parametrize("text", ["", "abc", "5x", "m5", "10s5"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_parse_time_of_day():
    assert parse_time_of_day("08:30") == 510
    assert parse_time_of_day("23:59") == 1439
    with pytest.raises(ValueError):
        parse_time_of_day("24:00")


def test_one_year_from_handles_leap_day():
    assert one_year_from(datetime(2028, 2, 29, 9, 0)) == datetime(2029, 3, 1, 9, 0)
    assert one_year_from(NOW) == datetime(2027, 10, 19, 14, 5)


def test_minimal_push_settings_use_defaults():
    settings = load_settings({"LOCATION_ID": "5140", "NOTIFIER": "push", "NTFY_TOPIC": "slots"}, now=NOW)

    assert settings.monitor.location_id == "5140"
    assert settings.monitor.interval_seconds == DEFAULT_INTERVAL_SECONDS
    assert settings.notifier.kind is NotifierKind.push
    assert settings.notifier.topic == "slots"
    assert settings.constraints.cutoff == one_year_from(NOW)
    assert settings.constraints.earliest_minutes is None
    assert settings.constraints.latest_minutes is None


def test_environment_is_read(monkeypatch):
    monkeypatch.setenv("LOCATION_ID", "7")
    monkeypatch.setenv("NOTIFIER", "system")
    monkeypatch.setenv("CHECK_INTERVAL", "5m")
    monkeypatch.setenv("BEFORE_DATE", "2026-12-01")
    monkeypatch.setenv("EARLIEST_TIME", "08:00")
    monkeypatch.setenv("LATEST_TIME", "17:30")
    monkeypatch.setenv("SLOTS_LIMIT", "3")

    settings = load_settings(now=NOW)

    assert settings.notifier.kind is NotifierKind.system
    assert settings.monitor.interval_seconds == 300.0
    assert settings.constraints.cutoff == datetime(2026, 12, 1)
    assert settings.constraints.earliest_minutes == 480
    assert settings.constraints.latest_minutes == 1050
    assert settings.api.limit == 3


def test_overrides_win_over_environment(monkeypatch):
    monkeypatch.setenv("LOCATION_ID", "7")
    monkeypatch.setenv("NOTIFIER", "system")

    settings = load_settings({"LOCATION_ID": "8", "NOTIFIER": None}, now=NOW)

    assert settings.monitor.location_id == "8"
    assert settings.notifier.kind is NotifierKind.system


def test_app_is_alias_for_push():
    settings = load_settings({"LOCATION_ID": "1", "NOTIFIER": "app", "NTFY_TOPIC": "t"}, now=NOW)

    assert settings.notifier.kind is NotifierKind.push


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"NOTIFIER": "system"}, "Location ID"),
        ({"LOCATION_ID": "1"}, "Notifier type"),
        ({"LOCATION_ID": "1", "NOTIFIER": "email"}, "Unknown notifier"),
        ({"LOCATION_ID": "1", "NOTIFIER": "push"}, "topic"),
    ],
)
def test_missing_required_options(overrides, message):
    with pytest.raises(ConfigError, match=message):
        load_settings(overrides, now=NOW)


@pytest.mark.parametrize(
    "name, value",
    [
        ("CHECK_INTERVAL", "soon"),
        ("CHECK_INTERVAL", "0s"),
        ("CHECK_INTERVAL", "nan"),
        ("CHECK_INTERVAL", "inf"),
        ("CHECK_INTERVAL", "1e400"),
        ("BEFORE_DATE", "next week"),
        ("EARLIEST_TIME", "25:00"),
        ("LATEST_TIME", "7pm"),
        ("SLOTS_LIMIT", "0"),
    ],
)
def test_invalid_optional_values_fall_back(name, value, caplog):
    caplog.set_level(logging.WARNING, logger="slot_notifier.config")

    settings = load_settings({"LOCATION_ID": "1", "NOTIFIER": "system", name: value}, now=NOW)

    assert settings.monitor.interval_seconds == DEFAULT_INTERVAL_SECONDS
    assert settings.constraints.cutoff == one_year_from(NOW)
    assert settings.constraints.earliest_minutes is None
    assert settings.constraints.latest_minutes is None
    assert settings.api.limit == 10
    assert name in caplog.text


def test_inverted_window_is_kept_but_disabled():
    settings = load_settings(
        {"LOCATION_ID": "1", "NOTIFIER": "system", "EARLIEST_TIME": "12:00", "LATEST_TIME": "10:00"},
        now=NOW,
    )

    assert settings.constraints.earliest_minutes == 720
    assert settings.constraints.time_window == (None, None)


def test_logging_config_overrides(tmp_path):
    cfg = load_logging_config({"LOGS_DIR": str(tmp_path), "LOG_LEVEL": "debug"})

    assert cfg.logs_dir == Path(tmp_path)
    assert cfg.log_level == "debug"


def test_logs_dir_defaults_to_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert LoggingConfig().logs_dir == tmp_path / "logs"
    assert load_logging_config().logs_dir == tmp_path / "logs"
