"""
Tests for bot configuration loading.

Tests cover:
- Defaults
- JSON file loading (bot section, unknown keys, missing file)
- Environment overrides
- Validation and safe defaults
"""

import json
import logging
import pytest

from patternbot.infrastructure.config import (
    BotConfig,
    load_bot_config,
    validate_bot_config,
    get_validated_bot_config,
)


ENV_VARS = [
    "PATTERNBOT_PATTERNS_DIR",
    "PATTERNBOT_DATA_DIR",
    "PATTERNBOT_REPORT_DIR",
    "PATTERNBOT_LOG_DIR",
    "PATTERNBOT_LOG_LEVEL",
    "PATTERNBOT_DIRECTED_THRESHOLD",
    "PATTERNBOT_CASUAL_THRESHOLD",
    "PATTERNBOT_DISPLAY_TIMEZONE",
    "PATTERNBOT_METRICS_PORT",
    "DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# Test defaults
def test_defaults():
    config = load_bot_config()

    assert config.directed_threshold == 0.6
    assert config.casual_threshold == 0.85
    assert config.min_content_length == 3
    assert config.max_examples == 5
    assert config.patterns_dir == "questions/minecraft"
    assert config.validate() == []


def test_paths_derive_from_data_dir():
    config = BotConfig(data_dir="data")

    assert str(config.stats_path).replace("\\", "/") == "data/pattern_stats.json"
    assert str(config.reports_path) == "data"
    assert str(BotConfig(data_dir="data", report_dir="reports").reports_path) == "reports"


# Test JSON loading
def test_json_bot_section(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bot": {"casual_threshold": 0.9, "max_examples": 3}}), encoding="utf-8")

    config = load_bot_config(str(path))

    assert config.casual_threshold == 0.9
    assert config.max_examples == 3


def test_json_unknown_keys_ignored(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"colour": "blue", "debug": True}), encoding="utf-8")

    config = load_bot_config(str(path))

    assert config.debug is True
    assert not hasattr(config, "colour")
    assert "Ignoring unknown configuration key: colour" in caplog.text


def test_json_string_numbers_are_coerced(tmp_path):
    """Test that quoted numbers and flags in JSON become typed values."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bot": {
        "directed_threshold": "0.5",
        "max_examples": "3",
        "debug": "false",
    }}), encoding="utf-8")

    config = get_validated_bot_config(str(path))

    assert config.directed_threshold == 0.5
    assert config.max_examples == 3
    assert config.debug is False


def test_json_null_and_bad_numbers_are_skipped(tmp_path, caplog):
    """Test that values that cannot be converted keep the default."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bot": {
        "directed_threshold": None,
        "casual_threshold": "high",
        "metrics_port": True,
        "patterns_dir": 42,
        "log_dir": None,
    }}), encoding="utf-8")

    config = get_validated_bot_config(str(path))

    assert config.directed_threshold == 0.6
    assert config.casual_threshold == 0.85
    assert config.metrics_port == 0
    assert config.patterns_dir == "questions/minecraft"
    assert config.log_dir is None
    assert "Invalid casual_threshold value" in caplog.text


def test_missing_or_invalid_json_keeps_defaults(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")

    assert load_bot_config(str(tmp_path / "missing.json")) == BotConfig()
    assert load_bot_config(str(bad)) == BotConfig()


# Test environment
def test_env_overrides_json(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"bot": {"directed_threshold": 0.5}}), encoding="utf-8")
    monkeypatch.setenv("PATTERNBOT_DIRECTED_THRESHOLD", "0.7")
    monkeypatch.setenv("PATTERNBOT_PATTERNS_DIR", "questions/other")
    monkeypatch.setenv("PATTERNBOT_LOG_LEVEL", "debug")
    monkeypatch.setenv("DEBUG", "true")

    config = load_bot_config(str(path))

    assert config.directed_threshold == 0.7
    assert config.patterns_dir == "questions/other"
    assert config.log_level == "DEBUG"
    assert config.debug is True


def test_empty_log_dir_disables_file_logging(monkeypatch):
    monkeypatch.setenv("PATTERNBOT_LOG_DIR", "")

    assert load_bot_config().log_dir is None


def test_invalid_env_number_is_ignored(monkeypatch):
    monkeypatch.setenv("PATTERNBOT_CASUAL_THRESHOLD", "high")
    monkeypatch.setenv("PATTERNBOT_METRICS_PORT", "http")

    config = load_bot_config()

    assert config.casual_threshold == 0.85
    assert config.metrics_port == 0


# Test validation
def test_validation_errors():
    config = BotConfig(
        directed_threshold=0,
        casual_threshold=1.5,
        min_content_length=0,
        display_timezone="Mars/Olympus",
        log_level="LOUD",
    )

    errors = config.validate()

    assert len(errors) == 5
    assert any("Unknown display_timezone" in e for e in errors)


def test_directed_above_casual_is_invalid():
    errors = BotConfig(directed_threshold=0.9, casual_threshold=0.8).validate()

    assert errors == ["directed_threshold should not exceed casual_threshold"]


def test_validate_logs_errors(caplog):
    config = BotConfig(max_examples=-1)
    test_logger = logging.getLogger("test_config")

    with caplog.at_level(logging.ERROR, logger="test_config"):
        errors = validate_bot_config(config, test_logger)

    assert len(errors) == 1
    assert "max_examples cannot be negative" in caplog.text


def test_safe_defaults_replace_invalid_values(monkeypatch):
    monkeypatch.setenv("PATTERNBOT_DIRECTED_THRESHOLD", "2.0")
    monkeypatch.setenv("PATTERNBOT_DISPLAY_TIMEZONE", "Nowhere/Land")
    monkeypatch.setenv("PATTERNBOT_CASUAL_THRESHOLD", "0.95")

    config = get_validated_bot_config()

    assert config.directed_threshold == 0.6
    assert config.casual_threshold == 0.95
    assert config.display_timezone == "UTC"
    assert config.validate() == []
