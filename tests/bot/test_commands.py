"""
Tests for OwnerCommandHandler.

Tests cover:
- Owner-only access
- Report, export and top pattern commands
- Failure acknowledgements
- Unknown commands falling through
- Timestamp localization for chat display
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock

from patternbot.bot.commands import (
    OwnerCommandHandler,
    REPORT_COMMAND,
    EXPORT_COMMAND,
    TOP_PATTERNS_COMMAND,
    format_local_time,
)
from patternbot.bot.models import InboundMessage
from patternbot.stats.models import MatchEvent
from patternbot.stats.report_generator import ReportGenerator
from patternbot.stats.stats_tracker import StatsTracker


def make_message(content, author_id="owner", owner_id="owner"):
    return InboundMessage(
        content=content,
        author_id=author_id,
        author_name="alice",
        channel_id="c1",
        channel_name="general",
        space_id="g1",
        space_name="Minecraft",
        space_owner_id=owner_id,
    )


@pytest.fixture
def tracker(tmp_path):
    tracker = StatsTracker(str(tmp_path / "stats.json"))
    tracker.open()
    return tracker


@pytest.fixture
def report_generator(tracker, tmp_path):
    return ReportGenerator(tracker, str(tmp_path / "reports"))


@pytest.fixture
def commands(report_generator):
    return OwnerCommandHandler(report_generator)


def record(tracker, pattern, times=1):
    for _ in range(times):
        tracker.record(MatchEvent(
            content="msg", pattern=pattern, confidence=1.0,
            channel_id="c1", channel_name="general", user_id="u1", user_name="steve",
            timestamp=datetime(2025, 11, 1, 12, 0, 0, tzinfo=timezone.utc),
        ))


# Test access control
@pytest.mark.parametrize("command", [REPORT_COMMAND, EXPORT_COMMAND, TOP_PATTERNS_COMMAND])
def test_non_owner_gets_nothing(commands, command):
    """Test that commands from anyone but the owner are ignored silently."""
    assert commands.handle(make_message(command, author_id="someone")) is None


def test_direct_messages_have_no_owner(commands):
    assert commands.handle(make_message(TOP_PATTERNS_COMMAND, owner_id=None)) is None


def test_unknown_command_falls_through(commands):
    assert commands.handle(make_message("!self-destruct")) is None
    assert commands.handle(make_message("how do i craft a table")) is None


def test_commands_are_case_insensitive(commands):
    assert commands.handle(make_message("!TOP-PATTERNS")) is not None


def test_command_must_be_exact_content(commands):
    """Test that surrounding whitespace makes a message ordinary text."""
    assert commands.handle(make_message(" !top-patterns ")) is None
    assert commands.handle(make_message("!top-patterns please")) is None


# Test report command
def test_pattern_report_acknowledges_file(commands, tracker):
    record(tracker, "table")

    action = commands.handle(make_message(REPORT_COMMAND))

    assert action.kind == "command"
    assert action.title == "Pattern Match Report Generated"
    assert "pattern_report_" in action.text
    assert EXPORT_COMMAND in action.footer


def test_pattern_report_failure_message():
    generator = Mock(spec=ReportGenerator)
    generator.generate_report.return_value = None

    action = OwnerCommandHandler(generator).handle(make_message(REPORT_COMMAND))

    assert action.text == "Failed to generate pattern report. Check console for errors."


# Test export command
def test_export_acknowledges_file(commands, tracker):
    record(tracker, "table")

    action = commands.handle(make_message(EXPORT_COMMAND))

    assert action.title == "Pattern Statistics Exported"
    assert "pattern_stats_export_" in action.text


def test_export_failure_message():
    generator = Mock(spec=ReportGenerator)
    generator.export_stats.return_value = None

    action = OwnerCommandHandler(generator).handle(make_message(EXPORT_COMMAND))

    assert action.text == "Failed to export pattern statistics. Check console for errors."


# Test top patterns command
def test_top_patterns_empty(commands):
    action = commands.handle(make_message(TOP_PATTERNS_COMMAND))

    assert action.text == "No pattern statistics available yet."


def test_top_patterns_lists_ranked_entries(commands, tracker):
    record(tracker, "rare")
    record(tracker, "common", times=3)

    action = commands.handle(make_message(TOP_PATTERNS_COMMAND))

    assert action.text.startswith("Top 10 most matched patterns:")
    assert action.text.index("**1.** Pattern: `common` [3]") < action.text.index("**2.** Pattern: `rare` [1]")
    assert "Last matched: 2025-11-01 12:00:00 UTC" in action.text


def test_top_patterns_respects_limit(report_generator, tracker):
    for name in ("a", "b", "c"):
        record(tracker, name)

    action = OwnerCommandHandler(report_generator, top_patterns_limit=2).handle(make_message(TOP_PATTERNS_COMMAND))

    assert "**2.**" in action.text
    assert "**3.**" not in action.text


# Test time formatting
def test_format_local_time_converts_timezone():
    assert format_local_time("2025-11-01T12:00:00.000Z", "America/New_York") == "2025-11-01 08:00:00 EDT"


def test_format_local_time_handles_missing_and_bad_values():
    assert format_local_time(None) == "never"
    assert format_local_time("yesterday") == "yesterday"
