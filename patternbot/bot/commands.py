"""
Owner-only statistics commands.

Only the owner of the space a message comes from may run these:
    !pattern-report   write a ranked text report
    !export-stats     write the raw statistics as JSON
    !top-patterns     list the most matched patterns in chat

Anything else, or any message from someone else, returns None so the
message continues to normal pattern matching and the commands stay hidden.
"""

import logging
from typing import Optional

import pytz

from .models import InboundMessage, ResponseAction
from ..stats.models import parse_timestamp
from ..stats.report_generator import ReportGenerator

logger = logging.getLogger(__name__)

REPORT_COMMAND = "!pattern-report"
EXPORT_COMMAND = "!export-stats"
TOP_PATTERNS_COMMAND = "!top-patterns"


def format_local_time(timestamp: Optional[str], timezone_name: str = "UTC") -> str:
    """Render a snapshot timestamp in the given timezone for chat display."""
    if not timestamp:
        return "never"
    try:
        local = parse_timestamp(timestamp).astimezone(pytz.timezone(timezone_name))
    except (ValueError, pytz.UnknownTimeZoneError) as e:
        logger.debug(f"Could not localize timestamp {timestamp!r}: {e}")
        return timestamp
    return local.strftime("%Y-%m-%d %H:%M:%S %Z")


class OwnerCommandHandler:
    """Answers the statistics commands for the space owner."""

    def __init__(
        self,
        report_generator: ReportGenerator,
        top_patterns_limit: int = 10,
        display_timezone: str = "UTC"
    ):
        self.report_generator = report_generator
        self.top_patterns_limit = top_patterns_limit
        self.display_timezone = display_timezone
        self._commands = {
            REPORT_COMMAND: self._pattern_report,
            EXPORT_COMMAND: self._export_stats,
            TOP_PATTERNS_COMMAND: self._top_patterns,
        }

    @staticmethod
    def is_owner(message: InboundMessage) -> bool:
        """Whether the author owns the space the message was sent in."""
        return bool(message.space_owner_id) and message.author_id == message.space_owner_id

    def handle(self, message: InboundMessage) -> Optional[ResponseAction]:
        """
        Run a command if the message is one and the author may use it.

        Returns:
            Acknowledgement to send back, or None if this is not an owner command
        """
        if not self.is_owner(message):
            return None

        command = self._commands.get(message.content.lower())
        if command is None:
            return None

        return command(message)

    def _pattern_report(self, message: InboundMessage) -> ResponseAction:
        logger.info(f"Server owner {message.author_name} requested a pattern report")
        report_file = self.report_generator.generate_report()
        if not report_file:
            return ResponseAction(
                text="Failed to generate pattern report. Check console for errors.",
                kind="command"
            )
        return ResponseAction(
            title="Pattern Match Report Generated",
            text=f"Report has been generated and saved to: `{report_file}`",
            footer=f"Use {EXPORT_COMMAND} to export raw data",
            kind="command"
        )

    def _export_stats(self, message: InboundMessage) -> ResponseAction:
        logger.info(f"Server owner {message.author_name} requested stats export")
        export_file = self.report_generator.export_stats()
        if not export_file:
            return ResponseAction(
                text="Failed to export pattern statistics. Check console for errors.",
                kind="command"
            )
        return ResponseAction(
            title="Pattern Statistics Exported",
            text=f"Statistics have been exported to: `{export_file}`",
            footer=f"Use {REPORT_COMMAND} for a formatted report",
            kind="command"
        )

    def _top_patterns(self, message: InboundMessage) -> ResponseAction:
        logger.info(f"Server owner {message.author_name} requested top patterns")
        top_patterns = self.report_generator.get_top_patterns(self.top_patterns_limit)

        if not top_patterns:
            return ResponseAction(text="No pattern statistics available yet.", kind="command")

        lines = [f"Top {self.top_patterns_limit} most matched patterns:", ""]
        for rank, entry in enumerate(top_patterns, start=1):
            lines.append(f"**{rank}.** Pattern: `{entry.pattern}` [{entry.count}]")
            lines.append(f"   Last matched: {format_local_time(entry.last_matched, self.display_timezone)}")

        return ResponseAction(
            title="Pattern Match Statistics",
            text="\n".join(lines),
            footer=f"Use {REPORT_COMMAND} for a full report",
            kind="command"
        )
