"""
Report generation for pattern match statistics.

Reads the StatsTracker aggregate and produces:
- a ranked plain-text report (pattern_report_<epoch-ms>.txt)
- a raw JSON export (pattern_stats_export_<epoch-ms>.json)
- top-N summaries for chat commands

Artifacts are never overwritten: a name collision gets a numeric suffix.
"""

import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from .models import PatternStatistics, PersistenceError, TopPatternEntry, format_timestamp
from .stats_tracker import StatsTracker
from ..infrastructure.prometheus_metrics import PatternMetricsCollector

logger = logging.getLogger(__name__)

TOP_BREAKDOWN_LIMIT = 3


class ReportGenerator:
    """Renders and exports the statistics aggregate."""

    def __init__(
        self,
        stats_tracker: StatsTracker,
        output_dir: str,
        metrics: Optional[PatternMetricsCollector] = None
    ):
        """
        Args:
            stats_tracker: Tracker whose aggregate is reported
            output_dir: Directory receiving report and export files
            metrics: Optional metrics collector for written artifacts
        """
        self.stats_tracker = stats_tracker
        self.output_dir = Path(output_dir)
        self.metrics = metrics

    def _sorted_patterns(self) -> List[Tuple[str, PatternStatistics]]:
        """Patterns by count descending; equal counts keep aggregate order."""
        return sorted(self.stats_tracker.patterns, key=lambda item: -item[1].count)

    def get_top_patterns(self, limit: int = 10) -> List[TopPatternEntry]:
        """
        Most matched patterns.

        Args:
            limit: Maximum number of entries

        Returns:
            Entries ordered by count, non-increasing
        """
        return [
            TopPatternEntry(pattern=pattern, count=stats.count, last_matched=stats.last_matched)
            for pattern, stats in self._sorted_patterns()[:max(limit, 0)]
        ]

    def render_report(self, generated_at: Optional[datetime] = None) -> str:
        """Render the full text report."""
        generated_at = generated_at or datetime.now(timezone.utc)
        sorted_patterns = self._sorted_patterns()

        lines = [
            "Pattern Match Statistics Report",
            "================================",
            "",
            f"Generated: {format_timestamp(generated_at)}",
            "",
            f"Total Patterns: {len(sorted_patterns)}",
            "",
        ]

        for rank, (pattern, stats) in enumerate(sorted_patterns, start=1):
            lines.append(f'{rank}. Pattern: "{pattern}" [{stats.count}]')
            lines.append(f"   Last Matched: {stats.last_matched}")
            lines.append("   Examples:")

            if stats.examples:
                lines.extend(f'   - "{example}"' for example in stats.examples)
            else:
                lines.append("   - No examples stored")

            top_channels = stats.top_channels(TOP_BREAKDOWN_LIMIT)
            if top_channels:
                lines.append("   Top Channels:")
                for channel_id, channel in top_channels:
                    lines.append(f"   - {channel.name} ({channel_id}): {channel.count} matches")

            top_users = stats.top_users(TOP_BREAKDOWN_LIMIT)
            if top_users:
                lines.append("   Top Users:")
                for user_id, user in top_users:
                    lines.append(f"   - {user.name} ({user_id}): {user.count} matches")

            lines.append("")

        return "\n".join(lines) + "\n"

    def generate_report(self) -> Optional[str]:
        """
        Write the text report to a new file.

        Returns:
            Path of the report file, or None if it could not be written
        """
        try:
            report_file = self._write_artifact("pattern_report", ".txt", self.render_report())
        except PersistenceError as e:
            logger.error(f"Error generating report: {e}")
            return None

        logger.info(f"Report generated at {report_file}")
        if self.metrics:
            self.metrics.record_artifact("report")
        return str(report_file)

    def export_stats(self) -> Optional[str]:
        """
        Write the raw aggregate to a new JSON file.

        Returns:
            Path of the export file, or None if it could not be written
        """
        try:
            content = json.dumps(self.stats_tracker.snapshot(), indent=2, ensure_ascii=False)
            export_file = self._write_artifact("pattern_stats_export", ".json", content)
        except PersistenceError as e:
            logger.error(f"Error exporting stats: {e}")
            return None

        logger.info(f"Stats exported to {export_file}")
        if self.metrics:
            self.metrics.record_artifact("export")
        return str(export_file)

    def _write_artifact(self, prefix: str, suffix: str, content: str) -> Path:
        """
        Create a uniquely named file and write content to it.

        Raises:
            PersistenceError: If the file cannot be created or written
        """
        stamp = int(time.time() * 1000)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            attempt = 0
            while True:
                name = f"{prefix}_{stamp}{suffix}" if attempt == 0 else f"{prefix}_{stamp}_{attempt}{suffix}"
                path = self.output_dir / name
                try:
                    # Exclusive create: an existing artifact is never overwritten
                    with open(path, 'x', encoding='utf-8') as f:
                        f.write(content)
                    return path
                except FileExistsError:
                    attempt += 1
        except OSError as e:
            raise PersistenceError(str(self.output_dir / f"{prefix}_{stamp}{suffix}"), str(e)) from e
