"""
Statistics tracker for accepted pattern matches.

Every accepted match is folded into a per-pattern aggregate which is written
through to a JSON snapshot after each mutation. The snapshot is replaced as
a whole through a temporary file in the same directory, so an interrupted
write leaves the previous snapshot intact; there is no append log.

Lifecycle:
    tracker = StatsTracker("logs/pattern_stats.json")
    tracker.open()      # load existing snapshot or start empty
    tracker.record(event)
    tracker.close()     # final flush
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, ItemsView, Optional

from .models import (
    MatchEvent,
    PatternStatistics,
    PersistenceError,
    NamedCount,
    format_timestamp,
)
from ..infrastructure.logging_setup import log_pattern
from ..infrastructure.prometheus_metrics import PatternMetricsCollector

logger = logging.getLogger(__name__)


class StatsTracker:
    """
    Durable aggregate of pattern match statistics.

    Not thread-safe: events must be recorded one at a time by a single owner.
    """

    def __init__(
        self,
        stats_path: str,
        max_examples: int = 5,
        metrics: Optional[PatternMetricsCollector] = None
    ):
        """
        Initialize the tracker.

        Args:
            stats_path: Path of the JSON snapshot file
            max_examples: Example messages kept per pattern
            metrics: Optional metrics collector for persistence failures
        """
        self.stats_path = Path(stats_path)
        self.max_examples = max_examples
        self.metrics = metrics
        self._stats: Dict[str, PatternStatistics] = {}
        self._opened = False

    def __len__(self) -> int:
        return len(self._stats)

    @property
    def patterns(self) -> ItemsView[str, PatternStatistics]:
        """(pattern, statistics) pairs in aggregate order."""
        return self._stats.items()

    def get(self, pattern: str) -> Optional[PatternStatistics]:
        return self._stats.get(pattern)

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """The whole aggregate in its serialized form."""
        return {pattern: stats.to_dict() for pattern, stats in self._stats.items()}

    def open(self) -> None:
        """
        Load the existing snapshot.

        A missing snapshot is initialized as an empty file; an unreadable one
        is logged and the tracker starts empty.
        """
        self._opened = True
        self._stats = {}

        if not self.stats_path.exists():
            self.save()
            return

        try:
            with open(self.stats_path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading pattern stats: {e}")
            return

        for pattern, entry in raw.items():
            try:
                self._stats[pattern] = PatternStatistics.from_dict(entry)
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping unreadable statistics for pattern {pattern!r}: {e}")

        logger.info(f"Loaded {len(self._stats)} pattern statistics")

    def close(self) -> None:
        """Flush the aggregate one last time."""
        if self._opened:
            self.save()
            self._opened = False

    def record(self, event: MatchEvent) -> PatternStatistics:
        """
        Fold an accepted match into the aggregate and persist it.

        A failed write is logged and does not undo the in-memory update.

        Args:
            event: The accepted match

        Returns:
            The updated statistics for the event's pattern
        """
        stats = self._stats.get(event.pattern)
        if stats is None:
            stats = PatternStatistics()
            self._stats[event.pattern] = stats

        stats.count += 1
        stats.last_matched = format_timestamp(event.timestamp)

        channel = stats.channels.setdefault(event.channel_id, NamedCount(name=event.channel_name))
        channel.count += 1

        user = stats.users.setdefault(event.user_id, NamedCount(name=event.user_name))
        user.count += 1

        if len(stats.examples) < self.max_examples:
            stats.examples.append(event.content)

        log_pattern(
            logger,
            f'Pattern matched: "{event.pattern}" | User: {event.user_name} | '
            f'Channel: {event.channel_name} | Guild: {event.space_name or "Direct Message"} | '
            f'Confidence: {event.confidence:.2f} | Message: "{event.content}"',
            pattern=event.pattern,
            user_id=event.user_id,
            channel_id=event.channel_id,
            space_id=event.space_id or "DM",
            confidence=round(event.confidence, 4),
        )

        self.save()
        return stats

    def save(self) -> bool:
        """
        Write the whole aggregate to the snapshot file.

        Returns:
            True if written, False if the write failed
        """
        try:
            self._write_snapshot()
            return True
        except PersistenceError as e:
            logger.error(f"Error saving pattern stats: {e}")
            if self.metrics:
                self.metrics.record_persist_failure()
            return False

    def _write_snapshot(self) -> None:
        """
        Write the snapshot to a temporary file, then move it into place.

        Raises:
            PersistenceError: If the snapshot cannot be written
        """
        temp_name = None
        try:
            self.stats_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                'w',
                encoding='utf-8',
                dir=self.stats_path.parent,
                prefix=f".{self.stats_path.name}.",
                suffix=".tmp",
                delete=False
            ) as f:
                temp_name = f.name
                json.dump(self.snapshot(), f, indent=2, ensure_ascii=False)
            os.replace(temp_name, self.stats_path)
        except (OSError, TypeError, ValueError) as e:
            if temp_name:
                self._discard_temp_file(temp_name)
            raise PersistenceError(str(self.stats_path), str(e)) from e

    @staticmethod
    def _discard_temp_file(temp_name: str) -> None:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temporary snapshot {temp_name}: {e}")
