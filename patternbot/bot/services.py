"""
Service wiring for the pattern bot.

BotServices builds every component from a BotConfig and owns their
lifecycle: open() loads the patterns and the statistics snapshot, close()
flushes statistics.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .commands import OwnerCommandHandler
from .handler import handle_message
from .models import InboundMessage, ResponseAction
from ..infrastructure.config import BotConfig
from ..infrastructure.prometheus_metrics import PatternMetricsCollector, start_metrics_server
from ..matching.classifier import Classifier
from ..matching.confidence_matcher import ConfidenceMatcher
from ..matching.models import LoadResult
from ..matching.pattern_repository import PatternRepository
from ..stats.report_generator import ReportGenerator
from ..stats.stats_tracker import StatsTracker

logger = logging.getLogger(__name__)


@dataclass
class BotServices:
    """Explicitly constructed services handed to the message dispatcher."""
    config: BotConfig
    repository: PatternRepository
    classifier: Classifier
    matcher: ConfidenceMatcher
    stats_tracker: StatsTracker
    report_generator: ReportGenerator
    commands: OwnerCommandHandler
    metrics: Optional[PatternMetricsCollector] = None

    @classmethod
    def from_config(
        cls,
        config: BotConfig,
        metrics: Optional[PatternMetricsCollector] = None
    ) -> "BotServices":
        """Build (but do not open) all services."""
        repository = PatternRepository(
            file_extension=config.pattern_file_extension,
            metadata_marker=config.metadata_marker,
            metrics=metrics
        )
        stats_tracker = StatsTracker(
            str(config.stats_path),
            max_examples=config.max_examples,
            metrics=metrics
        )
        report_generator = ReportGenerator(stats_tracker, str(config.reports_path), metrics=metrics)

        return cls(
            config=config,
            repository=repository,
            classifier=Classifier(
                directed_threshold=config.directed_threshold,
                casual_threshold=config.casual_threshold,
                min_content_length=config.min_content_length
            ),
            matcher=ConfidenceMatcher(repository, metrics=metrics),
            stats_tracker=stats_tracker,
            report_generator=report_generator,
            commands=OwnerCommandHandler(
                report_generator,
                top_patterns_limit=config.top_patterns_limit,
                display_timezone=config.display_timezone
            ),
            metrics=metrics,
        )

    def open(self) -> LoadResult:
        """Load patterns and statistics; start the metrics endpoint if configured."""
        result = self.repository.load(self.config.patterns_dir)
        self.stats_tracker.open()

        if self.metrics and self.config.metrics_port:
            start_metrics_server(self.config.metrics_port, self.metrics)

        return result

    def close(self) -> None:
        """Flush statistics."""
        self.stats_tracker.close()

    def __enter__(self) -> "BotServices":
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, tb) -> None:
        self.close()

    def respond(self, message: InboundMessage) -> Optional[ResponseAction]:
        """Owner command first, then pattern matching."""
        action = self.commands.handle(message)
        if action is not None:
            if self.metrics:
                self.metrics.record_message("command")
            return action

        return handle_message(
            message,
            self.repository,
            self.classifier,
            self.matcher,
            self.stats_tracker,
            metrics=self.metrics,
            debug=self.config.debug
        )
