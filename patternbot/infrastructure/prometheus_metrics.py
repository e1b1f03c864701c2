"""
Prometheus metrics collection for the pattern matching engine.

This module provides metrics for:
- Message processing outcomes (skipped, matched, no match, command)
- Accepted matches by context class and their confidence
- Pattern scan duration
- Pattern load results and runtime pattern errors
- Statistics persistence failures
"""

import logging
from typing import Optional

from prometheus_client import (
    CollectorRegistry, Counter, Gauge, Histogram,
    generate_latest, start_http_server
)

logger = logging.getLogger(__name__)


class PatternMetricsCollector:
    """
    Prometheus metrics collector for the pattern bot.

    Each collector owns its registry so several instances (tests, embedded
    engines) can coexist in one process.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize the metrics collector.

        Args:
            registry: Optional Prometheus registry. Creates new one if None.
        """
        self.registry = registry or CollectorRegistry()

        self._setup_message_metrics()
        self._setup_pattern_metrics()
        self._setup_stats_metrics()

        logger.debug("PatternMetricsCollector initialized")

    def _setup_message_metrics(self):
        """Set up message handling metrics."""
        self.messages_processed_total = Counter(
            'patternbot_messages_processed_total',
            'Total number of inbound messages handled',
            ['outcome'],
            registry=self.registry
        )

        self.matches_total = Counter(
            'patternbot_matches_total',
            'Total number of accepted pattern matches',
            ['context'],
            registry=self.registry
        )

        self.match_confidence = Histogram(
            'patternbot_match_confidence',
            'Confidence of accepted matches',
            buckets=[0.6, 0.7, 0.8, 0.85, 0.9, 0.95, 1.0],
            registry=self.registry
        )

        self.match_duration_ms = Histogram(
            'patternbot_match_duration_ms',
            'Time spent scanning patterns for one message in milliseconds',
            buckets=[0.1, 0.5, 1, 2, 5, 10, 25, 50, 100],
            registry=self.registry
        )

    def _setup_pattern_metrics(self):
        """Set up pattern repository metrics."""
        self.patterns_loaded = Gauge(
            'patternbot_patterns_loaded',
            'Number of patterns held by the repository',
            registry=self.registry
        )

        self.patterns_invalid = Gauge(
            'patternbot_patterns_invalid',
            'Number of pattern records rejected during the last load',
            registry=self.registry
        )

        self.pattern_files_failed = Gauge(
            'patternbot_pattern_files_failed',
            'Number of pattern files skipped during the last load',
            registry=self.registry
        )

        self.pattern_errors_total = Counter(
            'patternbot_pattern_runtime_errors_total',
            'Total number of patterns that raised while matching',
            registry=self.registry
        )

    def _setup_stats_metrics(self):
        """Set up statistics persistence metrics."""
        self.stats_persist_failures_total = Counter(
            'patternbot_stats_persist_failures_total',
            'Total number of failed statistics snapshot writes',
            registry=self.registry
        )

        self.artifacts_written_total = Counter(
            'patternbot_artifacts_written_total',
            'Total number of report/export artifacts written',
            ['kind'],
            registry=self.registry
        )

    # Recording methods

    def record_message(self, outcome: str):
        """Record a handled message by outcome (skipped, matched, no_match, command)."""
        self.messages_processed_total.labels(outcome=outcome).inc()

    def record_match(self, context: str, confidence: float):
        """Record an accepted match."""
        self.matches_total.labels(context=context).inc()
        self.match_confidence.observe(confidence)

    def record_match_duration(self, duration_ms: float):
        """Record how long one pattern scan took."""
        self.match_duration_ms.observe(duration_ms)

    def record_load_result(self, loaded: int, invalid: int, failed_files: int):
        """Record the outcome of a repository load."""
        self.patterns_loaded.set(loaded)
        self.patterns_invalid.set(invalid)
        self.pattern_files_failed.set(failed_files)

    def record_pattern_error(self):
        """Record a pattern that raised during a scan."""
        self.pattern_errors_total.inc()

    def record_persist_failure(self):
        """Record a failed statistics snapshot write."""
        self.stats_persist_failures_total.inc()

    def record_artifact(self, kind: str):
        """Record a written report or export artifact."""
        self.artifacts_written_total.labels(kind=kind).inc()

    def get_metrics(self) -> str:
        """Get metrics in Prometheus text format."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics collector instance
_pattern_metrics_collector: Optional[PatternMetricsCollector] = None


def get_pattern_metrics_collector() -> PatternMetricsCollector:
    """
    Get the global pattern metrics collector instance.

    Returns:
        The global PatternMetricsCollector instance
    """
    global _pattern_metrics_collector
    if _pattern_metrics_collector is None:
        _pattern_metrics_collector = PatternMetricsCollector()
    return _pattern_metrics_collector


def reset_pattern_metrics_collector():
    """Reset the global pattern metrics collector (for testing)."""
    global _pattern_metrics_collector
    _pattern_metrics_collector = None


def start_metrics_server(port: int, collector: Optional[PatternMetricsCollector] = None) -> None:
    """
    Start Prometheus metrics HTTP server.

    Args:
        port: Port to serve metrics on
        collector: Collector to expose (defaults to the global one)
    """
    collector = collector or get_pattern_metrics_collector()
    start_http_server(port, registry=collector.registry)
    logger.info(f"Prometheus metrics server started on port {port}")
