"""
Tests for PatternMetricsCollector.

Tests cover:
- Independent registries per collector
- Message, match and load result recording
- Global collector lifecycle
"""

from patternbot.infrastructure.prometheus_metrics import (
    PatternMetricsCollector,
    get_pattern_metrics_collector,
    reset_pattern_metrics_collector,
)


def test_collectors_do_not_share_registries():
    first = PatternMetricsCollector()
    second = PatternMetricsCollector()

    first.record_message("matched")

    assert first.registry.get_sample_value("patternbot_messages_processed_total", {"outcome": "matched"}) == 1
    assert second.registry.get_sample_value("patternbot_messages_processed_total", {"outcome": "matched"}) is None


def test_record_match_observes_confidence():
    metrics = PatternMetricsCollector()

    metrics.record_match("directed", 0.96)
    metrics.record_match("casual", 1.0)

    assert metrics.registry.get_sample_value("patternbot_matches_total", {"context": "directed"}) == 1
    assert metrics.registry.get_sample_value("patternbot_match_confidence_count") == 2


def test_record_load_result_sets_gauges():
    metrics = PatternMetricsCollector()

    metrics.record_load_result(loaded=12, invalid=2, failed_files=1)

    assert metrics.registry.get_sample_value("patternbot_patterns_loaded") == 12
    assert metrics.registry.get_sample_value("patternbot_patterns_invalid") == 2
    assert metrics.registry.get_sample_value("patternbot_pattern_files_failed") == 1


def test_exposition_text():
    metrics = PatternMetricsCollector()
    metrics.record_artifact("report")

    text = metrics.get_metrics()

    assert 'patternbot_artifacts_written_total{kind="report"} 1.0' in text


def test_global_collector_reset():
    reset_pattern_metrics_collector()
    collector = get_pattern_metrics_collector()

    assert get_pattern_metrics_collector() is collector

    reset_pattern_metrics_collector()
    assert get_pattern_metrics_collector() is not collector
    reset_pattern_metrics_collector()
