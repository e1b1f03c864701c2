"""
Infrastructure for the pattern bot: configuration, logging and metrics.
"""

from .config import (
    BotConfig,
    DEFAULT_BOT_CONFIG,
    load_bot_config,
    validate_bot_config,
    get_validated_bot_config,
)
from .logging_setup import PATTERN, configure_logging, log_pattern
from .prometheus_metrics import (
    PatternMetricsCollector,
    get_pattern_metrics_collector,
    reset_pattern_metrics_collector,
    start_metrics_server,
)

__all__ = [
    # Configuration
    "BotConfig",
    "DEFAULT_BOT_CONFIG",
    "load_bot_config",
    "validate_bot_config",
    "get_validated_bot_config",
    # Logging
    "PATTERN",
    "configure_logging",
    "log_pattern",
    # Metrics
    "PatternMetricsCollector",
    "get_pattern_metrics_collector",
    "reset_pattern_metrics_collector",
    "start_metrics_server",
]
