"""
Configuration management for the pattern bot.

This module handles loading and validation of bot configuration:
- Environment variable loading
- JSON configuration file loading
- Configuration validation with safe defaults

Configuration is loaded in this order (later sources override earlier):
1. Default values
2. JSON configuration file (if provided)
3. Environment variables
"""

import os
import json
import logging
from dataclasses import dataclass, fields
from typing import List, Optional
from pathlib import Path

import pytz

logger = logging.getLogger(__name__)


@dataclass
class BotConfig:
    """
    Runtime configuration for the pattern matching bot.

    Attributes:
        patterns_dir: Directory holding the pattern definition files
        pattern_file_extension: Extension a file needs to be loaded as patterns
        metadata_marker: Leading character that marks a metadata file (never loaded)
        data_dir: Directory holding the statistics snapshot
        report_dir: Directory for report/export artifacts (defaults to data_dir)
        stats_filename: File name of the statistics snapshot
        log_dir: Directory for log files (None disables file logging)
        log_level: Level for console and activity output (match events are logged regardless)
        directed_threshold: Minimum confidence when the bot is addressed or asked a question
        casual_threshold: Minimum confidence for ambient conversation
        min_content_length: Messages shorter than this are never matched
        max_examples: Example messages kept per pattern
        top_patterns_limit: Entries shown by the top patterns command
        display_timezone: IANA timezone used when showing timestamps to users
        debug: Log messages that produced no high-confidence match
        metrics_port: Port for the Prometheus endpoint (0 disables it)
    """
    patterns_dir: str = "questions/minecraft"
    pattern_file_extension: str = ".json"
    metadata_marker: str = "!"
    data_dir: str = "logs"
    report_dir: Optional[str] = None
    stats_filename: str = "pattern_stats.json"
    log_dir: Optional[str] = "logs"
    log_level: str = "INFO"
    directed_threshold: float = 0.6
    casual_threshold: float = 0.85
    min_content_length: int = 3
    max_examples: int = 5
    top_patterns_limit: int = 10
    display_timezone: str = "UTC"
    debug: bool = False
    metrics_port: int = 0

    @property
    def stats_path(self) -> Path:
        """Full path of the statistics snapshot file."""
        return Path(self.data_dir) / self.stats_filename

    @property
    def reports_path(self) -> Path:
        """Directory that receives report and export artifacts."""
        return Path(self.report_dir or self.data_dir)

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        for name in ("directed_threshold", "casual_threshold"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                errors.append(f"{name} must be in (0, 1], got {value}")

        if self.directed_threshold > self.casual_threshold:
            errors.append("directed_threshold should not exceed casual_threshold")

        if self.min_content_length < 1:
            errors.append(f"min_content_length must be at least 1, got {self.min_content_length}")

        if self.max_examples < 0:
            errors.append(f"max_examples cannot be negative, got {self.max_examples}")

        if self.top_patterns_limit < 1:
            errors.append(f"top_patterns_limit must be positive, got {self.top_patterns_limit}")

        if not self.pattern_file_extension:
            errors.append("pattern_file_extension cannot be empty")

        if not self.stats_filename:
            errors.append("stats_filename cannot be empty")

        if not 0 <= self.metrics_port <= 65535:
            errors.append(f"metrics_port out of range: {self.metrics_port}")

        if self.display_timezone not in pytz.all_timezones_set:
            errors.append(f"Unknown display_timezone: {self.display_timezone}")

        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            errors.append(f"Unknown log_level: {self.log_level}")

        return errors


# Default configuration values
DEFAULT_BOT_CONFIG = BotConfig()


def load_bot_config(
    config_path: Optional[str] = None,
    env_prefix: str = "PATTERNBOT_"
) -> BotConfig:
    """
    Load bot configuration from environment variables and optional JSON file.

    Environment Variables:
        PATTERNBOT_PATTERNS_DIR: Pattern definition directory
        PATTERNBOT_DATA_DIR: Statistics snapshot directory
        PATTERNBOT_REPORT_DIR: Report/export directory
        PATTERNBOT_LOG_DIR: Log file directory (empty string disables file logs)
        PATTERNBOT_LOG_LEVEL: Root log level
        PATTERNBOT_DIRECTED_THRESHOLD: Threshold for directed messages (default: 0.6)
        PATTERNBOT_CASUAL_THRESHOLD: Threshold for casual messages (default: 0.85)
        PATTERNBOT_DISPLAY_TIMEZONE: Timezone for user-facing timestamps
        PATTERNBOT_METRICS_PORT: Prometheus endpoint port (default: 0, disabled)
        DEBUG: "true" enables no-match debug logging

    Args:
        config_path: Optional path to JSON configuration file
        env_prefix: Prefix for environment variables

    Returns:
        BotConfig: Loaded configuration
    """
    config = BotConfig()

    if config_path:
        config = _load_from_json(config_path, config)

    config = _load_from_env(config, env_prefix)

    return config


def _load_from_json(config_path: str, config: BotConfig) -> BotConfig:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to JSON configuration file
        config: Base configuration to update

    Returns:
        Updated configuration
    """
    try:
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Configuration file not found: {config_path}")
            return config

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        # Extract bot section if present
        bot_data = data.get("bot", data)

        field_types = {f.name: f.type for f in fields(BotConfig)}
        for key, value in bot_data.items():
            if key not in field_types:
                logger.warning(f"Ignoring unknown configuration key: {key}")
                continue
            try:
                setattr(config, key, _coerce_value(field_types[key], value))
            except (TypeError, ValueError):
                logger.warning(f"Invalid {key} value in {config_path}: {value!r}")

        logger.info(f"Loaded configuration from {config_path}")
        return config

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in configuration file {config_path}: {e}")
        return config
    except Exception as e:
        logger.error(f"Error loading configuration from {config_path}: {e}")
        return config


def _coerce_value(field_type, value):
    """
    Convert a JSON value to a BotConfig field type.

    Raises:
        TypeError, ValueError: If the value cannot represent the field
    """
    if field_type is bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes", "on")
        return bool(value)

    if field_type in (int, float):
        if value is None or isinstance(value, bool):
            raise TypeError(f"expected a number, got {value!r}")
        return field_type(value)

    if field_type is str:
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {value!r}")
        return value

    # Optional[str]
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError(f"expected a string or null, got {value!r}")
    return value


def _load_from_env(config: BotConfig, env_prefix: str) -> BotConfig:
    """
    Load configuration from environment variables.

    Args:
        config: Base configuration to update
        env_prefix: Prefix for environment variables

    Returns:
        Updated configuration
    """
    # Paths
    patterns_dir = os.getenv(f"{env_prefix}PATTERNS_DIR")
    if patterns_dir:
        config.patterns_dir = patterns_dir

    data_dir = os.getenv(f"{env_prefix}DATA_DIR")
    if data_dir:
        config.data_dir = data_dir

    report_dir = os.getenv(f"{env_prefix}REPORT_DIR")
    if report_dir:
        config.report_dir = report_dir

    log_dir = os.getenv(f"{env_prefix}LOG_DIR")
    if log_dir is not None:
        config.log_dir = log_dir or None

    log_level = os.getenv(f"{env_prefix}LOG_LEVEL")
    if log_level:
        config.log_level = log_level.upper()

    # Thresholds
    directed = os.getenv(f"{env_prefix}DIRECTED_THRESHOLD")
    if directed:
        try:
            config.directed_threshold = float(directed)
        except ValueError:
            logger.warning(f"Invalid {env_prefix}DIRECTED_THRESHOLD value: {directed}")

    casual = os.getenv(f"{env_prefix}CASUAL_THRESHOLD")
    if casual:
        try:
            config.casual_threshold = float(casual)
        except ValueError:
            logger.warning(f"Invalid {env_prefix}CASUAL_THRESHOLD value: {casual}")

    display_tz = os.getenv(f"{env_prefix}DISPLAY_TIMEZONE")
    if display_tz:
        config.display_timezone = display_tz

    metrics_port = os.getenv(f"{env_prefix}METRICS_PORT")
    if metrics_port:
        try:
            config.metrics_port = int(metrics_port)
        except ValueError:
            logger.warning(f"Invalid {env_prefix}METRICS_PORT value: {metrics_port}")

    # Debug flag (standard env var name)
    debug_str = os.getenv("DEBUG", "").lower()
    if debug_str:
        config.debug = debug_str in ("true", "1", "yes", "on")

    return config


def validate_bot_config(
    config: BotConfig,
    logger_instance: Optional[logging.Logger] = None
) -> List[str]:
    """
    Validate bot configuration and return list of errors.

    Args:
        config: BotConfig to validate
        logger_instance: Optional logger for logging validation errors

    Returns:
        List of error messages (empty if valid)
    """
    errors = config.validate()

    if not Path(config.patterns_dir).is_dir():
        # Not an error; the repository logs and loads nothing
        if logger_instance:
            logger_instance.warning(f"Patterns directory not found: {config.patterns_dir}")

    if logger_instance and errors:
        for error in errors:
            logger_instance.error(f"Configuration validation error: {error}")

    return errors


def get_validated_bot_config(
    config_path: Optional[str] = None,
    logger_instance: Optional[logging.Logger] = None
) -> BotConfig:
    """
    Load and validate bot configuration with safe defaults.

    If validation fails, errors are logged and invalid values are replaced
    with their defaults.

    Args:
        config_path: Optional path to JSON configuration file
        logger_instance: Optional logger for logging

    Returns:
        BotConfig: Validated configuration
    """
    config = load_bot_config(config_path)
    errors = validate_bot_config(config, logger_instance)

    if errors:
        if logger_instance:
            logger_instance.warning(
                f"Configuration validation found {len(errors)} issues, using safe defaults where needed"
            )
        config = _apply_safe_defaults(config)

    return config


def _apply_safe_defaults(config: BotConfig) -> BotConfig:
    """
    Apply safe defaults for invalid configuration values.

    Args:
        config: Configuration with potentially invalid values

    Returns:
        Configuration with safe defaults applied
    """
    defaults = DEFAULT_BOT_CONFIG

    if not 0 < config.directed_threshold <= 1:
        config.directed_threshold = defaults.directed_threshold
    if not 0 < config.casual_threshold <= 1:
        config.casual_threshold = defaults.casual_threshold
    if config.directed_threshold > config.casual_threshold:
        config.directed_threshold = defaults.directed_threshold
        config.casual_threshold = defaults.casual_threshold

    if config.min_content_length < 1:
        config.min_content_length = defaults.min_content_length
    if config.max_examples < 0:
        config.max_examples = defaults.max_examples
    if config.top_patterns_limit < 1:
        config.top_patterns_limit = defaults.top_patterns_limit
    if not config.pattern_file_extension:
        config.pattern_file_extension = defaults.pattern_file_extension
    if not config.stats_filename:
        config.stats_filename = defaults.stats_filename
    if not 0 <= config.metrics_port <= 65535:
        config.metrics_port = defaults.metrics_port
    if config.display_timezone not in pytz.all_timezones_set:
        config.display_timezone = defaults.display_timezone
    if logging.getLevelName(config.log_level.upper()) == f"Level {config.log_level.upper()}":
        config.log_level = defaults.log_level

    return config
