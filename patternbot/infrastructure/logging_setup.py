"""
Logging configuration for the pattern bot.

Adds a PATTERN log level (between DEBUG and INFO) for match events and
installs the bot's handlers:
- Console: the configured level and above plus PATTERN, human readable
- error.log: ERROR and above, JSON lines
- pattern_matches.log: PATTERN records only, JSON lines
- bot_activity.log: INFO or the configured level if higher (PATTERN and DEBUG excluded), JSON lines

Every file handler writes the same JSON-line shape so match events can be
replayed or grepped without format guessing.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import BotConfig

PATTERN = 15
logging.addLevelName(PATTERN, "PATTERN")

SERVICE_NAME = "pattern-bot"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

_installed_handlers: List[logging.Handler] = []


def log_pattern(logger_instance: logging.Logger, message: str, **fields: Any) -> None:
    """Emit a PATTERN-level record with structured fields."""
    logger_instance.log(PATTERN, message, extra=fields)


class JsonLineFormatter(logging.Formatter):
    """Formats records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(TIMESTAMP_FORMAT),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "service": SERVICE_NAME,
            "logger": record.name,
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class OnlyLevelFilter(logging.Filter):
    """Passes records of exactly one level."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno == self.level


class MinimumLevelFilter(logging.Filter):
    """Passes records at or above a level, plus every PATTERN record."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.level or record.levelno == PATTERN


class ExcludeLevelsFilter(logging.Filter):
    """Drops records of the given levels."""

    def __init__(self, *levels: int):
        super().__init__()
        self.levels = set(levels)

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno not in self.levels


def configure_logging(config: Optional[BotConfig] = None) -> List[logging.Handler]:
    """
    Install console and file handlers on the root logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        config: Bot configuration (log_dir, log_level)

    Returns:
        The handlers that were installed
    """
    config = config or BotConfig()
    root = logging.getLogger()

    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    # Match events pass whatever the configured level; handlers apply it to the rest
    configured_level = logging.getLevelName(config.log_level.upper())
    level = min(configured_level, PATTERN)
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.addFilter(MinimumLevelFilter(configured_level))
    console.setFormatter(logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s",
        datefmt=TIMESTAMP_FORMAT
    ))
    handlers: List[logging.Handler] = [console]

    if config.log_dir:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        formatter = JsonLineFormatter()

        error_handler = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)

        pattern_handler = logging.FileHandler(log_dir / "pattern_matches.log", encoding="utf-8")
        pattern_handler.setLevel(PATTERN)
        pattern_handler.addFilter(OnlyLevelFilter(PATTERN))
        pattern_handler.setFormatter(formatter)

        activity_handler = logging.FileHandler(log_dir / "bot_activity.log", encoding="utf-8")
        activity_handler.setLevel(max(logging.INFO, configured_level))
        activity_handler.addFilter(ExcludeLevelsFilter(PATTERN, logging.DEBUG))
        activity_handler.setFormatter(formatter)

        handlers.extend([error_handler, pattern_handler, activity_handler])

    for handler in handlers:
        root.addHandler(handler)
        _installed_handlers.append(handler)

    return handlers
