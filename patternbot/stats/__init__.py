"""
Match statistics: durable aggregation and reporting.
"""

from .models import (
    MatchEvent,
    NamedCount,
    PatternStatistics,
    PersistenceError,
    TopPatternEntry,
)
from .stats_tracker import StatsTracker
from .report_generator import ReportGenerator

__all__ = [
    "MatchEvent",
    "NamedCount",
    "PatternStatistics",
    "PersistenceError",
    "TopPatternEntry",
    "StatsTracker",
    "ReportGenerator",
]
