"""
Pattern matching components.

- PatternRepository: loads and validates pattern definition files
- Classifier: derives context class and confidence threshold for a message
- ConfidenceMatcher: first-acceptable-match scan over the repository
"""

from .models import (
    Classification,
    ContextClass,
    InvalidPatternError,
    LoadResult,
    MatchResult,
    MatchRuntimeError,
    Pattern,
    PatternLoadError,
)
from .pattern_repository import PatternRepository
from .classifier import Classifier
from .confidence_matcher import ConfidenceMatcher, compute_confidence

__all__ = [
    "Classification",
    "ContextClass",
    "InvalidPatternError",
    "LoadResult",
    "MatchResult",
    "MatchRuntimeError",
    "Pattern",
    "PatternLoadError",
    "PatternRepository",
    "Classifier",
    "ConfidenceMatcher",
    "compute_confidence",
]
