"""
Data models for pattern matching.

This module contains the data classes and errors used by the pattern
repository, the classifier and the confidence matcher.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Pattern as CompiledPattern


class ContextClass(Enum):
    """How a message engages the bot; decides the confidence threshold."""
    DIRECTED = "directed"  # Mention or question
    CASUAL = "casual"      # Ambient conversation


@dataclass(frozen=True)
class Pattern:
    """A regular expression paired with its canned response."""
    source: str
    response: str
    compiled: CompiledPattern = field(repr=False, compare=False)

    @classmethod
    def compile(cls, source: str, response: str) -> "Pattern":
        """Build a case-insensitive pattern; raises re.error on bad syntax."""
        return cls(source=source, response=response, compiled=re.compile(source, re.IGNORECASE))


@dataclass
class PatternLoadError(Exception):
    """Raised when a definition file cannot be read or parsed."""
    file_path: str
    message: str

    def __str__(self):
        return f"Error reading or parsing {self.file_path}: {self.message}"


@dataclass
class InvalidPatternError(Exception):
    """Raised when a pattern record is missing fields or does not compile."""
    file_name: str
    key: str
    message: str

    def __str__(self):
        return f"{self.message} in {self.file_name} for key {self.key}"


@dataclass
class MatchRuntimeError(Exception):
    """Raised when a compiled pattern fails while searching a message."""
    pattern: str
    message: str

    def __str__(self):
        return f"Error with pattern {self.pattern}: {self.message}"


@dataclass
class LoadResult:
    """Result of loading a pattern directory."""
    loaded_count: int = 0
    invalid_count: int = 0
    files_loaded: int = 0
    files_skipped: int = 0
    errors: List[PatternLoadError] = field(default_factory=list)
    invalid_records: List[InvalidPatternError] = field(default_factory=list)


@dataclass
class Classification:
    """Context class and confidence threshold derived for a message."""
    context: ContextClass
    threshold: float
    is_question: bool = False
    is_directly_addressed: bool = False


@dataclass
class MatchResult:
    """An accepted match: first pattern whose confidence met the threshold."""
    pattern: str
    response: str
    confidence: float
    matched_text: Optional[str] = None
