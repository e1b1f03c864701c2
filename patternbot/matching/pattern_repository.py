"""
Pattern repository: loads, validates and holds the ordered pattern set.

Definition files are JSON objects mapping an arbitrary key to a record:

    {"craft_table": {"pattern": "how (do|can) i craft a? ?table",
                     "response": "Use 4 planks in a 2x2 grid!"}}

Files whose name starts with the metadata marker ("!" by default) are
reserved for metadata and never loaded. The repository is read-only once
loading completes; reloading requires a new repository.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from .models import InvalidPatternError, LoadResult, Pattern, PatternLoadError
from ..infrastructure.prometheus_metrics import PatternMetricsCollector

logger = logging.getLogger(__name__)


class PatternRepository:
    """
    Ordered, read-only collection of (pattern, response) pairs.

    Match order equals insertion order: directory entries sorted by name,
    then keys in the order they appear in each file. A later definition of
    an existing pattern source replaces its response but keeps its position.
    """

    def __init__(
        self,
        file_extension: str = ".json",
        metadata_marker: str = "!",
        metrics: Optional[PatternMetricsCollector] = None
    ):
        """
        Initialize an empty repository.

        Args:
            file_extension: Extension a file needs to be considered
            metadata_marker: Leading character of files that are skipped
            metrics: Optional metrics collector for load results
        """
        self.file_extension = file_extension
        self.metadata_marker = metadata_marker
        self.metrics = metrics
        self._patterns: Dict[str, Pattern] = {}
        self._loaded = False
        self.last_result: Optional[LoadResult] = None

    @property
    def patterns(self) -> Tuple[Pattern, ...]:
        """Patterns in match order."""
        return tuple(self._patterns.values())

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self.patterns)

    def __contains__(self, source: object) -> bool:
        return source in self._patterns

    def get(self, source: str) -> Optional[Pattern]:
        """Look up a pattern by its source string."""
        return self._patterns.get(source)

    def is_eligible(self, path: Path) -> bool:
        """Whether a directory entry should be loaded as a definition file."""
        return (
            path.is_file()
            and path.name.endswith(self.file_extension)
            and not path.name.startswith(self.metadata_marker)
        )

    def load(self, source_directory: str) -> LoadResult:
        """
        Load every eligible definition file in a directory.

        Malformed files are skipped with an error logged; invalid records are
        skipped with a warning and counted. Never raises for bad input.

        Args:
            source_directory: Directory containing pattern definition files

        Returns:
            LoadResult with loaded/invalid counts and file-level errors

        Raises:
            RuntimeError: If the repository was already loaded
        """
        if self._loaded:
            raise RuntimeError("PatternRepository is read-only once loaded")

        result = LoadResult()
        directory = Path(source_directory)

        try:
            if not directory.is_dir():
                logger.error(f"Questions directory not found: {directory}")
                return result

            for path in sorted(directory.iterdir(), key=lambda p: p.name):
                if not self.is_eligible(path):
                    continue
                self._load_file(path, result)

            logger.info(
                f"Loaded {result.loaded_count} question patterns "
                f"({result.invalid_count} invalid patterns skipped)"
            )
        except OSError as e:
            logger.error(f"Error loading questions: {e}")
        finally:
            self._loaded = True
            self.last_result = result
            if self.metrics:
                self.metrics.record_load_result(len(self), result.invalid_count, result.files_skipped)

        return result

    def _load_file(self, path: Path, result: LoadResult) -> None:
        """Load one definition file into the store."""
        try:
            definitions = self._read_definitions(path)
        except PatternLoadError as e:
            logger.error(str(e))
            result.errors.append(e)
            result.files_skipped += 1
            return

        for key, record in definitions.items():
            try:
                pattern = self._build_pattern(path.name, key, record)
            except InvalidPatternError as e:
                logger.warning(str(e))
                result.invalid_records.append(e)
                result.invalid_count += 1
                continue

            if pattern.source in self._patterns:
                logger.debug(f"Pattern {pattern.source!r} redefined in {path.name}, keeping latest response")
            self._patterns[pattern.source] = pattern
            result.loaded_count += 1

        result.files_loaded += 1

    @staticmethod
    def _read_definitions(path: Path) -> Dict[str, Any]:
        """
        Read and parse a definition file.

        Raises:
            PatternLoadError: If the file is unreadable, not JSON, or not an object
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                definitions = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PatternLoadError(str(path), str(e)) from e

        if not isinstance(definitions, dict):
            raise PatternLoadError(
                str(path), f"expected a JSON object, got {type(definitions).__name__}"
            )
        return definitions

    @staticmethod
    def _build_pattern(file_name: str, key: str, record: Any) -> Pattern:
        """
        Validate a record and compile its pattern.

        Raises:
            InvalidPatternError: If a field is missing, empty, not a string, or
                the pattern does not compile
        """
        if not isinstance(record, dict):
            raise InvalidPatternError(file_name, key, "Invalid record")

        source = record.get("pattern")
        if not source or not isinstance(source, str):
            raise InvalidPatternError(file_name, key, "Invalid pattern")

        response = record.get("response")
        if not response or not isinstance(response, str):
            raise InvalidPatternError(file_name, key, "Invalid response")

        try:
            return Pattern.compile(source, response)
        except (re.error, RecursionError, OverflowError) as e:
            raise InvalidPatternError(file_name, key, f"Invalid regex pattern ({e})") from e
