"""
Confidence matcher: first-acceptable-match scan over the pattern repository.

Confidence is the share of the message covered by the matched text:

    confidence = len(matched substring) / len(content)

Patterns are tried in repository order and the first one whose confidence
meets the threshold wins, even if a later pattern would score higher.
"""

import logging
import time
from typing import Optional

from .models import MatchResult, MatchRuntimeError, Pattern
from .pattern_repository import PatternRepository
from ..infrastructure.prometheus_metrics import PatternMetricsCollector

logger = logging.getLogger(__name__)


def compute_confidence(matched_text: str, content: str) -> float:
    """Ratio of matched length to content length (0.0 for empty content)."""
    if not content:
        return 0.0
    return len(matched_text) / len(content)


class ConfidenceMatcher:
    """Scans a repository for the first pattern that clears a threshold."""

    def __init__(
        self,
        repository: PatternRepository,
        metrics: Optional[PatternMetricsCollector] = None
    ):
        self.repository = repository
        self.metrics = metrics

    def match(self, content: str, threshold: float) -> Optional[MatchResult]:
        """
        Find the first pattern whose match confidence reaches the threshold.

        A pattern that raises while searching is logged and skipped; the scan
        carries on with the next pattern.

        Args:
            content: Message text (lowercased by the caller)
            threshold: Minimum confidence to accept

        Returns:
            MatchResult for the accepted pattern, or None if nothing qualifies
        """
        start = time.perf_counter()
        try:
            for pattern in self.repository.patterns:
                try:
                    result = self._try_pattern(pattern, content)
                except MatchRuntimeError as e:
                    logger.error(str(e))
                    if self.metrics:
                        self.metrics.record_pattern_error()
                    continue

                if result is not None and result.confidence >= threshold:
                    logger.info(
                        f"Matched pattern: {pattern.source} with confidence: {result.confidence:.2f}"
                    )
                    return result

            return None
        finally:
            if self.metrics:
                self.metrics.record_match_duration((time.perf_counter() - start) * 1000)

    @staticmethod
    def _try_pattern(pattern: Pattern, content: str) -> Optional[MatchResult]:
        """
        Search one pattern against the content.

        Raises:
            MatchRuntimeError: If the compiled pattern fails during the search
        """
        try:
            found = pattern.compiled.search(content)
        except Exception as e:
            raise MatchRuntimeError(pattern.source, str(e)) from e

        # Empty matches carry no confidence
        if found is None or not found.group(0):
            return None

        matched_text = found.group(0)
        return MatchResult(
            pattern=pattern.source,
            response=pattern.response,
            confidence=compute_confidence(matched_text, content),
            matched_text=matched_text
        )
