"""
Message handling entry point.

handle_message() runs one message through classification, matching and
statistics recording. Apart from the calls to its collaborators it has no
side effects, and it is invoked for one message at a time.
"""

import logging
from typing import Optional

from .models import InboundMessage, ResponseAction
from ..matching.classifier import Classifier
from ..matching.confidence_matcher import ConfidenceMatcher
from ..matching.pattern_repository import PatternRepository
from ..stats.models import MatchEvent
from ..stats.stats_tracker import StatsTracker
from ..infrastructure.prometheus_metrics import PatternMetricsCollector

logger = logging.getLogger(__name__)


def handle_message(
    message: InboundMessage,
    repository: PatternRepository,
    classifier: Classifier,
    matcher: ConfidenceMatcher,
    stats_tracker: StatsTracker,
    metrics: Optional[PatternMetricsCollector] = None,
    debug: bool = False
) -> Optional[ResponseAction]:
    """
    Decide whether a message gets a canned response.

    Args:
        message: The inbound message
        repository: Loaded pattern repository
        classifier: Context/threshold classifier
        matcher: Confidence matcher over the repository
        stats_tracker: Receives the accepted match
        metrics: Optional metrics collector
        debug: Log messages that found no high-confidence match

    Returns:
        ResponseAction with the pattern's response, or None
    """
    content = message.content.lower()

    classification = classifier.classify(content, message.is_directly_addressed)
    if classification is None:
        if metrics:
            metrics.record_message("skipped")
        return None

    result = matcher.match(content, classification.threshold) if len(repository) else None

    if result is None:
        if debug:
            logger.debug(f'No high-confidence match found for: "{content}"')
        if metrics:
            metrics.record_message("no_match")
        return None

    stats_tracker.record(MatchEvent(
        content=message.content,
        pattern=result.pattern,
        confidence=result.confidence,
        channel_id=message.channel_id,
        channel_name=message.channel_name,
        user_id=message.author_id,
        user_name=message.author_name,
        space_id=message.space_id,
        space_name=message.space_name,
    ))

    if metrics:
        metrics.record_message("matched")
        metrics.record_match(classification.context.value, result.confidence)

    return ResponseAction(
        text=result.response,
        pattern=result.pattern,
        confidence=result.confidence,
        context=classification.context.value
    )
