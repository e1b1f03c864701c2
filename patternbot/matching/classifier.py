"""
Message classifier: derives the context class and confidence threshold.

A message is Directed when the bot is addressed or the message reads as a
question; everything else is Casual. Directed messages get the lower
threshold.
"""

import logging
import re
from typing import Optional

from .models import Classification, ContextClass

logger = logging.getLogger(__name__)


QUESTION_LEAD_WORDS = (
    "what", "who", "when", "where", "why", "how", "can", "could", "would",
    "is", "are", "am", "do", "does", "did", "will", "should",
)

# Prefix match without a word boundary, so "island" also reads as a question
QUESTION_REGEX = re.compile(r"^(" + "|".join(QUESTION_LEAD_WORDS) + r").+")


class Classifier:
    """Assigns a context class and threshold to lowercased message content."""

    def __init__(
        self,
        directed_threshold: float = 0.6,
        casual_threshold: float = 0.85,
        min_content_length: int = 3
    ):
        self.directed_threshold = directed_threshold
        self.casual_threshold = casual_threshold
        self.min_content_length = min_content_length

    def should_skip(self, content: str) -> bool:
        """Content too short to classify or match."""
        return len(content) < self.min_content_length

    @staticmethod
    def is_question(content: str) -> bool:
        return "?" in content or QUESTION_REGEX.match(content) is not None

    def classify(self, content: str, is_directly_addressed: bool = False) -> Optional[Classification]:
        """
        Classify lowercased message content.

        Args:
            content: Lowercased message text
            is_directly_addressed: Whether the message mentions the bot

        Returns:
            Classification, or None when the content is too short to consider
        """
        if self.should_skip(content):
            return None

        is_question = self.is_question(content)

        if is_directly_addressed or is_question:
            context = ContextClass.DIRECTED
            threshold = self.directed_threshold
        else:
            context = ContextClass.CASUAL
            threshold = self.casual_threshold

        logger.debug(f"Classified message as {context.value} (threshold {threshold})")
        return Classification(
            context=context,
            threshold=threshold,
            is_question=is_question,
            is_directly_addressed=is_directly_addressed
        )
