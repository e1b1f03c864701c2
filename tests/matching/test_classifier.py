"""
Tests for Classifier component.

Tests cover:
- Skipping content shorter than the minimum length
- Question detection (question mark and lead words)
- Directed vs casual context and their thresholds
"""

import pytest

from patternbot.matching.classifier import Classifier
from patternbot.matching.models import ContextClass


@pytest.fixture
def classifier():
    return Classifier()


# Test skip signal
@pytest.mark.parametrize("content", ["", "a", "hi", "?!"])
def test_short_content_is_skipped(classifier, content):
    """Test that content under 3 characters is never classified."""
    assert classifier.classify(content, is_directly_addressed=True) is None


def test_three_characters_is_classified(classifier):
    """Test that exactly 3 characters passes the length check."""
    assert classifier.classify("abc") is not None


# Test question detection
@pytest.mark.parametrize("content", [
    "what is redstone",
    "how do i craft a table",
    "should i build here",
    "does this work",
    "crafting table?",
    "island",  # lead word prefix, no word boundary
])
def test_questions_are_directed(classifier, content):
    """Test that interrogative content uses the directed threshold."""
    result = classifier.classify(content)

    assert result.context == ContextClass.DIRECTED
    assert result.threshold == 0.6
    assert result.is_question


@pytest.mark.parametrize("content", [
    "nice build",
    "i love this table",
    "so what",  # lead word not at the start
])
def test_statements_are_casual(classifier, content):
    """Test that ambient statements use the casual threshold."""
    result = classifier.classify(content)

    assert result.context == ContextClass.CASUAL
    assert result.threshold == 0.85
    assert not result.is_question


def test_lead_word_needs_a_following_character(classifier):
    """Test that a bare lead word is not a question."""
    assert not classifier.is_question("how")
    assert classifier.is_question("how ")


def test_mention_makes_statement_directed(classifier):
    """Test that a direct mention lowers the threshold for any content."""
    result = classifier.classify("nice build", is_directly_addressed=True)

    assert result.context == ContextClass.DIRECTED
    assert result.threshold == 0.6
    assert result.is_directly_addressed


def test_custom_thresholds():
    """Test that thresholds and minimum length are configurable."""
    classifier = Classifier(directed_threshold=0.5, casual_threshold=0.9, min_content_length=5)

    assert classifier.classify("abcd") is None
    assert classifier.classify("hello there").threshold == 0.9
    assert classifier.classify("hello there?").threshold == 0.5
