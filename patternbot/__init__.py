"""
Pattern matching chat bot.

Answers chat messages with canned responses when a regular expression
pattern covers enough of the message, and keeps per-pattern match
statistics for reporting.
"""

__version__ = "1.0.0"
