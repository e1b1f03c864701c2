"""
Data models exchanged between the bot and its message source / reply sink.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class InboundMessage:
    """A chat message as delivered by the message source."""
    content: str
    author_id: str
    author_name: str
    channel_id: str
    channel_name: str
    space_id: Optional[str] = None  # None for direct messages
    space_name: Optional[str] = None
    space_owner_id: Optional[str] = None
    is_directly_addressed: bool = False  # Bot mentioned in the message
    author_is_bot: bool = False


@dataclass
class ResponseAction:
    """What the bot wants sent back to the originating channel."""
    text: str
    kind: str = "reply"  # "reply" for pattern responses, "command" for owner commands
    title: Optional[str] = None
    footer: Optional[str] = None
    pattern: Optional[str] = None
    confidence: Optional[float] = None
    context: Optional[str] = None

    def render(self) -> str:
        """Plain-text rendering with title and footer when present."""
        parts = []
        if self.title:
            parts.append(self.title)
        parts.append(self.text)
        if self.footer:
            parts.append(self.footer)
        return "\n\n".join(parts)
