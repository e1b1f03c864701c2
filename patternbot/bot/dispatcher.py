"""
Sequential message dispatcher.

Pulls messages from a source one at a time, asks the services for a
response and hands it to the reply sink. A message is fully processed,
statistics write included, before the next one is read.
"""

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterable, Optional

from .models import InboundMessage, ResponseAction
from .services import BotServices

logger = logging.getLogger(__name__)


class ReplySink(ABC):
    """Sends a response back to the channel a message came from."""

    @abstractmethod
    async def send(self, message: InboundMessage, action: ResponseAction) -> None:
        """Deliver the action to the message's channel."""


class MessageDispatcher:
    """Feeds inbound messages through the bot services one by one."""

    def __init__(self, services: BotServices, reply_sink: ReplySink):
        self.services = services
        self.reply_sink = reply_sink
        self.processed_count = 0
        self.reply_count = 0

    async def dispatch(self, message: InboundMessage) -> Optional[ResponseAction]:
        """
        Process one message and send the reply, if any.

        Messages written by bots are ignored. A failing reply sink is logged;
        the action is still returned.
        """
        if message.author_is_bot:
            return None

        self.processed_count += 1
        action = self.services.respond(message)
        if action is None:
            return None

        try:
            await self.reply_sink.send(message, action)
            self.reply_count += 1
        except Exception as e:
            logger.error(f"Failed to send reply to channel {message.channel_id}: {e}")

        return action

    async def run(self, source: AsyncIterable[InboundMessage]) -> int:
        """
        Dispatch every message from the source until it is exhausted.

        Returns:
            Number of messages processed (bot messages excluded)
        """
        async for message in source:
            await self.dispatch(message)
        return self.processed_count
