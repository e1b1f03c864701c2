"""
Message handling for the pattern bot.

This module wires the matching and statistics components into a message
handler, the owner command surface and a sequential dispatcher.
"""

from .models import InboundMessage, ResponseAction
from .handler import handle_message
from .commands import OwnerCommandHandler
from .services import BotServices
from .dispatcher import MessageDispatcher, ReplySink

__all__ = [
    "InboundMessage",
    "ResponseAction",
    "handle_message",
    "OwnerCommandHandler",
    "BotServices",
    "MessageDispatcher",
    "ReplySink",
]
