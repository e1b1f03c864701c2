"""
Console runner for the pattern bot.

Reads one message per stdin line and prints replies to stdout, so the
engine can be exercised without a chat platform. A line starting with
"@bot " is treated as a direct mention. The console user owns the space,
so the statistics commands (!pattern-report, !export-stats, !top-patterns)
are available.
"""

import asyncio
import logging
import os
import sys
from typing import AsyncIterator

from dotenv import load_dotenv

from .bot.dispatcher import MessageDispatcher, ReplySink
from .bot.models import InboundMessage, ResponseAction
from .bot.services import BotServices
from .infrastructure.config import get_validated_bot_config
from .infrastructure.logging_setup import configure_logging
from .infrastructure.prometheus_metrics import get_pattern_metrics_collector

logger = logging.getLogger(__name__)

# ---------- Env / constants ----------
load_dotenv(override=True)

CONFIG_PATH = os.getenv("PATTERNBOT_CONFIG")
CONSOLE_USER_ID = os.getenv("PATTERNBOT_CONSOLE_USER_ID", "console-user")
CONSOLE_USER_NAME = os.getenv("PATTERNBOT_CONSOLE_USER_NAME", os.getenv("USER", "console"))
CONSOLE_CHANNEL = os.getenv("PATTERNBOT_CONSOLE_CHANNEL", "console")
MENTION_PREFIX = "@bot "


def parse_console_line(line: str) -> InboundMessage:
    """Turn a console line into a message from the console user."""
    content = line.rstrip("\n")
    addressed = content.lower().startswith(MENTION_PREFIX)
    if addressed:
        content = content[len(MENTION_PREFIX):]

    return InboundMessage(
        content=content,
        author_id=CONSOLE_USER_ID,
        author_name=CONSOLE_USER_NAME,
        channel_id=CONSOLE_CHANNEL,
        channel_name=CONSOLE_CHANNEL,
        space_id="console",
        space_name="Console",
        space_owner_id=CONSOLE_USER_ID,
        is_directly_addressed=addressed,
    )


async def console_messages() -> AsyncIterator[InboundMessage]:
    """Yield messages typed on stdin until EOF."""
    while True:
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line:
            return
        if line.strip():
            yield parse_console_line(line)


class ConsoleReplySink(ReplySink):
    """Prints replies to stdout."""

    async def send(self, message: InboundMessage, action: ResponseAction) -> None:
        print(f"[bot -> #{message.channel_name}] {action.render()}", flush=True)


async def run_console(services: BotServices) -> int:
    dispatcher = MessageDispatcher(services, ConsoleReplySink())
    return await dispatcher.run(console_messages())


def main() -> int:
    config = get_validated_bot_config(CONFIG_PATH, logger)
    configure_logging(config)

    services = BotServices.from_config(config, metrics=get_pattern_metrics_collector())
    services.open()
    logger.info("Bot is ready to respond to questions!")

    try:
        processed = asyncio.run(run_console(services))
        logger.info(f"Input closed after {processed} messages")
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("Bot is shutting down...")
        services.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
