"""
weedtime.bot.cogs.weed_time — Message Listener
===============================================

Normalizes every guild/DM message into an
:class:`~weedtime.engine.transport.IncomingMessage` and hands it to the
bot's :class:`~weedtime.services.weed_time_service.WeedTimePipeline`.
discord.py dispatches each ``on_message`` as its own task, so a slow
Discord call in one channel never holds up another.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from weedtime.bot.transport import incoming_from_message

if TYPE_CHECKING:
    from weedtime.bot.core import WeedTimeBot

logger = logging.getLogger(__name__)


class WeedTime(commands.Cog, name="WeedTime"):
    """Tracks weed time chains and weed crimes."""

    def __init__(self, bot: WeedTimeBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        logger.debug(
            "Gateway event: MESSAGE %s from %s in #%s",
            message.id,
            message.author.name,
            getattr(message.channel, "name", "DM"),
        )
        try:
            event = await self.bot.pipeline.handle(incoming_from_message(message))
        except Exception:
            logger.exception(
                "Error processing message %s from user %s",
                message.id,
                message.author.id,
            )
            return

        if event is not None:
            logger.debug("Message %s → %r", message.id, event)


async def setup(bot: WeedTimeBot) -> None:
    await bot.add_cog(WeedTime(bot))
