"""
weedtime.bot.transport — discord.py implementation of ChainTransport
=====================================================================

Translates between discord.py objects and the plain
:class:`~weedtime.engine.transport.MessageHandle` /
:class:`~weedtime.engine.transport.IncomingMessage` records the engine
works with.  Every Discord failure surfaces as :class:`TransportError`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord

from weedtime.engine.transport import IncomingMessage, MessageHandle, TransportError

if TYPE_CHECKING:
    from discord.ext import commands

logger = logging.getLogger(__name__)


def handle_from_message(message: discord.Message) -> MessageHandle:
    return MessageHandle(
        message_id=message.id,
        channel_id=message.channel.id,
        timestamp=message.created_at,
        attachment_ids=tuple(a.id for a in message.attachments),
    )


def incoming_from_message(message: discord.Message) -> IncomingMessage:
    return IncomingMessage(
        message_id=message.id,
        author_id=message.author.id,
        channel_id=message.channel.id,
        guild_id=message.guild.id if message.guild else None,
        timestamp=message.created_at,
        text=message.content,
        attachment_ids=tuple(a.id for a in message.attachments),
    )


class DiscordTransport:
    """Sends chain images and combo edits through a discord.py bot."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    def current_actor_id(self) -> int:
        return self.bot.user.id if self.bot.user else 0

    async def _channel(self, channel_id: int):
        channel = self.bot.get_channel(channel_id)
        if channel is None:
            channel = await self.bot.fetch_channel(channel_id)
        return channel

    async def send_media(
        self, channel_id: int, asset: str, content: str | None = None
    ) -> MessageHandle:
        try:
            channel = await self._channel(channel_id)
            sent = await channel.send(content=content, file=discord.File(asset))
        except (discord.DiscordException, OSError) as exc:
            raise TransportError(f"Could not send {asset} to channel {channel_id}") from exc
        return handle_from_message(sent)

    async def edit_message(
        self,
        handle: MessageHandle,
        content: str | None = None,
        *,
        remove_attachments: bool = False,
    ) -> MessageHandle:
        fields: dict = {}
        if content is not None:
            fields["content"] = content
        if remove_attachments:
            fields["attachments"] = []

        try:
            channel = await self._channel(handle.channel_id)
            edited = await channel.get_partial_message(handle.message_id).edit(**fields)
        except discord.DiscordException as exc:
            raise TransportError(
                f"Could not edit message {handle.message_id} in channel {handle.channel_id}"
            ) from exc
        return handle_from_message(edited)
