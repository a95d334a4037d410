"""
weedtime.engine.transport — Chat Transport Contract
====================================================

The chain tracker never touches discord.py directly.  It talks to a
:class:`ChainTransport`, which the bot implements on top of discord.py
(:class:`weedtime.bot.transport.DiscordTransport`) and tests replace with
an ``AsyncMock``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

__all__ = [
    "ChainTransport",
    "IncomingMessage",
    "MessageHandle",
    "TransportError",
]


class TransportError(Exception):
    """A send/edit was rejected or the network call failed."""


@dataclass(frozen=True, slots=True)
class IncomingMessage:
    """The fields of a chat message the pipeline consumes."""

    message_id: int
    author_id: int
    channel_id: int
    guild_id: int | None
    timestamp: datetime
    text: str
    attachment_ids: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class MessageHandle:
    """Reference to a message the bot sent, enough to edit it later."""

    message_id: int
    channel_id: int
    timestamp: datetime
    attachment_ids: tuple[int, ...] = field(default_factory=tuple)


class ChainTransport(Protocol):
    """Side effects the chain tracker and pipeline may request."""

    async def send_media(
        self, channel_id: int, asset: str, content: str | None = None
    ) -> MessageHandle:
        """Send *asset* (a file path) to *channel_id*, with optional text."""
        ...

    async def edit_message(
        self,
        handle: MessageHandle,
        content: str | None = None,
        *,
        remove_attachments: bool = False,
    ) -> MessageHandle:
        """Edit a previously sent message in place."""
        ...

    def current_actor_id(self) -> int:
        """The bot's own user id."""
        ...
