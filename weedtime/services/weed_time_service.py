"""
weedtime.services.weed_time_service — Message Pipeline
=======================================================

One call per inbound message:

1. Gate: ignore the bot's own messages, and messages that can't matter
   (no marker and no active chain in the channel).
2. Look up the guild's UTC offset (falls back to 0 if the DB is down).
3. Classify → IGNORED / WEED_CRIME / WEED_TIME.
4. WEED_CRIME → send the jail notice.  WEED_TIME → the chain tracker
   resolves the message (sending or editing the chain image).
5. Only after the visible side effect succeeded, commit the event.

Steps 2–5 run while holding the channel's lock, so a channel's messages
are handled strictly in arrival order.  Other channels are unaffected.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from weedtime.constants import CRIME_MESSAGE
from weedtime.database.engine import run_db
from weedtime.engine.classifier import (
    DEFAULT_MARKER,
    DEFAULT_WINDOW,
    TriggerWindow,
    classify_message,
    has_marker,
)
from weedtime.engine.events import MessageClass, WeedCrime, WeedEvent
from weedtime.engine.transport import TransportError
from weedtime.services.stats_service import apply_event, get_utc_offset

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from weedtime.engine.chain import ChainTracker
    from weedtime.engine.transport import ChainTransport, IncomingMessage

logger = logging.getLogger(__name__)


class WeedTimePipeline:
    """Classifier → chain tracker → stats committer.

    Parameters
    ----------
    engine:
        SQLAlchemy engine for offsets and stat commits.
    tracker:
        The process-wide :class:`ChainTracker`.
    transport:
        Used for the weed-crime notice and to recognise the bot's own messages.
    """

    def __init__(
        self,
        engine: Engine,
        tracker: ChainTracker,
        transport: ChainTransport,
        *,
        window: TriggerWindow = DEFAULT_WINDOW,
        marker: str = DEFAULT_MARKER,
        crime_image_path: str = "assets/420_jail.jpg",
        crime_message: str = CRIME_MESSAGE,
    ) -> None:
        self.engine = engine
        self.tracker = tracker
        self.transport = transport
        self.window = window
        self.marker = marker
        self.crime_image_path = crime_image_path
        self.crime_message = crime_message

    async def handle(self, message: IncomingMessage) -> WeedEvent | None:
        """Process one message.

        Returns the classified event, or ``None`` for a no-op.  The event is
        returned even if its stat commit failed and was dropped.
        """
        is_from_self = message.author_id == self.transport.current_actor_id()
        if is_from_self:
            return None

        marker = has_marker(message.text, self.marker)

        async with self.tracker.hold(message.channel_id):
            if not marker and not self.tracker.has_active_chain(message.channel_id):
                return None

            offset = await self._lookup_offset(message.guild_id)
            verdict = classify_message(
                message.timestamp,
                offset,
                message.text,
                is_from_self,
                window=self.window,
                marker=self.marker,
            )
            if verdict is MessageClass.IGNORED:
                logger.debug("Message %d ignored (outside window)", message.message_id)
                return None

            try:
                if verdict is MessageClass.WEED_CRIME:
                    event = await self._weed_crime(message)
                else:
                    event = await self.tracker.resolve_locked(
                        message, utc_offset_seconds=offset
                    )
            except TransportError:
                logger.exception(
                    "Transport failure handling message %d in channel %d, not committed",
                    message.message_id, message.channel_id,
                )
                return None

            if event is None:
                return None

            await self._commit(event)
            return event

    async def _lookup_offset(self, guild_id: int | None) -> int:
        try:
            return await run_db(get_utc_offset, self.engine, guild_id)
        except SQLAlchemyError:
            logger.warning(
                "Could not read UTC offset for guild %s, assuming UTC",
                guild_id, exc_info=True,
            )
            return 0

    async def _weed_crime(self, message: IncomingMessage) -> WeedCrime:
        await self.transport.send_media(
            message.channel_id, self.crime_image_path, self.crime_message
        )
        logger.info(
            "Weed crime by user %d in channel %d",
            message.author_id, message.channel_id,
        )
        return WeedCrime(user_id=message.author_id, guild_id=message.guild_id)

    async def _commit(self, event: WeedEvent) -> None:
        try:
            await run_db(apply_event, self.engine, event)
        except (SQLAlchemyError, RuntimeError):
            logger.exception("Failed to commit %r, event dropped", event)
