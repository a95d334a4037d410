"""
weedtime.engine.chain — Per-Channel Combo Chain Tracker
========================================================

Holds the running chain for every channel that has ever seen a
chain-starting message, and decides what each in-window message does to
it.

States per channel::

    Absent ──marker──▶ Active(1) ──same hour, marker, new participant──▶ Active(N+1)
                          │
                          └──anything else──▶ Idle(0) ──marker──▶ Active(1)

Entries are created lazily and never removed; ``count == 0`` (Idle) is a
resting state distinct from absence.  Nothing here is persisted; a
restart forgets every chain.

Concurrency: one :class:`asyncio.Lock` per channel.  Holding one channel's
lock never blocks another channel, and waiters are woken FIFO, so a
channel's messages resolve in arrival order.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from weedtime.constants import COMBO_PREFIX, KEYCAP_DIGITS, format_combo
from weedtime.engine.classifier import DEFAULT_MARKER, has_marker, same_occurrence
from weedtime.engine.events import ChainBroken, ChainContinued, NewChain, WeedEvent
from weedtime.engine.transport import ChainTransport, IncomingMessage, MessageHandle

logger = logging.getLogger(__name__)

__all__ = ["ChainPolicy", "ChainTracker", "ChannelChainState"]


@dataclass(frozen=True, slots=True)
class ChainPolicy:
    """Tunable chain rules (from ``config.yaml``)."""

    marker: str = DEFAULT_MARKER
    enforce_unique_participants: bool = True
    # When set, the 1→2 step is reported as NewChain(count=2)
    first_continuation_is_new_chain: bool = False
    weed_image_path: str = "assets/420.png"
    combo_prefix: str = COMBO_PREFIX
    combo_digits: Sequence[str] = KEYCAP_DIGITS


@dataclass(slots=True)
class ChannelChainState:
    """Mutable chain state for one channel."""

    last_message: MessageHandle
    participants: set[int] = field(default_factory=set)
    count: int = 0

    @property
    def active(self) -> bool:
        return self.count > 0


class ChainTracker:
    """Per-channel chain state machine.

    Parameters
    ----------
    transport:
        Where chain images are sent and combo edits are made.
    policy:
        Chain rules; defaults to :class:`ChainPolicy`.
    """

    def __init__(self, transport: ChainTransport, policy: ChainPolicy | None = None) -> None:
        self.transport = transport
        self.policy = policy or ChainPolicy()
        self._states: dict[int, ChannelChainState] = {}
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    # -------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------
    def __contains__(self, channel_id: int) -> bool:
        return channel_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def state_for(self, channel_id: int) -> ChannelChainState | None:
        return self._states.get(channel_id)

    def has_active_chain(self, channel_id: int) -> bool:
        state = self._states.get(channel_id)
        return state is not None and state.active

    # -------------------------------------------------------------------
    # Locking
    # -------------------------------------------------------------------
    @asynccontextmanager
    async def hold(self, channel_id: int) -> AsyncIterator[None]:
        """Hold *channel_id*'s lock for the duration of the block."""
        lock = self._locks[channel_id]
        async with lock:
            yield

    def is_held(self, channel_id: int) -> bool:
        lock = self._locks.get(channel_id)
        return lock is not None and lock.locked()

    # -------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------
    async def resolve(
        self, message: IncomingMessage, *, utc_offset_seconds: int = 0
    ) -> WeedEvent | None:
        """Take the channel lock and resolve an in-window *message*."""
        async with self.hold(message.channel_id):
            return await self.resolve_locked(message, utc_offset_seconds=utc_offset_seconds)

    async def resolve_locked(
        self, message: IncomingMessage, *, utc_offset_seconds: int = 0
    ) -> WeedEvent | None:
        """Resolve an in-window *message* while the caller holds the lock.

        Returns the event to commit, or ``None`` for a no-op.

        Raises
        ------
        TransportError
            If the chain image could not be sent or the combo edit failed.
            Nothing has been committed; state reset by a break stays reset.
        """
        if not self.is_held(message.channel_id):
            raise RuntimeError(
                f"resolve_locked() called without holding channel {message.channel_id}"
            )

        marker = has_marker(message.text, self.policy.marker)
        state = self._states.get(message.channel_id)

        if state is None or not state.active:
            if not marker:
                return None
            return await self._start_chain(message, state)

        same = same_occurrence(
            message.timestamp, state.last_message.timestamp, utc_offset_seconds
        )
        duplicate = (
            self.policy.enforce_unique_participants
            and message.author_id in state.participants
        )
        if same and marker and not duplicate:
            return await self._continue_chain(message, state)

        # C-c-c-combo breaker
        old_count = state.count
        state.participants = set()
        state.count = 0

        if marker and not same:
            logger.info(
                "Stale %d-chain in channel %d replaced by a new window",
                old_count, message.channel_id,
            )
            return await self._start_chain(message, state)

        logger.info(
            "Chain of %d broken in channel %d by user %d",
            old_count, message.channel_id, message.author_id,
        )
        return ChainBroken(user_id=message.author_id, guild_id=message.guild_id)

    async def _start_chain(
        self, message: IncomingMessage, state: ChannelChainState | None
    ) -> NewChain:
        handle = await self.transport.send_media(
            message.channel_id, self.policy.weed_image_path
        )
        if state is None:
            self._states[message.channel_id] = ChannelChainState(
                last_message=handle,
                participants={message.author_id},
                count=1,
            )
        else:
            state.last_message = handle
            state.participants = {message.author_id}
            state.count = 1

        logger.info(
            "New chain in channel %d started by user %d",
            message.channel_id, message.author_id,
        )
        return NewChain(user_id=message.author_id, guild_id=message.guild_id)

    async def _continue_chain(
        self, message: IncomingMessage, state: ChannelChainState
    ) -> NewChain | ChainContinued:
        new_count = state.count + 1
        handle = await self.transport.edit_message(
            state.last_message,
            format_combo(new_count, self.policy.combo_prefix, self.policy.combo_digits),
        )
        state.last_message = handle
        state.count = new_count
        state.participants.add(message.author_id)

        logger.info(
            "Chain in channel %d continued to %d by user %d",
            message.channel_id, new_count, message.author_id,
        )
        if new_count == 2 and self.policy.first_continuation_is_new_chain:
            return NewChain(
                user_id=message.author_id, guild_id=message.guild_id, count=new_count
            )
        return ChainContinued(
            user_id=message.author_id, guild_id=message.guild_id, count=new_count
        )
