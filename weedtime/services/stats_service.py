"""
weedtime.services.stats_service — Aggregate Stat Commits & Queries
===================================================================

Shared service module callable by the message pipeline and the slash
commands.  Applies classified events to ``guild_stats`` / ``user_stats``:

=================  ========================================  =====================================
Event              GuildStats                                UserStats
=================  ========================================  =====================================
NewChain(n)        times += 1, longest = max(longest, n)     times += 1, chains_started += 1
ChainContinued(n)  times += 1, longest = max(longest, n)     times += 1
ChainBroken        —                                         chains_broken += 1
WeedCrime          crimes += 1                               crimes += 1
=================  ========================================  =====================================

Every write is update-or-insert: update the row under a lock; if it is
missing, insert a zeroed row carrying only this event's effect; if that
insert loses a race, go back and update.

``apply_event`` is **not** idempotent: callers invoke it exactly once per
classified message.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta, timezone
from typing import TYPE_CHECKING, TypeVar

from weedtime.database.models import Base, GuildStats, UserStats
from weedtime.engine.events import ChainBroken, ChainContinued, NewChain, WeedCrime, WeedEvent
from weedtime.services.record_store import get_record, insert_record, update_record

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Base)

MAX_UPSERT_ATTEMPTS = 3


# ---------------------------------------------------------------------------
# Fresh records
# ---------------------------------------------------------------------------
def new_guild_stats(guild_id: int) -> GuildStats:
    return GuildStats(
        guild_id=guild_id,
        utc_offset_seconds=0,
        total_weed_times=0,
        total_weed_crimes=0,
        longest_chain=0,
    )


def new_user_stats(user_id: int) -> UserStats:
    return UserStats(
        user_id=user_id,
        total_weed_times=0,
        total_weed_crimes=0,
        chains_started=0,
        chains_broken=0,
    )


def _upsert(
    engine: Engine,
    model: type[R],
    key: int,
    factory: Callable[[int], R],
    mutator: Callable[[R], None],
) -> R:
    """Update the row for *key*, inserting a fresh one if it doesn't exist."""
    for attempt in range(1, MAX_UPSERT_ATTEMPTS + 1):
        row = update_record(engine, model, key, mutator)
        if row is not None:
            return row

        fresh = factory(key)
        mutator(fresh)
        if insert_record(engine, fresh):
            return fresh

        logger.debug(
            "%s %d created concurrently, retrying update (%d/%d)",
            model.__name__, key, attempt, MAX_UPSERT_ATTEMPTS,
        )
    raise RuntimeError(
        f"Could not upsert {model.__name__} {key} after {MAX_UPSERT_ATTEMPTS} attempts"
    )


def upsert_guild_stats(
    engine: Engine, guild_id: int, mutator: Callable[[GuildStats], None]
) -> GuildStats:
    return _upsert(engine, GuildStats, guild_id, new_guild_stats, mutator)


def upsert_user_stats(
    engine: Engine, user_id: int, mutator: Callable[[UserStats], None]
) -> UserStats:
    return _upsert(engine, UserStats, user_id, new_user_stats, mutator)


# ---------------------------------------------------------------------------
# Merge rules
# ---------------------------------------------------------------------------
def _raise_longest(chain: int) -> Callable[[GuildStats], None]:
    def mutate(stats: GuildStats) -> None:
        stats.total_weed_times += 1
        stats.longest_chain = max(stats.longest_chain, chain)
    return mutate


def _guild_mutator(event: WeedEvent) -> Callable[[GuildStats], None] | None:
    if isinstance(event, (NewChain, ChainContinued)):
        return _raise_longest(event.count)
    if isinstance(event, WeedCrime):
        def mutate(stats: GuildStats) -> None:
            stats.total_weed_crimes += 1
        return mutate
    return None  # ChainBroken has no community effect


def _user_mutator(event: WeedEvent) -> Callable[[UserStats], None]:
    if isinstance(event, NewChain):
        def mutate(stats: UserStats) -> None:
            stats.total_weed_times += 1
            stats.chains_started += 1
    elif isinstance(event, ChainContinued):
        def mutate(stats: UserStats) -> None:
            stats.total_weed_times += 1
    elif isinstance(event, ChainBroken):
        def mutate(stats: UserStats) -> None:
            stats.chains_broken += 1
    elif isinstance(event, WeedCrime):
        def mutate(stats: UserStats) -> None:
            stats.total_weed_crimes += 1
    else:
        raise TypeError(f"Unknown event type: {type(event).__name__}")
    return mutate


def apply_event(engine: Engine, event: WeedEvent) -> None:
    """Commit *event* to the guild and user records.

    The guild record is skipped for events outside a guild (DMs) and for
    :class:`ChainBroken`, which only counts against the participant.
    """
    user_mutate = _user_mutator(event)
    guild_mutate = _guild_mutator(event)

    if event.guild_id is not None and guild_mutate is not None:
        upsert_guild_stats(engine, event.guild_id, guild_mutate)
    upsert_user_stats(engine, event.user_id, user_mutate)

    logger.debug("Committed %r", event)


# ---------------------------------------------------------------------------
# Queries & settings
# ---------------------------------------------------------------------------
def get_guild_stats(engine: Engine, guild_id: int) -> GuildStats | None:
    return get_record(engine, GuildStats, guild_id)


def get_or_create_user_stats(engine: Engine, user_id: int) -> UserStats:
    """Fetch a user's stats, creating a zeroed row on first query."""
    for _ in range(MAX_UPSERT_ATTEMPTS):
        stats = get_record(engine, UserStats, user_id)
        if stats is not None:
            return stats
        fresh = new_user_stats(user_id)
        if insert_record(engine, fresh):
            return fresh
    raise RuntimeError(f"Could not load or create UserStats {user_id}")


def get_utc_offset(engine: Engine, guild_id: int | None) -> int:
    """The guild's stored UTC offset in seconds, 0 when unknown."""
    if guild_id is None:
        return 0
    stats = get_record(engine, GuildStats, guild_id)
    return stats.utc_offset_seconds if stats is not None else 0


def validate_utc_offset(hours: float) -> int:
    """Convert an hour offset to seconds, rejecting illegal zone offsets.

    Raises
    ------
    ValueError
        If *hours* is not a finite offset strictly inside ±24 h.
    """
    try:
        seconds = round(hours * 3600)
        timezone(timedelta(seconds=seconds))
    except (ValueError, OverflowError, TypeError) as exc:
        raise ValueError(f"Invalid UTC offset: {hours!r}") from exc
    return seconds


def set_utc_offset(engine: Engine, guild_id: int, offset_seconds: int) -> GuildStats:
    """Store a guild's UTC offset, creating the guild row if needed."""
    def mutate(stats: GuildStats) -> None:
        stats.utc_offset_seconds = offset_seconds

    stats = upsert_guild_stats(engine, guild_id, mutate)
    logger.info("Guild %d UTC offset set to %+d s", guild_id, offset_seconds)
    return stats
