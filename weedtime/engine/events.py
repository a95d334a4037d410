"""
weedtime.engine.events — Classified Message Outcomes
=====================================================

Every qualifying message resolves to exactly one of these events.  The
set is closed: the committer (:mod:`weedtime.services.stats_service`)
matches on the concrete type, and "nothing happened" is ``None`` rather
than a fifth class.

Each event carries exactly the fields its aggregate mutation needs.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TypeAlias

__all__ = [
    "ChainBroken",
    "ChainContinued",
    "MessageClass",
    "NewChain",
    "WeedCrime",
    "WeedEvent",
]


class MessageClass(enum.StrEnum):
    """Classifier verdict for a single inbound message."""
    IGNORED = "IGNORED"        # NoOp: nothing sent, nothing committed
    WEED_CRIME = "WEED_CRIME"  # marker outside the window
    WEED_TIME = "WEED_TIME"    # in the window; the chain tracker decides


@dataclass(frozen=True, slots=True)
class NewChain:
    """A participant started a chain.

    *count* is 1 except under ``first_continuation_is_new_chain``, where
    the 1→2 step is also reported as a start and carries 2.
    """

    user_id: int
    guild_id: int | None
    count: int = 1


@dataclass(frozen=True, slots=True)
class ChainContinued:
    """A participant extended the chain to *count*."""

    user_id: int
    guild_id: int | None
    count: int


@dataclass(frozen=True, slots=True)
class ChainBroken:
    """A participant ended an active chain without extending it."""

    user_id: int
    guild_id: int | None


@dataclass(frozen=True, slots=True)
class WeedCrime:
    """Marker posted outside the window."""

    user_id: int
    guild_id: int | None


WeedEvent: TypeAlias = NewChain | ChainContinued | ChainBroken | WeedCrime
