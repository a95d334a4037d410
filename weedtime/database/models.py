"""
weedtime.database.models — SQLAlchemy 2.0 Data Models
======================================================

Tables:
- guild_stats  — Per-community aggregate counters + UTC offset
- user_stats   — Per-participant aggregate counters

Both tables are keyed by the raw Discord snowflake, used verbatim.
Chain state is *not* stored here; it lives in memory
(see :mod:`weedtime.engine.chain`) and resets on restart.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Weed Time ORM models."""


# ---------------------------------------------------------------------------
# GuildStats — one row per community
# ---------------------------------------------------------------------------
class GuildStats(Base):
    __tablename__ = "guild_stats"

    guild_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    utc_offset_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_weed_times: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_weed_crimes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    longest_chain: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<GuildStats guild={self.guild_id} times={self.total_weed_times} "
            f"crimes={self.total_weed_crimes} longest={self.longest_chain}>"
        )


# ---------------------------------------------------------------------------
# UserStats — one row per participant, shared across communities
# ---------------------------------------------------------------------------
class UserStats(Base):
    __tablename__ = "user_stats"

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    total_weed_times: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_weed_crimes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    chains_started: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    chains_broken: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<UserStats user={self.user_id} times={self.total_weed_times} "
            f"started={self.chains_started} broken={self.chains_broken}>"
        )
