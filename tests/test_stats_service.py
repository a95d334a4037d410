"""
tests/test_stats_service.py — Stat Committer & Record Store Tests
==================================================================

Uses an in-memory SQLite database via the shared conftest fixtures.
"""

from __future__ import annotations

import random
from unittest.mock import patch

import pytest
from sqlalchemy.orm import Session

from weedtime.database.models import GuildStats, UserStats
from weedtime.engine.events import ChainBroken, ChainContinued, NewChain, WeedCrime
from weedtime.services import stats_service
from weedtime.services.record_store import get_record, insert_record, update_record

GUILD = 100
USER = 1000


def _guild(engine, guild_id: int = GUILD) -> GuildStats | None:
    with Session(engine) as session:
        return session.get(GuildStats, guild_id)


def _user(engine, user_id: int = USER) -> UserStats | None:
    with Session(engine) as session:
        return session.get(UserStats, user_id)


class TestRecordStore:
    def test_get_missing_returns_none(self, db_engine):
        assert get_record(db_engine, GuildStats, 1) is None

    def test_insert_then_conflict(self, db_engine):
        assert insert_record(db_engine, stats_service.new_guild_stats(1)) is True
        assert insert_record(db_engine, stats_service.new_guild_stats(1)) is False

    def test_update_missing_returns_none(self, db_engine):
        assert update_record(db_engine, UserStats, 5, lambda s: None) is None

    def test_update_applies_mutator(self, db_engine):
        insert_record(db_engine, stats_service.new_user_stats(5))

        def bump(stats):
            stats.chains_broken += 2

        updated = update_record(db_engine, UserStats, 5, bump)
        assert updated.chains_broken == 2
        assert get_record(db_engine, UserStats, 5).chains_broken == 2

    def test_keys_used_verbatim(self, db_engine):
        snowflake = 1083097710112022739
        insert_record(db_engine, stats_service.new_guild_stats(snowflake))
        assert get_record(db_engine, GuildStats, snowflake).guild_id == snowflake


class TestApplyEvent:
    def test_new_chain(self, db_engine):
        stats_service.apply_event(db_engine, NewChain(user_id=USER, guild_id=GUILD))

        guild = _guild(db_engine)
        assert guild.total_weed_times == 1
        assert guild.longest_chain == 1
        assert guild.total_weed_crimes == 0
        user = _user(db_engine)
        assert user.total_weed_times == 1
        assert user.chains_started == 1

    def test_chain_continued_raises_longest(self, db_engine):
        stats_service.apply_event(db_engine, NewChain(user_id=USER, guild_id=GUILD))
        stats_service.apply_event(
            db_engine, ChainContinued(user_id=2000, guild_id=GUILD, count=2)
        )

        guild = _guild(db_engine)
        assert guild.total_weed_times == 2
        assert guild.longest_chain == 2
        user = _user(db_engine, 2000)
        assert user.total_weed_times == 1
        assert user.chains_started == 0

    def test_shorter_chain_keeps_longest(self, db_engine):
        stats_service.apply_event(
            db_engine, ChainContinued(user_id=USER, guild_id=GUILD, count=7)
        )
        stats_service.apply_event(
            db_engine, ChainContinued(user_id=USER, guild_id=GUILD, count=3)
        )
        assert _guild(db_engine).longest_chain == 7

    def test_chain_broken_only_touches_user(self, db_engine):
        stats_service.apply_event(db_engine, ChainBroken(user_id=USER, guild_id=GUILD))

        assert _guild(db_engine) is None
        user = _user(db_engine)
        assert user.chains_broken == 1
        assert user.total_weed_times == 0

    def test_weed_crime(self, db_engine):
        stats_service.apply_event(db_engine, WeedCrime(user_id=USER, guild_id=GUILD))

        guild = _guild(db_engine)
        assert guild.total_weed_crimes == 1
        assert guild.longest_chain == 0
        assert _user(db_engine).total_weed_crimes == 1

    def test_new_chain_count_raises_longest(self, db_engine):
        stats_service.apply_event(
            db_engine, NewChain(user_id=USER, guild_id=GUILD, count=2)
        )
        guild = _guild(db_engine)
        assert guild.longest_chain == 2
        assert guild.total_weed_times == 1
        assert _user(db_engine).chains_started == 1

    def test_crime_then_chain_floors_longest_at_one(self, db_engine):
        stats_service.apply_event(db_engine, WeedCrime(user_id=USER, guild_id=GUILD))
        assert _guild(db_engine).longest_chain == 0
        stats_service.apply_event(db_engine, NewChain(user_id=USER, guild_id=GUILD))
        assert _guild(db_engine).longest_chain == 1

    def test_dm_event_skips_guild(self, db_engine):
        stats_service.apply_event(db_engine, NewChain(user_id=USER, guild_id=None))

        with Session(db_engine) as session:
            assert session.query(GuildStats).count() == 0
        assert _user(db_engine).chains_started == 1

    def test_replay_is_not_idempotent(self, db_engine):
        event = WeedCrime(user_id=USER, guild_id=GUILD)
        stats_service.apply_event(db_engine, event)
        stats_service.apply_event(db_engine, event)

        assert _guild(db_engine).total_weed_crimes == 2
        assert _user(db_engine).total_weed_crimes == 2

    def test_unknown_event_rejected(self, db_engine):
        with pytest.raises(TypeError):
            stats_service.apply_event(db_engine, object())

    def test_longest_chain_never_decreases(self, db_engine):
        rng = random.Random(420)
        before = 0
        for _ in range(40):
            if rng.random() < 0.3:
                event = NewChain(user_id=rng.randint(1, 5), guild_id=GUILD)
            else:
                event = ChainContinued(
                    user_id=rng.randint(1, 5), guild_id=GUILD, count=rng.randint(2, 15)
                )
            stats_service.apply_event(db_engine, event)
            after = _guild(db_engine).longest_chain
            assert after >= before
            assert after >= 1
            before = after


class TestConcurrentCreate:
    def test_lost_insert_race_retries_update(self, db_engine):
        """Row created by someone else between our update and insert."""
        insert_record(db_engine, GuildStats(
            guild_id=GUILD, utc_offset_seconds=0, total_weed_times=5,
            total_weed_crimes=0, longest_chain=3,
        ))
        real_update = stats_service.update_record
        calls = []

        def flaky_update(engine, model, key, mutator):
            calls.append(model)
            if len(calls) == 1:
                return None  # pretend the row wasn't there yet
            return real_update(engine, model, key, mutator)

        with patch.object(stats_service, "update_record", side_effect=flaky_update):
            stats_service.upsert_guild_stats(
                db_engine, GUILD, stats_service._raise_longest(1)
            )

        guild = _guild(db_engine)
        assert guild.total_weed_times == 6
        assert guild.longest_chain == 3
        assert len(calls) == 2

    def test_gives_up_after_max_attempts(self, db_engine):
        with (
            patch.object(stats_service, "update_record", return_value=None),
            patch.object(stats_service, "insert_record", return_value=False),
            pytest.raises(RuntimeError),
        ):
            stats_service.upsert_user_stats(db_engine, USER, lambda s: None)


class TestQueries:
    def test_get_or_create_user_stats(self, db_engine):
        stats = stats_service.get_or_create_user_stats(db_engine, USER)
        assert stats.user_id == USER
        assert stats.total_weed_times == 0
        assert _user(db_engine) is not None

        again = stats_service.get_or_create_user_stats(db_engine, USER)
        assert again.user_id == USER

    def test_guild_stats_missing(self, db_engine):
        assert stats_service.get_guild_stats(db_engine, GUILD) is None

    def test_utc_offset_defaults_to_zero(self, db_engine):
        assert stats_service.get_utc_offset(db_engine, GUILD) == 0
        assert stats_service.get_utc_offset(db_engine, None) == 0

    def test_set_utc_offset_creates_guild(self, db_engine):
        stats_service.set_utc_offset(db_engine, GUILD, -18000)

        guild = _guild(db_engine)
        assert guild.utc_offset_seconds == -18000
        assert guild.total_weed_times == 0
        assert stats_service.get_utc_offset(db_engine, GUILD) == -18000

    def test_set_utc_offset_keeps_counters(self, db_engine):
        stats_service.apply_event(db_engine, NewChain(user_id=USER, guild_id=GUILD))
        stats_service.set_utc_offset(db_engine, GUILD, 3600)

        guild = _guild(db_engine)
        assert guild.utc_offset_seconds == 3600
        assert guild.total_weed_times == 1


class TestValidateUtcOffset:
    @pytest.mark.parametrize(
        "hours, seconds",
        [(0, 0), (-5, -18000), (5.5, 19800), (14, 50400), (-23.5, -84600)],
    )
    def test_valid(self, hours, seconds):
        assert stats_service.validate_utc_offset(hours) == seconds

    @pytest.mark.parametrize("hours", [24, -24, 100, float("nan"), float("inf")])
    def test_invalid(self, hours):
        with pytest.raises(ValueError):
            stats_service.validate_utc_offset(hours)
