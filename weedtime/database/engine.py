"""
weedtime.database.engine — Engine Factory & Thread Bridge
==========================================================

SQLAlchemy with psycopg2 blocks, and the bot lives on one asyncio loop.
Every stats read or write is therefore a plain synchronous function that
async code hands to :func:`run_db`, which runs it on the default thread
pool via ``asyncio.to_thread``.  No async driver is involved.

Usage::

    engine = create_db_engine()               # DATABASE_URL from .env
    init_db(engine)
    offset = await run_db(get_utc_offset, engine, guild_id)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine, make_url

from weedtime.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# Connection pool for a single bot process.  A 4:20 burst is a few dozen
# messages, each needing one offset read and up to two upserts.
POOL_OPTIONS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 10,
    "pool_recycle": 3600,
}


def create_db_engine(url: str | None = None) -> Engine:
    """Build the engine for *url*, or for ``DATABASE_URL`` when omitted.

    SQLite URLs (handy for local runs) skip the server pool settings.

    Raises
    ------
    RuntimeError
        If neither *url* nor ``DATABASE_URL`` is given.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and point it at your database."
        )

    parsed = make_url(url)
    options = {} if parsed.get_backend_name() == "sqlite" else dict(POOL_OPTIONS)
    engine = create_engine(parsed, echo=False, pool_pre_ping=True, **options)
    logger.info(
        "Database engine created → %s (%s)",
        parsed.host or parsed.database, parsed.get_backend_name(),
    )
    return engine


def init_db(engine: Engine) -> None:
    """Create any missing stats tables.

    Alembic owns the production schema; this only fills gaps on fresh
    dev databases and is a no-op once ``alembic upgrade head`` has run.
    """
    Base.metadata.create_all(engine)
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))


async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Await a synchronous DB function without blocking the event loop::

        stats = await run_db(get_guild_stats, engine, guild_id)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
