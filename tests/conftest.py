"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import itertools
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from weedtime.database.models import Base
from weedtime.engine.transport import MessageHandle

BOT_ID = 1

# 4:20 PM UTC — in the default window
WEED_TS = datetime(2026, 4, 20, 16, 20, 5, tzinfo=UTC)


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Weed Time tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def transport() -> MagicMock:
    """A fake ChainTransport.

    ``send_media`` hands out fresh message ids stamped with
    ``transport.sent_at`` (defaults to :data:`WEED_TS`); ``edit_message``
    returns the handle it was given.
    """
    fake = MagicMock()
    fake.current_actor_id.return_value = BOT_ID
    fake.sent_at = WEED_TS
    ids = itertools.count(9000)

    async def _send(channel_id, asset, content=None):
        return MessageHandle(
            message_id=next(ids),
            channel_id=channel_id,
            timestamp=fake.sent_at,
            attachment_ids=(77,),
        )

    async def _edit(handle, content=None, *, remove_attachments=False):
        return handle

    fake.send_media = AsyncMock(side_effect=_send)
    fake.edit_message = AsyncMock(side_effect=_edit)
    return fake
