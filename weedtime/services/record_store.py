"""
weedtime.services.record_store — Keyed Record Access
======================================================

Three primitives over the ``guild_stats`` / ``user_stats`` tables, keyed
by the Discord snowflake:

- :func:`get_record`    — fetch a detached copy, or ``None``.
- :func:`insert_record` — insert a new row; ``False`` if the key already exists.
- :func:`update_record` — row-locked read-modify-write; ``None`` if missing.

All three are synchronous.  Call them through ``run_db`` from async code.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from weedtime.database.models import Base

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Base)


def _primary_key_column(model: type[Base]):
    pk = model.__mapper__.primary_key
    if len(pk) != 1:
        raise ValueError(f"{model.__name__} must have a single-column primary key")
    return pk[0]


def get_record(engine: Engine, model: type[R], key: int) -> R | None:
    """Return the row for *key*, detached from its session, or ``None``."""
    with Session(engine, expire_on_commit=False) as session:
        row = session.get(model, key)
        if row is not None:
            session.expunge(row)
        return row


def insert_record(engine: Engine, record: Base) -> bool:
    """Insert *record*.  Returns ``False`` when its key already exists.

    A ``False`` return means another caller created the row first; the
    caller is expected to retry with :func:`update_record`.
    """
    with Session(engine, expire_on_commit=False) as session:
        session.add(record)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.debug("Insert conflict for %r", record)
            return False
        session.refresh(record)
        session.expunge(record)
        return True


def update_record(
    engine: Engine,
    model: type[R],
    key: int,
    mutator: Callable[[R], None],
) -> R | None:
    """Apply *mutator* to the row for *key* under a row lock.

    ``SELECT … FOR UPDATE`` holds concurrent writers of the same key until
    this transaction commits, so increments never overwrite each other.
    (SQLite has no row locks; its database-level write lock serialises
    writers instead.)

    Returns the updated, detached row, or ``None`` if *key* does not exist.
    """
    pk_col = _primary_key_column(model)
    with Session(engine, expire_on_commit=False) as session:
        row = session.scalar(
            select(model).where(pk_col == key).with_for_update()
        )
        if row is None:
            return None
        mutator(row)
        session.commit()
        session.expunge(row)
        return row
