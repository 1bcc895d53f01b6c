"""SQLAlchemy engine factory and pre-configured session.

This module provides:

* ``create_users_engine``   -- Create a SA engine from a URL.
* ``UsersSession``          -- ``Session`` subclass with ``expire_on_commit=False``.
* ``users_session_factory`` -- ``sessionmaker`` producing ``UsersSession``.

Tags:
    userstore, orm, sqlalchemy, session, engine
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def is_memory_url(url: str) -> bool:
    """Return True when *url* points at a private in-memory SQLite database."""
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def create_users_engine(
    url: str = "sqlite://",
    *,
    echo: bool = False,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite://`` for in-memory, ``sqlite:///users.db``, ...)
    echo:
        If ``True``, log all SQL through the ``sqlalchemy.engine`` logger.
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    if not url.startswith("sqlite"):
        return _sa_create_engine(url, echo=echo, **kwargs)

    kwargs.setdefault("connect_args", {"check_same_thread": False})
    in_memory = is_memory_url(url)
    if in_memory:
        # One shared connection, otherwise every pooled connection gets its own empty database
        kwargs.setdefault("poolclass", StaticPool)

    engine = _sa_create_engine(url, echo=echo, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
        cursor = dbapi_connection.cursor()
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


class UsersSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Prevents lazy-load surprises after commit when rows are converted to
    ``User`` value objects outside the transaction.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def users_session_factory(engine: Engine) -> sessionmaker[UsersSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``UsersSession`` instances."""
    return sessionmaker(bind=engine, class_=UsersSession)
