"""The users database: engine, schema, sessions and the DAO.

``UsersDatabase`` owns one SQLAlchemy engine, creates the ``users`` table
on build, and hands out a single :class:`~userstore.persistence.dao.UserDao`.
Build it through a builder::

    # throwaway database, e.g. for tests
    db = UsersDatabase.in_memory_database_builder().allow_main_thread_queries().build()

    # file-backed database under the configured data directory
    db = UsersDatabase.database_builder("users.db").build()

    # everything from USERSTORE_* environment variables
    db = UsersDatabase.from_settings()

Threading policy:
    All access is serialized with one re-entrant lock. Unless
    ``allow_main_thread_queries()`` was requested, blocking access from a
    thread running an asyncio event loop raises ``MainThreadQueryError``;
    awaiting the DAO's ``Maybe`` / ``Single`` results is always allowed and
    runs the query on a worker thread.

Tags:
    database, sqlalchemy, sqlite, builder, userstore
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from userstore.core.errors import ConfigError, DatabaseClosedError
from userstore.core.logging import get_logger
from userstore.core.settings import UserStoreSettings
from userstore.orm.base import UsersBase
from userstore.orm.session import (
    UsersSession,
    create_users_engine,
    is_memory_url,
    users_session_factory,
)
from userstore.persistence.dao import UserDao
from userstore.reactive import QueryExecutor

logger = get_logger(__name__)


class UsersDatabaseBuilder:
    """Collects options for a :class:`UsersDatabase` before building it."""

    def __init__(self, url: str) -> None:
        self._url = url
        self._allow_main_thread_queries = False
        self._echo = False

    def allow_main_thread_queries(self) -> UsersDatabaseBuilder:
        """Permit blocking access from an event-loop thread (tests, scripts)."""
        self._allow_main_thread_queries = True
        return self

    def echo_sql(self, enabled: bool = True) -> UsersDatabaseBuilder:
        """Log every SQL statement through the ``sqlalchemy.engine`` logger."""
        self._echo = enabled
        return self

    def build(self) -> UsersDatabase:
        return UsersDatabase(
            self._url,
            allow_main_thread_queries=self._allow_main_thread_queries,
            echo=self._echo,
        )


class UsersDatabase:
    """Single-table user database backed by SQLAlchemy.

    Parameters:
        url: SQLAlchemy database URL.
        allow_main_thread_queries: See the module docstring.
        echo: Forwarded to the engine.
    """

    def __init__(
        self,
        url: str,
        *,
        allow_main_thread_queries: bool = False,
        echo: bool = False,
    ) -> None:
        self.url = url
        self.in_memory = is_memory_url(url)
        self._lock = threading.RLock()
        self.executor = QueryExecutor(
            allow_main_thread=allow_main_thread_queries,
            lock=self._lock,
        )
        self._engine = create_users_engine(url, echo=echo)
        UsersBase.metadata.create_all(self._engine)
        self._session_factory = users_session_factory(self._engine)
        self._user_dao: UserDao | None = None
        self._closed = False
        logger.info("database_opened", url=url, in_memory=self.in_memory)

    # -- builders ------------------------------------------------------------

    @classmethod
    def in_memory_database_builder(cls) -> UsersDatabaseBuilder:
        """Builder for a private in-memory database that vanishes on close."""
        return UsersDatabaseBuilder("sqlite://")

    @classmethod
    def database_builder(
        cls,
        name: str | Path,
        data_dir: Path | None = None,
    ) -> UsersDatabaseBuilder:
        """Builder for a file-backed SQLite database.

        A relative *name* is resolved against *data_dir*, which defaults to
        ``UserStoreSettings().data_dir``. The directory is created if missing.
        """
        if not str(name).strip():
            raise ConfigError("Database name must not be empty")
        path = Path(name)
        if not path.is_absolute():
            path = (data_dir or UserStoreSettings().data_dir) / path
        path.parent.mkdir(parents=True, exist_ok=True)
        return UsersDatabaseBuilder(f"sqlite:///{path}")

    @classmethod
    def from_settings(cls, settings: UserStoreSettings | None = None) -> UsersDatabase:
        """Build a database from ``UserStoreSettings`` (read from the environment when omitted)."""
        settings = settings or UserStoreSettings()
        if settings.database_url is None and not settings.in_memory:
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        builder = UsersDatabaseBuilder(settings.resolved_url).echo_sql(settings.echo_sql)
        if settings.allow_main_thread_queries:
            builder.allow_main_thread_queries()
        return builder.build()

    # -- access --------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return not self._closed

    def user_dao(self) -> UserDao:
        """Return the DAO bound to this database (the same instance every call)."""
        if self._closed:
            raise DatabaseClosedError()
        if self._user_dao is None:
            self._user_dao = UserDao(self)
        return self._user_dao

    @contextmanager
    def transaction(self) -> Iterator[UsersSession]:
        """Yield a session inside a transaction that commits on success."""
        with self._lock:
            if self._closed:
                raise DatabaseClosedError()
            with self._session_factory() as session, session.begin():
                yield session

    def close(self) -> None:
        """Dispose of the engine. In-memory data is discarded."""
        with self._lock:
            if self._closed:
                return
            self._engine.dispose()
            self._closed = True
        logger.info("database_closed", url=self.url)

    def __enter__(self) -> UsersDatabase:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"UsersDatabase({self.url!r}, {state})"


__all__ = ["UsersDatabase", "UsersDatabaseBuilder"]
