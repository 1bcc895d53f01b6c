"""Data-access object for the ``users`` table.

Writes (``insert_user``, ``delete_all_users``) run synchronously through
the database's :class:`~userstore.reactive.QueryExecutor`. Reads return
lazy single-shot containers: nothing touches the database until the
``Maybe`` / ``Single`` is subscribed, awaited or blocked on.

Usage:
    >>> db = UsersDatabase.in_memory_database_builder().allow_main_thread_queries().build()
    >>> dao = db.user_dao()
    >>> dao.insert_user(User("id", "username", True))
    >>> dao.get_user_by_id("id").blocking_get()
    User(id='id', user_name='username', is_active=True)
    >>> dao.is_user_active("id").blocking_get()
    True

Tags:
    dao, repository, sqlalchemy, userstore
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from userstore.core.errors import DatabaseError, EmptyResultError
from userstore.core.logging import get_logger
from userstore.models import User
from userstore.orm.session import UsersSession
from userstore.orm.tables import UserTable
from userstore.reactive import Maybe, Single

if TYPE_CHECKING:
    from userstore.persistence.database import UsersDatabase

logger = get_logger(__name__)

T = TypeVar("T")


def _to_model(row: UserTable) -> User:
    return User(id=row.id, user_name=row.user_name, is_active=bool(row.is_active))


def _to_row(user: User) -> UserTable:
    return UserTable(id=user.id, user_name=user.user_name, is_active=bool(user.is_active))


class UserDao:
    """Insert-or-replace, fetch-by-id, active-flag and delete-all over ``users``.

    Obtain one through :meth:`UsersDatabase.user_dao`.
    """

    def __init__(self, database: UsersDatabase) -> None:
        self._db = database

    # -- writes --------------------------------------------------------------

    def insert_user(self, user: User) -> None:
        """Insert *user*, fully replacing any row with the same id."""
        self._db.executor.run(
            partial(self._execute, "insert_user", lambda s: s.merge(_to_row(user)), user_id=user.id)
        )

    def delete_all_users(self) -> None:
        """Remove every row from the table."""
        self._db.executor.run(partial(self._execute, "delete_all_users", self._delete_all))

    # -- reads ---------------------------------------------------------------

    def get_user_by_id(self, user_id: str) -> Maybe[User]:
        """Single-shot lookup; completes empty when no row has *user_id*."""
        return Maybe.from_callable(
            partial(self._execute, "get_user_by_id", partial(self._select_user, user_id), user_id=user_id),
            self._db.executor,
        )

    def is_user_active(self, user_id: str) -> Single[bool]:
        """Single-shot read of the ``isActive`` flag.

        Fails with ``EmptyResultError`` when no row has *user_id*.
        """
        return Single.from_callable(
            partial(self._execute, "is_user_active", partial(self._select_active, user_id), user_id=user_id),
            self._db.executor,
        )

    # -- unit-of-work helpers -------------------------------------------------

    def _execute(self, operation: str, work: Callable[[UsersSession], T], **context: Any) -> T:
        """Run *work* in its own transaction and translate SQLAlchemy failures."""
        try:
            with self._db.transaction() as session:
                result = work(session)
        except SQLAlchemyError as e:
            logger.error("database_operation_failed", operation=operation, error=str(e), **context)
            raise DatabaseError(f"{operation} failed", context=context, cause=e) from e
        logger.debug(operation, **context)
        return result

    @staticmethod
    def _select_user(user_id: str, session: UsersSession) -> User | None:
        row = session.get(UserTable, user_id)
        return _to_model(row) if row is not None else None

    @staticmethod
    def _select_active(user_id: str, session: UsersSession) -> bool:
        value = session.scalar(select(UserTable.is_active).where(UserTable.id == user_id))
        if value is None:
            raise EmptyResultError(f"No user with id {user_id!r}").with_context(user_id=user_id)
        return bool(value)

    @staticmethod
    def _delete_all(session: UsersSession) -> int:
        return session.execute(delete(UserTable)).rowcount


__all__ = ["UserDao"]
