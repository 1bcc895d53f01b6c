"""SQLAlchemy 2.0 ORM layer for userstore.

Modules
-------
base        UsersBase (declarative base)
session     Engine factory, UsersSession, session factory
tables      UserTable (the ``users`` table)
"""

from __future__ import annotations

from userstore.orm.base import UsersBase
from userstore.orm.session import (
    UsersSession,
    create_users_engine,
    is_memory_url,
    users_session_factory,
)
from userstore.orm.tables import UserTable

__all__ = [
    "UsersBase",
    "UsersSession",
    "create_users_engine",
    "is_memory_url",
    "users_session_factory",
    "UserTable",
]
