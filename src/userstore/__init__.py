"""
userstore - a reactive data-access layer over a single ``users`` table.

Quick start::

    from userstore import User, UsersDatabase

    with UsersDatabase.in_memory_database_builder().allow_main_thread_queries().build() as db:
        dao = db.user_dao()
        dao.insert_user(User("id", "username", True))
        dao.get_user_by_id("id").test().assert_value(lambda u: u.user_name == "username")
"""

__version__ = "0.1.0"

from userstore.models import User
from userstore.persistence import UserDao, UsersDatabase, UsersDatabaseBuilder
from userstore.reactive import Maybe, QueryExecutor, Single, TestObserver

__all__ = [
    "User",
    "UserDao",
    "UsersDatabase",
    "UsersDatabaseBuilder",
    "Maybe",
    "Single",
    "QueryExecutor",
    "TestObserver",
]
