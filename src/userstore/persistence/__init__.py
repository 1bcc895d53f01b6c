"""Persistence layer: the users database and its data-access object."""

from userstore.persistence.dao import UserDao
from userstore.persistence.database import UsersDatabase, UsersDatabaseBuilder

__all__ = ["UserDao", "UsersDatabase", "UsersDatabaseBuilder"]
