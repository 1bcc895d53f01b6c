"""Table definitions for the user store.

The attribute names are Pythonic; the column names keep the persisted
layout (``id``, ``userName``, ``isActive``).

Tags:
    userstore, orm, sqlalchemy, tables
"""

from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from userstore.orm.base import UsersBase


class UserTable(UsersBase):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column("id", Text, primary_key=True)
    user_name: Mapped[str] = mapped_column("userName", Text, nullable=False)
    is_active: Mapped[bool] = mapped_column("isActive", Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"UserTable(id={self.id!r}, user_name={self.user_name!r}, is_active={self.is_active!r})"


__all__ = ["UserTable"]
