"""Domain models for the user store."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class User:
    """A stored user.

    ``id`` is the primary key and never changes; re-inserting a ``User``
    with the same ``id`` replaces every other field. Use
    ``dataclasses.replace(user, is_active=False)`` to derive an updated copy.
    """

    id: str
    user_name: str
    is_active: bool = True


__all__ = ["User"]
