"""
Structured error types for the user store.

Every failure raised by userstore extends :class:`UserStoreError`, which
carries a category, a free-form context mapping, and an optional chained
cause. A missing row is *not* an error for ``get_user_by_id`` (the
``Maybe`` simply completes empty); it is only an error for queries that
promise a value, such as ``is_user_active``.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────┐
        │                    UserStoreError                     │
        │            (category, context, cause)                 │
        ├──────────────────────────────────────────────────────┤
        │   ConfigError               DatabaseError             │
        │   (CONFIG)                  (DATABASE)                │
        │                                 │                     │
        │                 DatabaseClosedError                   │
        │                 MainThreadQueryError                  │
        │                 EmptyResultError                      │
        └──────────────────────────────────────────────────────┘

Examples:
    >>> error = DatabaseError("insert failed").with_context(user_id="42")
    >>> error.to_dict()["context"]
    {'user_id': '42'}

Tags:
    errors, exceptions, error-hierarchy, userstore
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    CONFIG = "CONFIG"
    DATABASE = "DATABASE"
    INTERNAL = "INTERNAL"


class UserStoreError(Exception):
    """
    Base exception for all userstore errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``cause`` is chained onto ``__cause__`` so tracebacks keep
    the original SQLAlchemy or driver exception.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> UserStoreError:
        """
        Add context to this error (fluent API).

        Usage:
            raise DatabaseError("Failed").with_context(operation="insert_user")
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(UserStoreError):
    """Invalid settings or builder usage."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(UserStoreError):
    """Database query or transaction error."""

    default_category = ErrorCategory.DATABASE


class DatabaseClosedError(DatabaseError):
    """Operation attempted on a database that has been closed."""

    def __init__(self, message: str = "Attempt to use a closed database", **kwargs: Any):
        super().__init__(message, **kwargs)


class MainThreadQueryError(DatabaseError):
    """Synchronous database access from a thread running an event loop.

    Raised unless the database was built with ``allow_main_thread_queries()``.
    Await the result container instead, or opt in explicitly for tests.
    """

    def __init__(
        self,
        message: str = (
            "Cannot access database on the event loop thread since it may "
            "block it for a long period of time"
        ),
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)


class EmptyResultError(DatabaseError):
    """A query that must produce a value returned no row."""


__all__ = [
    "ErrorCategory",
    "UserStoreError",
    "ConfigError",
    "DatabaseError",
    "DatabaseClosedError",
    "MainThreadQueryError",
    "EmptyResultError",
]
