"""Core primitives for userstore: errors, results, logging and settings.

Modules
-------
errors      UserStoreError hierarchy and ErrorCategory
result      Ok / Err envelope used by the result containers
logging     structlog configuration and logger access
settings    UserStoreSettings (pydantic-settings)
"""

from userstore.core.errors import (
    ConfigError,
    DatabaseClosedError,
    DatabaseError,
    EmptyResultError,
    ErrorCategory,
    MainThreadQueryError,
    UserStoreError,
)
from userstore.core.result import Err, Ok, Result, try_result

__all__ = [
    "ErrorCategory",
    "UserStoreError",
    "ConfigError",
    "DatabaseError",
    "DatabaseClosedError",
    "MainThreadQueryError",
    "EmptyResultError",
    "Ok",
    "Err",
    "Result",
    "try_result",
]
