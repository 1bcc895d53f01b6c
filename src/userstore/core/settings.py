"""Settings for the user store.

All fields can be set via ``USERSTORE_*`` environment variables (e.g.
``USERSTORE_DATABASE_NAME=people.db``) or a ``.env`` file.  Unknown
variables are ignored so a shared ``.env`` does not break startup.

Fields
──────
database_url               : Explicit SQLAlchemy URL; ``None`` means derive
                             it from ``data_dir`` / ``database_name``, or use
                             an in-memory database when ``in_memory`` is set
in_memory                  : Use a throwaway in-memory database
data_dir                   : Directory holding file-backed databases
database_name              : File name of the database inside ``data_dir``
echo_sql                   : Log every SQL statement (SQLAlchemy ``echo``)
allow_main_thread_queries  : Allow blocking access from an event-loop thread
log_level                  : Structlog log level
json_logs                  : Force JSON logs (``None`` = auto-detect TTY)

Tags:
    settings, configuration, pydantic, environment, userstore
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UserStoreSettings(BaseSettings):
    """Validated, environment-driven configuration for ``UsersDatabase``."""

    model_config = SettingsConfigDict(
        env_prefix="USERSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str | None = None
    in_memory: bool = False
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".userstore",
        description="Directory holding file-backed databases",
    )
    database_name: str = "users.db"
    echo_sql: bool = False
    allow_main_thread_queries: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    @field_validator("database_name")
    @classmethod
    def _non_empty_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("database_name must not be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    @property
    def resolved_url(self) -> str:
        """SQLAlchemy URL this configuration points at."""
        if self.database_url:
            return self.database_url
        if self.in_memory:
            return "sqlite://"
        return f"sqlite:///{self.data_dir / self.database_name}"


__all__ = ["UserStoreSettings"]
