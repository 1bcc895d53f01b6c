"""
Shared pytest fixtures for userstore tests.

This module provides:
- An in-memory database that allows blocking access from any thread
- The DAO bound to it
- Logging context cleanup for test isolation

Usage:
    def test_something(dao):
        dao.insert_user(User("id", "username", True))
"""

import sys
from pathlib import Path
from typing import Generator

import pytest

# Ensure userstore package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from userstore.core.logging import clear_context
from userstore.persistence import UserDao, UsersDatabase


@pytest.fixture(autouse=True)
def clean_log_context() -> Generator[None, None, None]:
    """Clear bound structlog context before and after each test."""
    clear_context()
    yield
    clear_context()


@pytest.fixture
def database() -> Generator[UsersDatabase, None, None]:
    """
    In-memory database, closed after the test.

    Built with ``allow_main_thread_queries()`` so tests may block on
    results even from inside an event loop.
    """
    db = UsersDatabase.in_memory_database_builder().allow_main_thread_queries().build()
    yield db
    db.close()


@pytest.fixture
def dao(database: UsersDatabase) -> UserDao:
    return database.user_dao()
