"""Tests for userstore.core.errors module."""

import pytest

from userstore.core.errors import (
    ConfigError,
    DatabaseClosedError,
    DatabaseError,
    EmptyResultError,
    ErrorCategory,
    MainThreadQueryError,
    UserStoreError,
)


class TestUserStoreError:
    def test_defaults(self):
        error = UserStoreError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.category == ErrorCategory.INTERNAL
        assert error.context == {}
        assert error.cause is None

    def test_custom_category(self):
        error = UserStoreError("x", category=ErrorCategory.DATABASE)
        assert error.category == ErrorCategory.DATABASE

    def test_cause_is_chained(self):
        cause = RuntimeError("driver failure")
        error = DatabaseError("insert failed", cause=cause)
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_with_context_is_fluent(self):
        error = DatabaseError("failed")
        assert error.with_context(user_id="42", operation="insert_user") is error
        assert error.context == {"user_id": "42", "operation": "insert_user"}

    def test_to_dict(self):
        error = DatabaseError("failed", context={"user_id": "1"}, cause=ValueError("bad"))
        assert error.to_dict() == {
            "error_type": "DatabaseError",
            "message": "failed",
            "category": "DATABASE",
            "context": {"user_id": "1"},
            "cause": "bad",
        }

    def test_to_dict_omits_empty_fields(self):
        assert ConfigError("bad config").to_dict() == {
            "error_type": "ConfigError",
            "message": "bad config",
            "category": "CONFIG",
        }

    def test_repr(self):
        assert repr(ConfigError("oops")) == "ConfigError('oops', category=CONFIG)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_cls",
        [DatabaseClosedError, MainThreadQueryError, EmptyResultError],
    )
    def test_database_subclasses(self, error_cls):
        error = error_cls() if error_cls is not EmptyResultError else error_cls("no row")
        assert isinstance(error, DatabaseError)
        assert isinstance(error, UserStoreError)
        assert error.category == ErrorCategory.DATABASE

    def test_default_messages(self):
        assert "closed database" in str(DatabaseClosedError())
        assert "event loop thread" in str(MainThreadQueryError())

    def test_config_error_category(self):
        assert ConfigError("x").category == ErrorCategory.CONFIG
