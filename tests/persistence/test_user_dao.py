"""Tests for UserDao against an in-memory database."""

from __future__ import annotations

from dataclasses import replace

import pytest
from sqlalchemy import func, select

from userstore.core.errors import DatabaseError, EmptyResultError
from userstore.models import User
from userstore.orm.tables import UserTable
from userstore.persistence import UserDao


USER = User("id", "username", True)


class TestGetUserById:
    def test_gets_nothing_when_no_user_inserted(self, dao: UserDao) -> None:
        dao.get_user_by_id("123").test().assert_no_values()

    def test_insert_and_get_user(self, dao: UserDao) -> None:
        dao.insert_user(USER)

        dao.get_user_by_id(USER.id).test().assert_value(
            lambda u: u.id == USER.id and u.user_name == USER.user_name
        )

    def test_emission_equals_inserted_user(self, dao: UserDao) -> None:
        dao.insert_user(USER)

        dao.get_user_by_id(USER.id).test().assert_no_errors().assert_complete().assert_value(USER)

    def test_empty_result_completes_without_error(self, dao: UserDao) -> None:
        observer = dao.get_user_by_id("missing").test()

        observer.assert_no_values().assert_no_errors().assert_complete()

    def test_only_matching_id_is_returned(self, dao: UserDao) -> None:
        dao.insert_user(USER)
        other = User("other", "someone else", False)
        dao.insert_user(other)

        dao.get_user_by_id("other").test().assert_value(other)
        dao.get_user_by_id("id").test().assert_value(USER)

    def test_blocking_get(self, dao: UserDao) -> None:
        dao.insert_user(USER)

        assert dao.get_user_by_id(USER.id).blocking_get() == USER
        assert dao.get_user_by_id("nobody").blocking_get() is None


class TestInsertReplaces:
    def test_update_and_get_user(self, dao: UserDao) -> None:
        dao.insert_user(USER)

        updated = User(USER.id, "new username", False)
        dao.insert_user(updated)

        dao.get_user_by_id(USER.id).test().assert_value(
            lambda u: u.id == USER.id and u.user_name == "new username" and not u.is_active
        )

    def test_replace_discards_old_fields(self, dao: UserDao) -> None:
        dao.insert_user(USER)
        replacement = User(USER.id, "other name", False)

        dao.insert_user(replacement)

        dao.get_user_by_id(USER.id).test().assert_value_count(1).assert_value(replacement)

    def test_replace_keeps_one_row(self, database, dao: UserDao) -> None:
        dao.insert_user(USER)
        dao.insert_user(replace(USER, user_name="again"))

        with database.transaction() as session:
            assert session.scalar(select(func.count()).select_from(UserTable)) == 1


class TestDeleteAllUsers:
    def test_delete_and_get_user(self, dao: UserDao) -> None:
        dao.insert_user(USER)

        dao.delete_all_users()

        dao.get_user_by_id(USER.id).test().assert_no_values()

    def test_deletes_every_row(self, dao: UserDao) -> None:
        ids = ["a", "b", "c"]
        for user_id in ids:
            dao.insert_user(User(user_id, f"user {user_id}", True))

        dao.delete_all_users()

        for user_id in ids:
            dao.get_user_by_id(user_id).test().assert_no_values()

    def test_delete_on_empty_table(self, dao: UserDao) -> None:
        dao.delete_all_users()

        dao.get_user_by_id("id").test().assert_no_values()


class TestIsUserActive:
    def test_gets_user_is_active(self, dao: UserDao) -> None:
        dao.insert_user(USER)

        dao.is_user_active(USER.id).test().assert_value(True)

    def test_gets_user_is_not_active(self, dao: UserDao) -> None:
        dao.insert_user(replace(USER, is_active=False))

        dao.is_user_active(USER.id).test().assert_value(False)

    def test_value_is_a_bool(self, dao: UserDao) -> None:
        dao.insert_user(USER)

        assert dao.is_user_active(USER.id).blocking_get() is True

    def test_missing_user_fails_with_empty_result(self, dao: UserDao) -> None:
        observer = dao.is_user_active("nobody").test()

        observer.assert_no_values().assert_error(EmptyResultError).assert_not_complete()
        assert observer.errors[0].context == {"user_id": "nobody"}

    def test_missing_user_raises_on_blocking_get(self, dao: UserDao) -> None:
        with pytest.raises(EmptyResultError):
            dao.is_user_active("nobody").blocking_get()


class TestLaziness:
    def test_query_runs_on_subscription(self, dao: UserDao) -> None:
        pending = dao.get_user_by_id(USER.id)

        dao.insert_user(USER)

        pending.test().assert_value(USER)

    def test_each_subscription_reads_a_fresh_snapshot(self, dao: UserDao) -> None:
        query = dao.is_user_active(USER.id)
        dao.insert_user(USER)
        query.test().assert_value(True)

        dao.insert_user(replace(USER, is_active=False))

        query.test().assert_value(False)

    def test_map_over_query(self, dao: UserDao) -> None:
        dao.insert_user(USER)

        dao.get_user_by_id(USER.id).map(lambda u: u.user_name).test().assert_value("username")


class TestErrorTranslation:
    def test_constraint_violation_is_wrapped(self, dao: UserDao) -> None:
        broken = User("id", None, True)  # type: ignore[arg-type]

        with pytest.raises(DatabaseError) as exc_info:
            dao.insert_user(broken)

        assert exc_info.value.context == {"user_id": "id"}
        assert exc_info.value.cause is not None
        dao.get_user_by_id("id").test().assert_no_values()
