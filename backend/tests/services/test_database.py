"""Unit of Work: verifies commit on success and rollback on every failure path."""

import asyncio

import pytest
from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError

from reward_tracker.core.errors import DatabaseError, ValidationError
from reward_tracker.infrastructure.database import is_unique_violation, unit_of_work
from reward_tracker.models import User


def _user(email: str) -> User:
    return User(username=email.split("@")[0], email=email)


async def _emails(db) -> list[str]:
    return list((await db.scalars(select(User.email))).all())


async def test_commits_on_success(test_db):
    async with unit_of_work(test_db):
        test_db.add(_user("ok@example.com"))
    assert await _emails(test_db) == ["ok@example.com"]


async def test_domain_error_rolls_back(test_db):
    with pytest.raises(ValidationError):
        async with unit_of_work(test_db):
            test_db.add(_user("gone@example.com"))
            await test_db.flush()
            raise ValidationError("stop")
    assert await _emails(test_db) == []


async def test_sqlalchemy_error_becomes_database_error(test_db):
    with pytest.raises(DatabaseError):
        async with unit_of_work(test_db):
            await test_db.execute(text("SELECT * FROM no_such_table"))


async def test_cancellation_rolls_back(test_db):
    with pytest.raises(asyncio.CancelledError):
        async with unit_of_work(test_db):
            test_db.add(_user("cancelled@example.com"))
            await test_db.flush()
            raise asyncio.CancelledError()
    assert await _emails(test_db) == []


async def test_balance_check_constraint_backstops_ledger(test_db):
    with pytest.raises(DatabaseError):
        async with unit_of_work(test_db):
            user = _user("neg@example.com")
            user.balance = -1.0
            test_db.add(user)
    assert await _emails(test_db) == []


@pytest.mark.parametrize(("message", "expected"), [
    ("UNIQUE constraint failed: users.email", True),
    ('duplicate key value violates unique constraint "uq_users_email" '
     "DETAIL: Key (email)=(a@example.com) already exists.", True),
    ("NOT NULL constraint failed: users.email", False),
    ("UNIQUE constraint failed: users.username", False),
])
def test_unique_violation_detection(message, expected):
    error = IntegrityError("INSERT INTO users ...", {}, Exception(message))
    assert is_unique_violation(error, "email") is expected
