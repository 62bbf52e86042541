"""Ledger: atomic balance and counter adjustments with a non-negative balance.

Invariants:
    - adjust_balance rejects any delta that would make the balance negative, and the
      balance is left unchanged
    - Every write is a single guarded UPDATE with the arithmetic done by the store
      (balance = balance + :delta), never read-modify-write in Python
    - credit_* helpers run inside the CALLER's transaction; only adjust_balance opens
      its own unit of work
    - No automatic retries: a DatabaseError is surfaced to the caller

Design Decisions:
    - The guard `balance + :delta >= 0` is repeated in the WHERE clause even after the
      locked read: on stores without row locks a concurrent debit can land between
      the read and the write, and the guarded UPDATE then matches zero rows
    - updated_at is bumped by every adjustment
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.core.errors import ResourceNotFoundError, ValidationError
from reward_tracker.core.ledger_rules import apply_delta, check_delta
from reward_tracker.infrastructure.database import unit_of_work
from reward_tracker.models.user import User
from reward_tracker.services.lookups import get_user_for_update

logger = logging.getLogger(__name__)


class Ledger:
    """Balance and reward-counter adjustments for users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def adjust_balance(self, user_id: UUID, delta: float) -> float:
        """Apply `delta` to the user's balance in its own transaction; return the new balance."""
        delta = check_delta(delta)
        async with unit_of_work(self.db):
            new_balance = await self.apply_balance_delta(user_id, delta)
        logger.info(
            "Balance adjusted",
            extra={"user_id": str(user_id), "delta": delta, "balance": new_balance},
        )
        return new_balance

    async def apply_balance_delta(self, user_id: UUID, delta: float) -> float:
        """Apply `delta` inside the caller's transaction; return the new balance."""
        user = await get_user_for_update(self.db, user_id)
        try:
            apply_delta(user.balance, delta)
        except ValidationError:
            logger.warning(
                "Balance adjustment rejected",
                extra={"user_id": str(user_id), "delta": delta, "balance": user.balance},
            )
            raise

        result = await self.db.execute(
            update(User)
            .where(User.id == user_id, User.balance + delta >= 0)
            .values(balance=User.balance + delta, updated_at=_now())
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            raise ValidationError(
                "invalid balance: cannot go below zero", field="balance",
            )
        await self.db.refresh(user, ["balance", "updated_at"])
        return user.balance

    async def credit_referral(self, user_id: UUID, bonus: float) -> None:
        """Add `bonus` to balance and 1 to referrals in ONE statement."""
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                balance=User.balance + bonus,
                referrals=User.referrals + 1,
                updated_at=_now(),
            )
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            raise ResourceNotFoundError("User", str(user_id))

    async def credit_completed_task(self, user_id: UUID) -> None:
        """Add 1 to tasks_completed."""
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(
                tasks_completed=User.tasks_completed + 1,
                updated_at=_now(),
            )
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            raise ResourceNotFoundError("User", str(user_id))


def _now() -> datetime:
    return datetime.now(timezone.utc)
