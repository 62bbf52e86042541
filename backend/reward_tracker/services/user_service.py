"""User Service: account CRUD, partial updates, full profile and invite history.

Invariants:
    - E-mail is stored and looked up in normalized form (core/invite_rules.py), so the
      invite duplicate check and these paths agree on what "the same address" is
    - E-mail is unique; duplicates surface as AlreadyExistsError whether caught by the
      pre-check or by the unique constraint at flush time. Other integrity failures are
      DatabaseError, never AlreadyExists
    - username, email and status cannot be set to null (BadRequestError before the
      transaction starts)
    - A balance override becomes a Ledger delta inside the same transaction, so the
      non-negative rule has exactly one implementation
    - Counters (referrals, tasks_completed, visit_count) are never written here
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.core.domain_types import UserStatus
from reward_tracker.core.errors import (
    AlreadyExistsError, DatabaseError, ResourceNotFoundError,
)
from reward_tracker.core.field_overrides import apply_overrides, reject_nulls
from reward_tracker.core.invite_rules import normalize_email
from reward_tracker.core.ledger_rules import check_delta
from reward_tracker.infrastructure.database import is_unique_violation, unit_of_work
from reward_tracker.models.invite import Invite
from reward_tracker.models.referral_code import ReferralCode
from reward_tracker.models.user import User
from reward_tracker.services.activity import ActivityCounts, ActivityTracker
from reward_tracker.services.ledger import Ledger
from reward_tracker.services.lookups import (
    get_user_for_update, get_user_or_404,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("username", "email", "bio", "time_zone", "status")
REQUIRED_FIELDS = ("username", "email", "status")


@dataclass(frozen=True)
class UserFullInfo:
    user: User
    referral_code: str | None
    activity: ActivityCounts


class UserService:
    """CRUD and read helpers for user accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = Ledger(db)

    async def create_user(
        self,
        username: str,
        email: str,
        bio: str | None = None,
        time_zone: str | None = None,
    ) -> User:
        email = normalize_email(email)
        async with unit_of_work(self.db):
            await self._ensure_email_free(email)
            user = User(
                username=username,
                email=email,
                bio=bio,
                time_zone=time_zone,
                status=UserStatus.ACTIVE.value,
            )
            self.db.add(user)
            await self._flush_or_conflict(email)

        logger.info("User created", extra={"user_id": str(user.id)})
        return user

    async def get_user(self, user_id: UUID) -> User:
        return await get_user_or_404(self.db, user_id)

    async def get_user_by_email(self, email: str) -> User:
        email = normalize_email(email)
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            raise ResourceNotFoundError("User", email)
        return user

    async def list_users(
        self, username: str | None = None, status: UserStatus | None = None,
    ) -> list[User]:
        query = select(User).order_by(User.created_at.asc())
        if username:
            query = query.where(User.username.ilike(f"%{username}%"))
        if status is not None:
            query = query.where(User.status == UserStatus(status).value)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_user(self, user_id: UUID, overrides: dict) -> User:
        """Apply present fields of `overrides` to the user in one transaction."""
        overrides = dict(overrides)
        reject_nulls(overrides, REQUIRED_FIELDS)
        balance = overrides.pop("balance", None)
        if "status" in overrides:
            overrides["status"] = UserStatus(overrides["status"]).value
        if "email" in overrides:
            overrides["email"] = normalize_email(overrides["email"])
        if balance is not None:
            check_delta(balance)

        async with unit_of_work(self.db):
            user = await get_user_for_update(self.db, user_id)
            new_email = overrides.get("email")
            if new_email is not None and new_email != user.email:
                await self._ensure_email_free(new_email)
            changed = apply_overrides(user, overrides, UPDATABLE_FIELDS)
            if changed:
                user.updated_at = _now()
                await self._flush_or_conflict(user.email)
            if balance is not None and balance != user.balance:
                await self.ledger.apply_balance_delta(user_id, balance - user.balance)

        logger.info("User updated", extra={"user_id": str(user_id)})
        return user

    async def delete_user(self, user_id: UUID) -> None:
        async with unit_of_work(self.db):
            user = await get_user_or_404(self.db, user_id)
            await self.db.delete(user)
        logger.info("User deleted", extra={"user_id": str(user_id)})

    async def full_info(self, user_id: UUID, now: datetime | None = None) -> UserFullInfo:
        """Profile with the oldest referral code and weekly/monthly visit counts."""
        user = await get_user_or_404(self.db, user_id)
        code = await self.db.scalar(
            select(ReferralCode.code)
            .where(ReferralCode.user_id == user_id)
            .order_by(ReferralCode.created_at.asc())
            .limit(1),
        )
        activity = await ActivityTracker(self.db).counts(user_id, now)
        return UserFullInfo(user=user, referral_code=code, activity=activity)

    async def list_invites(self, inviter_id: UUID) -> list[Invite]:
        await get_user_or_404(self.db, inviter_id)
        result = await self.db.execute(
            select(Invite)
            .where(Invite.inviter_id == inviter_id)
            .order_by(Invite.created_at.asc()),
        )
        return list(result.scalars().all())

    async def _ensure_email_free(self, email: str) -> None:
        if await self.db.scalar(select(User.id).where(User.email == email)) is not None:
            raise AlreadyExistsError("User", email)

    async def _flush_or_conflict(self, email: str) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            if is_unique_violation(e, "email"):
                raise AlreadyExistsError("User", email) from e
            raise DatabaseError("Integrity constraint violated", "flush") from e


def _now() -> datetime:
    return datetime.now(timezone.utc)
