"""Referral Invite Coordinator: create a pending invitee and credit the inviter once.

Invariants:
    - Malformed e-mail (BadRequest) is rejected before the transaction starts
    - Inviter lookup, e-mail existence check, invitee insert, invite row and inviter
      credit share ONE transaction; a failure at any step leaves no trace
    - The inviter credit is one UPDATE touching balance AND referrals together
    - Two invites for the same e-mail: at most one commits. The in-transaction check
      catches the sequential case, the unique constraint on users.email catches the
      concurrent one, and both surface as AlreadyExistsError
    - Invitee username is derived from the e-mail local part; status is PENDING

Design Decisions:
    - Invite rows live in the same store as users (not a process-local map) so the
      referral record commits atomically with the credit
    - Bonus amount injected from Settings.invite_bonus and copied onto the invite row
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.core.domain_types import UserStatus
from reward_tracker.core.errors import (
    AlreadyExistsError, BadRequestError, DatabaseError, ValidationError,
)
from reward_tracker.core.invite_rules import (
    can_invite, derive_username, normalize_email,
)
from reward_tracker.infrastructure.database import is_unique_violation, unit_of_work
from reward_tracker.models.invite import Invite
from reward_tracker.models.user import User
from reward_tracker.services.ledger import Ledger
from reward_tracker.services.lookups import get_user_for_update

logger = logging.getLogger(__name__)

DEFAULT_INVITE_BONUS = 10.0


class ReferralInviteCoordinator:
    """Invites a new user on behalf of an existing one."""

    def __init__(self, db: AsyncSession, bonus: float = DEFAULT_INVITE_BONUS):
        self.db = db
        self.bonus = bonus
        self.ledger = Ledger(db)

    async def invite(self, inviter_id: UUID | None, invitee_email: str) -> None:
        """Create a PENDING user for `invitee_email` and credit the inviter."""
        if inviter_id is None:
            raise BadRequestError("inviterID cannot be empty", field="inviter_id")
        email = normalize_email(invitee_email, field="invitee_email")

        async with unit_of_work(self.db):
            inviter = await get_user_for_update(self.db, inviter_id)
            if not can_invite(inviter.status):
                raise ValidationError(
                    "pending users cannot invite", field="inviter_id",
                )
            await self._ensure_email_free(email)

            invitee = User(
                username=derive_username(email),
                email=email,
                status=UserStatus.PENDING.value,
            )
            self.db.add(invitee)
            await self._flush_or_conflict(email)

            self.db.add(Invite(
                inviter_id=inviter_id,
                invitee_id=invitee.id,
                invitee_email=email,
                bonus=self.bonus,
            ))
            await self._flush_or_conflict(email)
            await self.ledger.credit_referral(inviter_id, self.bonus)

        logger.info(
            "User invited",
            extra={"inviter_id": str(inviter_id), "user_id": str(invitee.id)},
        )

    async def _ensure_email_free(self, email: str) -> None:
        existing = await self.db.scalar(select(User.id).where(User.email == email))
        if existing is not None:
            logger.warning("Invite rejected: e-mail already registered")
            raise AlreadyExistsError("User", email)

    async def _flush_or_conflict(self, email: str) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            if not is_unique_violation(e, "email"):
                raise DatabaseError("Integrity constraint violated", "flush") from e
            logger.warning("Invite lost a concurrent race for the same e-mail")
            raise AlreadyExistsError("User", email) from e
