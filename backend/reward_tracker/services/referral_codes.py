"""Referral Code Service: user-owned codes persisted in the shared store.

Invariants:
    - Codes are globally unique; duplicates raise AlreadyExistsError (pre-check plus
      unique constraint at flush time)
    - The owning user must exist when a code is created
    - Updating a code to its current value is a no-op
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.core.errors import (
    AlreadyExistsError, DatabaseError, ResourceNotFoundError, ValidationError,
)
from reward_tracker.infrastructure.database import is_unique_violation, unit_of_work
from reward_tracker.models.referral_code import ReferralCode
from reward_tracker.services.lookups import get_user_or_404

logger = logging.getLogger(__name__)


def _check_code(code: str) -> str:
    if code is None or not code.strip():
        raise ValidationError("referral code cannot be empty", field="code")
    return code.strip()


class ReferralCodeService:
    """CRUD and validation for referral codes."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_code(self, user_id: UUID, code: str) -> ReferralCode:
        code = _check_code(code)
        async with unit_of_work(self.db):
            await get_user_or_404(self.db, user_id)
            await self._ensure_code_free(code)
            referral = ReferralCode(user_id=user_id, code=code)
            self.db.add(referral)
            await self._flush_or_conflict(code)

        logger.info(
            "Referral code created",
            extra={"user_id": str(user_id)},
        )
        return referral

    async def get_code(self, referral_id: UUID) -> ReferralCode:
        result = await self.db.execute(
            select(ReferralCode).where(ReferralCode.id == referral_id),
        )
        referral = result.scalar_one_or_none()
        if referral is None:
            raise ResourceNotFoundError("Referral", str(referral_id))
        return referral

    async def list_codes(self, user_id: UUID) -> list[ReferralCode]:
        result = await self.db.execute(
            select(ReferralCode)
            .where(ReferralCode.user_id == user_id)
            .order_by(ReferralCode.created_at.asc()),
        )
        return list(result.scalars().all())

    async def update_code(self, referral_id: UUID, code: str) -> ReferralCode:
        code = _check_code(code)
        async with unit_of_work(self.db):
            referral = await self.get_code(referral_id)
            if referral.code != code:
                await self._ensure_code_free(code)
                referral.code = code
                referral.updated_at = datetime.now(timezone.utc)
                await self._flush_or_conflict(code)
        return referral

    async def delete_code(self, referral_id: UUID) -> None:
        async with unit_of_work(self.db):
            referral = await self.get_code(referral_id)
            await self.db.delete(referral)
        logger.info(f"Referral code {referral_id} deleted")

    async def validate_code(self, code: str) -> bool:
        found = await self.db.scalar(
            select(ReferralCode.id).where(ReferralCode.code == code),
        )
        return found is not None

    async def _ensure_code_free(self, code: str) -> None:
        if await self.validate_code(code):
            raise AlreadyExistsError("Referral code", code)

    async def _flush_or_conflict(self, code: str) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            if is_unique_violation(e, "code"):
                raise AlreadyExistsError("Referral code", code) from e
            raise DatabaseError("Integrity constraint violated", "flush") from e
