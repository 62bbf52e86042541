"""Referral Code Routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.infrastructure.database import get_db
from reward_tracker.schemas.referral import (
    ReferralCodeCreate, ReferralCodeResponse, ReferralCodeUpdate,
    ReferralCodeValidation,
)
from reward_tracker.services.referral_codes import ReferralCodeService

router = APIRouter(prefix="/api/v1/referrals", tags=["referrals"])


@router.get("", response_model=list[ReferralCodeResponse])
async def list_referral_codes(user_id: UUID, db: AsyncSession = Depends(get_db)):
    codes = await ReferralCodeService(db).list_codes(user_id)
    return [ReferralCodeResponse.model_validate(c) for c in codes]


@router.post(
    "", response_model=ReferralCodeResponse, status_code=status.HTTP_201_CREATED,
)
async def create_referral_code(
    body: ReferralCodeCreate, db: AsyncSession = Depends(get_db),
):
    referral = await ReferralCodeService(db).create_code(body.user_id, body.code)
    return ReferralCodeResponse.model_validate(referral)


@router.get("/validate/{code}", response_model=ReferralCodeValidation)
async def validate_referral_code(code: str, db: AsyncSession = Depends(get_db)):
    valid = await ReferralCodeService(db).validate_code(code)
    return ReferralCodeValidation(code=code, valid=valid)


@router.get("/{referral_id}", response_model=ReferralCodeResponse)
async def get_referral_code(referral_id: UUID, db: AsyncSession = Depends(get_db)):
    return ReferralCodeResponse.model_validate(
        await ReferralCodeService(db).get_code(referral_id),
    )


@router.put("/{referral_id}", response_model=ReferralCodeResponse)
async def update_referral_code(
    referral_id: UUID, body: ReferralCodeUpdate, db: AsyncSession = Depends(get_db),
):
    referral = await ReferralCodeService(db).update_code(referral_id, body.code)
    return ReferralCodeResponse.model_validate(referral)


@router.delete("/{referral_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_referral_code(referral_id: UUID, db: AsyncSession = Depends(get_db)):
    await ReferralCodeService(db).delete_code(referral_id)
