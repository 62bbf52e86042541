"""Referral Code Schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ReferralCodeCreate(BaseModel):
    user_id: UUID
    code: str = Field(min_length=1, max_length=64)


class ReferralCodeUpdate(BaseModel):
    code: str = Field(min_length=1, max_length=64)


class ReferralCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    code: str
    created_at: datetime
    updated_at: datetime


class ReferralCodeValidation(BaseModel):
    code: str
    valid: bool
