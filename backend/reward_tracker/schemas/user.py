"""User Schemas: accounts, balance adjustments, invites and leaderboard shapes.

Invariants:
    - UserCreate.email is syntax-checked with EmailStr
    - InviteRequest.invitee_email is a plain str: the invite coordinator owns the
      e-mail check so it answers BadRequest for every caller
    - UserUpdate forbids unknown fields; counters (referrals, tasks_completed) are not
      client-writable
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from reward_tracker.core.domain_types import UserStatus


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: EmailStr
    bio: str | None = Field(None, max_length=2000)
    time_zone: str | None = Field(None, max_length=64)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty or whitespace")
        return v


class UserUpdate(BaseModel):
    """Partial user update. Only fields present in the body are applied."""
    model_config = ConfigDict(extra="forbid")

    username: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    balance: float | None = None
    bio: str | None = Field(None, max_length=2000)
    time_zone: str | None = Field(None, max_length=64)
    status: UserStatus | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    balance: float
    referrals: int
    tasks_completed: int
    status: UserStatus
    bio: str | None = None
    time_zone: str | None = None
    last_visit: datetime | None = None
    visit_count: int = 0
    created_at: datetime
    updated_at: datetime


class UsersResponse(BaseModel):
    users: list[UserResponse]
    count: int


class UserSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    balance: float
    referrals: int
    tasks_completed: int
    created_at: datetime


class UserFullInfoResponse(UserResponse):
    """Full profile: the account plus referral code and recent activity."""
    referral_code: str | None = None
    weekly_activity: int
    monthly_activity: int


class VisitResponse(BaseModel):
    user_id: UUID
    visit_count: int
    last_visit: datetime


class BalanceAdjustment(BaseModel):
    delta: float


class BalanceResponse(BaseModel):
    user_id: UUID
    balance: float


class InviteRequest(BaseModel):
    inviter_id: UUID
    invitee_email: str = Field(max_length=320)


class InviteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    inviter_id: UUID
    invitee_id: UUID
    invitee_email: str
    bonus: float
    created_at: datetime


class RankResponse(BaseModel):
    user_id: UUID
    rank: int
    metric: str


class TopUserResponse(UserResponse):
    rank: int


class TopUsersResponse(BaseModel):
    users: list[TopUserResponse]
    count: int
