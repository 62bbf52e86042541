"""User Routes: accounts, balance, invites and leaderboard.

Invariants:
    - Static paths (/email, /leader, /top, /invite) are declared before /{user_id}
    - Invite and balance endpoints call the coordinators directly; routes add no rules
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.config import get_settings
from reward_tracker.core.domain_types import UserStatus
from reward_tracker.core.ranking_rules import RANKING_METRIC
from reward_tracker.infrastructure.database import get_db
from reward_tracker.schemas.user import (
    BalanceAdjustment, BalanceResponse, InviteRequest, InviteResponse,
    RankResponse, TopUserResponse, TopUsersResponse, UserCreate, UserFullInfoResponse,
    UserResponse, UserSummaryResponse, UserUpdate, UsersResponse, VisitResponse,
)
from reward_tracker.services.activity import ActivityTracker
from reward_tracker.services.ledger import Ledger
from reward_tracker.services.ranking import RankedUser, RankingReader
from reward_tracker.services.referral_invite import ReferralInviteCoordinator
from reward_tracker.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _top_user(entry: RankedUser) -> TopUserResponse:
    return TopUserResponse(
        **UserResponse.model_validate(entry.user).model_dump(), rank=entry.rank,
    )


@router.get("", response_model=UsersResponse)
async def list_users(
    username: str | None = None,
    status_filter: UserStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    users = await UserService(db).list_users(username, status_filter)
    return UsersResponse(
        users=[UserResponse.model_validate(u) for u in users], count=len(users),
    )


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).create_user(
        username=body.username,
        email=str(body.email),
        bio=body.bio,
        time_zone=body.time_zone,
    )
    return UserResponse.model_validate(user)


@router.get("/email", response_model=UserResponse)
async def get_user_by_email(email: str, db: AsyncSession = Depends(get_db)):
    return UserResponse.model_validate(
        await UserService(db).get_user_by_email(email.strip()),
    )


@router.get("/leader", response_model=TopUserResponse)
async def get_leader(db: AsyncSession = Depends(get_db)):
    """Highest balance user."""
    return _top_user(await RankingReader(db).leader())


@router.get("/top", response_model=TopUsersResponse)
async def get_top_users(
    limit: int = 10, offset: int = 0, db: AsyncSession = Depends(get_db),
):
    """Leaderboard page ordered by balance."""
    ranked = await RankingReader(db).top_users(
        limit, offset, get_settings().top_users_max_limit,
    )
    users = [_top_user(entry) for entry in ranked]
    return TopUsersResponse(users=users, count=len(users))


@router.post("/invite", status_code=status.HTTP_201_CREATED)
async def invite_user(body: InviteRequest, db: AsyncSession = Depends(get_db)):
    """Invite a new user; the inviter is credited once per new e-mail."""
    coordinator = ReferralInviteCoordinator(db, bonus=get_settings().invite_bonus)
    await coordinator.invite(body.inviter_id, body.invitee_email)
    return {"status": "invited", "inviter_id": str(body.inviter_id)}


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db)):
    return UserResponse.model_validate(await UserService(db).get_user(user_id))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID, body: UserUpdate, db: AsyncSession = Depends(get_db),
):
    """Partial update: only fields present in the body are applied."""
    overrides = body.model_dump(exclude_unset=True)
    if overrides.get("email") is not None:
        overrides["email"] = str(overrides["email"])
    user = await UserService(db).update_user(user_id, overrides)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, db: AsyncSession = Depends(get_db)):
    await UserService(db).delete_user(user_id)


@router.put("/{user_id}/balance", response_model=BalanceResponse)
async def adjust_balance(
    user_id: UUID, body: BalanceAdjustment, db: AsyncSession = Depends(get_db),
):
    """Add `delta` (may be negative) to the balance; never below zero."""
    balance = await Ledger(db).adjust_balance(user_id, body.delta)
    return BalanceResponse(user_id=user_id, balance=balance)


@router.get("/{user_id}/summary", response_model=UserSummaryResponse)
async def get_user_summary(user_id: UUID, db: AsyncSession = Depends(get_db)):
    return UserSummaryResponse.model_validate(await UserService(db).get_user(user_id))


@router.get("/{user_id}/full-info", response_model=UserFullInfoResponse)
async def get_user_full_info(user_id: UUID, db: AsyncSession = Depends(get_db)):
    """Account, first referral code and weekly/monthly visit counts."""
    info = await UserService(db).full_info(user_id)
    return UserFullInfoResponse(
        **UserResponse.model_validate(info.user).model_dump(),
        referral_code=info.referral_code,
        weekly_activity=info.activity.weekly,
        monthly_activity=info.activity.monthly,
    )


@router.post(
    "/{user_id}/visits", response_model=VisitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_visit(user_id: UUID, db: AsyncSession = Depends(get_db)):
    user = await ActivityTracker(db).record_visit(user_id)
    return VisitResponse(
        user_id=user.id, visit_count=user.visit_count, last_visit=user.last_visit,
    )


@router.get("/{user_id}/rank", response_model=RankResponse)
async def get_user_rank(user_id: UUID, db: AsyncSession = Depends(get_db)):
    rank = await RankingReader(db).rank(user_id)
    return RankResponse(user_id=user_id, rank=rank, metric=RANKING_METRIC)


@router.get("/{user_id}/invites", response_model=list[InviteResponse])
async def list_user_invites(user_id: UUID, db: AsyncSession = Depends(get_db)):
    invites = await UserService(db).list_invites(user_id)
    return [InviteResponse.model_validate(i) for i in invites]
