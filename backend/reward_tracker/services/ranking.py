"""Ranking Reader: leaderboard position from stored balances. Read-only.

Invariants:
    - Balance is the only ranking metric (core/ranking_rules.py); leaderboard order and
      rank lookup use the same correlated count
    - rank >= 1; users with equal balance share a rank
    - Every answer comes from a single SELECT, so it reflects one consistent snapshot

Design Decisions:
    - Rank computed in SQL with a correlated subquery over an aliased users table:
      no N+1 queries per leaderboard row
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from reward_tracker.core.errors import ResourceNotFoundError
from reward_tracker.core.ranking_rules import clamp_top_request, rank_from_higher_count
from reward_tracker.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedUser:
    user: User
    rank: int


def _higher_balance_count():
    """Correlated scalar: how many users have a strictly greater balance."""
    other = aliased(User)
    return (
        select(func.count(other.id))
        .where(other.balance > User.balance)
        .correlate(User)
        .scalar_subquery()
    )


class RankingReader:
    """Computes leaderboard positions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def rank(self, user_id: UUID) -> int:
        result = await self.db.execute(
            select(_higher_balance_count())
            .select_from(User)
            .where(User.id == user_id),
        )
        row = result.first()
        if row is None:
            raise ResourceNotFoundError("User", str(user_id))
        return rank_from_higher_count(row[0])

    async def top_users(
        self, limit: int, offset: int = 0, max_limit: int = 100,
    ) -> list[RankedUser]:
        limit, offset = clamp_top_request(limit, offset, max_limit)
        result = await self.db.execute(
            select(User, _higher_balance_count())
            .order_by(
                User.balance.desc(),
                User.tasks_completed.desc(),
                User.created_at.asc(),
            )
            .limit(limit)
            .offset(offset),
        )
        ranked = [
            RankedUser(user=user, rank=rank_from_higher_count(higher))
            for user, higher in result.all()
        ]
        if not ranked:
            logger.warning(
                f"No users found for leaderboard page limit={limit} offset={offset}",
            )
        return ranked

    async def leader(self) -> RankedUser:
        top = await self.top_users(limit=1)
        if not top:
            raise ResourceNotFoundError("Leader", "balance")
        return top[0]
