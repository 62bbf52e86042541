"""Activity Tracker: records user visits and counts recent activity.

Invariants:
    - record_visit appends one user_activity row and bumps users.visit_count and
      users.last_visit in ONE transaction (single UPDATE for the counters)
    - Counts are computed in SQL over user_activity with the windows from
      core/activity_rules.py
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from reward_tracker.core.activity_rules import activity_windows
from reward_tracker.core.errors import ResourceNotFoundError
from reward_tracker.infrastructure.database import unit_of_work
from reward_tracker.models.user import User
from reward_tracker.models.user_activity import UserActivity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivityCounts:
    weekly: int
    monthly: int


class ActivityTracker:
    """Visit log for users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_visit(self, user_id: UUID, at: datetime | None = None) -> User:
        at = at or datetime.now(timezone.utc)
        async with unit_of_work(self.db):
            result = await self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(last_visit=at, visit_count=User.visit_count + 1)
                .execution_options(synchronize_session=False),
            )
            if result.rowcount != 1:
                raise ResourceNotFoundError("User", str(user_id))
            self.db.add(UserActivity(user_id=user_id, activity_time=at))

        user = await self.db.get(User, user_id, populate_existing=True)
        logger.info("Visit recorded", extra={"user_id": str(user_id)})
        return user

    async def counts(self, user_id: UUID, now: datetime | None = None) -> ActivityCounts:
        windows = activity_windows(now or datetime.now(timezone.utc))
        return ActivityCounts(
            weekly=await self._count_since(user_id, windows.week_start, windows.now),
            monthly=await self._count_since(user_id, windows.month_start, windows.now),
        )

    async def _count_since(self, user_id: UUID, start: datetime, now: datetime) -> int:
        return await self.db.scalar(
            select(func.count(UserActivity.id)).where(
                UserActivity.user_id == user_id,
                UserActivity.activity_time > start,
                UserActivity.activity_time < now,
            ),
        )
