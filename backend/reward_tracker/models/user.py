"""User ORM: reward counters and account status.

Invariants:
    - email is unique (store-level backstop for concurrent invites)
    - balance >= 0, referrals >= 0, tasks_completed >= 0 (CHECK constraints)
    - Counters are mutated only by the Ledger and the coordinators in services/;
      last_visit and visit_count only by ActivityTracker

Design Decisions:
    - Float balance: rewards are small decimal bonuses, not currency settlement
    - status stored as string (UserStatus values) for readable rows
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, String, Text, Integer, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from reward_tracker.core.domain_types import UserStatus
from reward_tracker.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """User account carrying balance, referral count and completed-task count."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_users_balance_non_negative"),
        CheckConstraint("referrals >= 0", name="ck_users_referrals_non_negative"),
        CheckConstraint(
            "tasks_completed >= 0", name="ck_users_tasks_completed_non_negative",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(320), nullable=False, unique=True, index=True,
    )
    balance: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    referrals: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tasks_completed: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserStatus.ACTIVE.value,
    )
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    time_zone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_visit: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )
