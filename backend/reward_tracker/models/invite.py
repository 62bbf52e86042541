"""Invite ORM: the referral relationship created by a successful invite.

Invariants:
    - invitee_email is unique: one successful invite per address, ever
    - Written in the same transaction as the invitee user row and the inviter credit

Design Decisions:
    - bonus is copied onto the row: the configured amount may change later, the
      credited amount may not
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Float, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from reward_tracker.db.base import Base


class Invite(Base):
    """Inviter -> invitee link with the credited bonus."""
    __tablename__ = "invites"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    inviter_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    invitee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    invitee_email: Mapped[str] = mapped_column(
        String(320), nullable=False, unique=True,
    )
    bonus: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
