"""ORM Models: SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - users is the aggregate root for reward counters; tasks, referral codes and
      invites reference it

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all or
      alembic autogenerate runs
"""

from reward_tracker.models.user import User  # noqa: F401
from reward_tracker.models.task import Task  # noqa: F401
from reward_tracker.models.referral_code import ReferralCode  # noqa: F401
from reward_tracker.models.invite import Invite  # noqa: F401
from reward_tracker.models.user_activity import UserActivity  # noqa: F401
