"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, TaskId, ReferralCodeId, InviteId wrap UUIDs
    - TaskStatus wire values are 1..4 (NotStarted, InProgress, Completed, Canceled)
    - All valid states encoded as Enums, no raw string or int matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - TaskStatus is an IntEnum because the wire and DB column carry the integer code
    - UserStatus is a str Enum: serializes to JSON without custom encoders
"""

from enum import Enum, IntEnum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
TaskId = NewType("TaskId", UUID)
ReferralCodeId = NewType("ReferralCodeId", UUID)
InviteId = NewType("InviteId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class TaskStatus(IntEnum):
    """Task lifecycle states. Maps to the integer DB `status` column."""
    NOT_STARTED = 1
    IN_PROGRESS = 2
    COMPLETED = 3
    CANCELED = 4

    @property
    def label(self) -> str:
        return _TASK_STATUS_LABELS[self]


_TASK_STATUS_LABELS = {
    TaskStatus.NOT_STARTED: "Not Started",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.CANCELED: "Canceled",
}


class UserStatus(str, Enum):
    """User account states. Invitees start as PENDING."""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"
    PENDING = "pending"
