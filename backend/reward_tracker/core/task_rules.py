"""Task Field Rules: validation of task attributes on create and update.

Invariants:
    - Title is non-blank after stripping
    - Due date, when given, is not earlier than `now` (clock injected by the caller)
"""

from datetime import datetime, timezone

from reward_tracker.core.errors import ValidationError


def check_title(title: str | None) -> str:
    if title is None or not title.strip():
        raise ValidationError("task title cannot be empty", field="title")
    return title.strip()


def check_due_date(due_date: datetime | None, now: datetime) -> None:
    if due_date is None:
        return
    if due_date.tzinfo is None:
        due_date = due_date.replace(tzinfo=timezone.utc)
    if due_date < now:
        raise ValidationError("due date cannot be in the past", field="due_date")
