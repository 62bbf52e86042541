"""Task Status Transitions: which status changes are allowed and which ones credit.

Invariants:
    - parse_task_status accepts only the wire codes 1..4
    - ALLOWED_PREDECESSORS is the single transition table; it is permissive (any-to-any)
    - credits_completion is True only when entering COMPLETED from a non-COMPLETED state
    - All functions are PURE: no DB access, no mutation

Design Decisions:
    - Explicit predecessor table instead of ad hoc checks: tightening the graph later is
      a data change here, not a code change in the coordinator
    - bool is rejected by parse_task_status even though it is an int subclass
"""

from reward_tracker.core.domain_types import TaskStatus
from reward_tracker.core.errors import ValidationError


# Allowed previous states per target state. Every state may follow every state.
ALLOWED_PREDECESSORS: dict[TaskStatus, frozenset[TaskStatus]] = {
    target: frozenset(TaskStatus) for target in TaskStatus
}

# Statuses a task may be created with. COMPLETED is reachable only by transition.
INITIAL_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS},
)


def parse_task_status(value: object) -> TaskStatus:
    """Map a wire status code to TaskStatus or raise ValidationError."""
    if isinstance(value, TaskStatus):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("status does not exist", field="status")
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError("status does not exist", field="status") from None


def check_transition_allowed(current: TaskStatus, new: TaskStatus) -> None:
    """Raise ValidationError if `new` may not follow `current`."""
    if current not in ALLOWED_PREDECESSORS[new]:
        raise ValidationError(
            f"Cannot move task from {current.label} to {new.label}", field="status",
        )


def credits_completion(current: TaskStatus, new: TaskStatus) -> bool:
    """Entering COMPLETED from any other state credits the acting user once."""
    return new == TaskStatus.COMPLETED and current != TaskStatus.COMPLETED


def crediting_predecessors(new: TaskStatus) -> frozenset[TaskStatus]:
    """Stored statuses from which moving to `new` credits. Empty unless new is COMPLETED."""
    return frozenset(s for s in TaskStatus if credits_completion(s, new))


def check_initial_status(status: TaskStatus) -> None:
    if status not in INITIAL_STATUSES:
        raise ValidationError(
            f"A task cannot be created as {status.label}", field="status",
        )
