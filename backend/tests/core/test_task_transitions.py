"""Task Status Transitions: verifies status parsing, the transition table and
completion crediting.

Invariants:
    - Only codes 1..4 parse; bool and non-int values are rejected
    - Every transition is allowed
    - Crediting happens only when entering COMPLETED from another state
"""

import pytest

from reward_tracker.core.domain_types import TaskStatus
from reward_tracker.core.errors import ValidationError
from reward_tracker.core.task_transitions import (
    check_initial_status,
    check_transition_allowed,
    credits_completion,
    crediting_predecessors,
    parse_task_status,
)


@pytest.mark.parametrize("code", [1, 2, 3, 4])
def test_parse_accepts_known_codes(code):
    assert int(parse_task_status(code)) == code


@pytest.mark.parametrize("code", [0, 5, -1, 99, "3", None, True, 3.0])
def test_parse_rejects_unknown_codes(code):
    with pytest.raises(ValidationError, match="status does not exist"):
        parse_task_status(code)


def test_every_transition_is_allowed():
    for current in TaskStatus:
        for new in TaskStatus:
            check_transition_allowed(current, new)


def test_entering_completed_credits():
    assert credits_completion(TaskStatus.NOT_STARTED, TaskStatus.COMPLETED)
    assert credits_completion(TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)
    assert credits_completion(TaskStatus.CANCELED, TaskStatus.COMPLETED)


def test_completed_to_completed_does_not_credit():
    assert not credits_completion(TaskStatus.COMPLETED, TaskStatus.COMPLETED)


def test_leaving_completed_does_not_credit():
    assert not credits_completion(TaskStatus.COMPLETED, TaskStatus.IN_PROGRESS)


def test_crediting_predecessors_for_completed():
    assert crediting_predecessors(TaskStatus.COMPLETED) == frozenset({
        TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS, TaskStatus.CANCELED,
    })


def test_crediting_predecessors_empty_for_other_targets():
    assert crediting_predecessors(TaskStatus.IN_PROGRESS) == frozenset()
    assert crediting_predecessors(TaskStatus.CANCELED) == frozenset()


def test_initial_status_rules():
    check_initial_status(TaskStatus.NOT_STARTED)
    check_initial_status(TaskStatus.IN_PROGRESS)
    with pytest.raises(ValidationError):
        check_initial_status(TaskStatus.COMPLETED)
    with pytest.raises(ValidationError):
        check_initial_status(TaskStatus.CANCELED)
