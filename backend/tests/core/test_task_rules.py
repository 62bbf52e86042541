"""Task Field Rules: verifies title and due date checks."""

from datetime import datetime, timedelta, timezone

import pytest

from reward_tracker.core.errors import ValidationError
from reward_tracker.core.task_rules import check_due_date, check_title

NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


def test_title_is_stripped():
    assert check_title("  Write docs ") == "Write docs"


@pytest.mark.parametrize("title", ["", "   ", None])
def test_blank_title_is_rejected(title):
    with pytest.raises(ValidationError, match="title"):
        check_title(title)


def test_future_due_date_is_accepted():
    check_due_date(NOW + timedelta(days=1), NOW)
    check_due_date(None, NOW)


def test_past_due_date_is_rejected():
    with pytest.raises(ValidationError, match="past"):
        check_due_date(NOW - timedelta(seconds=1), NOW)


def test_naive_due_date_is_treated_as_utc():
    with pytest.raises(ValidationError):
        check_due_date(datetime(2029, 12, 31), NOW)
    check_due_date(datetime(2030, 1, 2), NOW)
