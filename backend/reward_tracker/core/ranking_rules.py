"""Ranking Rules: leaderboard metric and request bounds.

Invariants:
    - Balance is the ONE ranking metric, for both leaderboard order and rank lookup
    - rank = 1 + number of users with a strictly greater balance (ties share a rank)
    - limit > 0 and offset >= 0; limit is capped at the configured maximum

Design Decisions:
    - tasks_completed is only a display tiebreak in leaderboard ordering; it never
      changes a user's rank
"""

from reward_tracker.core.errors import ValidationError

RANKING_METRIC = "balance"


def rank_from_higher_count(higher: int) -> int:
    return higher + 1


def clamp_top_request(limit: int, offset: int, max_limit: int) -> tuple[int, int]:
    """Validate a leaderboard page request and cap its size."""
    if limit <= 0:
        raise ValidationError("limit must be greater than 0", field="limit")
    if offset < 0:
        raise ValidationError("offset cannot be negative", field="offset")
    return min(limit, max_limit), offset
