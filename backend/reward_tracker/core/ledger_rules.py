"""Ledger Rules: the non-negative balance invariant as pure functions.

Invariants:
    - A balance is never allowed to drop below zero
    - Deltas must be finite numbers (NaN and infinities are rejected)

Design Decisions:
    - The same rule is backstopped by a CHECK constraint on users.balance and by a
      guarded UPDATE in the Ledger service; this module is the readable source of truth
"""

import math

from reward_tracker.core.errors import ValidationError


def check_delta(delta: float) -> float:
    """Reject non-numeric or non-finite balance deltas."""
    if isinstance(delta, bool) or not isinstance(delta, (int, float)):
        raise ValidationError("balance delta must be a number", field="delta")
    if not math.isfinite(delta):
        raise ValidationError("balance delta must be finite", field="delta")
    return float(delta)


def apply_delta(balance: float, delta: float) -> float:
    """Return the new balance or raise ValidationError if it would go negative."""
    new_balance = balance + delta
    if new_balance < 0:
        raise ValidationError(
            "invalid balance: cannot go below zero", field="balance",
        )
    return new_balance
