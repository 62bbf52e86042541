"""Field Overrides: present/absent partial updates applied to a loaded entity.

Invariants:
    - Only fields that are present in `overrides` are touched; absent fields keep
      their stored value (an explicit None is a present value)
    - Fields outside `allowed` raise ValidationError instead of being silently dropped
    - apply_overrides mutates the target object and returns the names it changed
    - reject_nulls refuses an explicit None for a field the store requires

Design Decisions:
    - Callers build `overrides` with pydantic `model_dump(exclude_unset=True)`, which is
      exactly the present/absent distinction (ADR: no pointer-style optional fields)
    - Pure with respect to IO: the service persists the entity in its own transaction
"""

from typing import Any, Iterable, Mapping

from reward_tracker.core.errors import BadRequestError, ValidationError


def apply_overrides(
    target: Any, overrides: Mapping[str, Any], allowed: Iterable[str],
) -> list[str]:
    """Apply present overrides to `target`; return the names of changed fields."""
    allowed_set = set(allowed)
    unknown = sorted(set(overrides) - allowed_set)
    if unknown:
        raise ValidationError(
            f"Fields cannot be updated: {', '.join(unknown)}", field=unknown[0],
        )
    changed = []
    for name, value in overrides.items():
        if getattr(target, name) != value:
            setattr(target, name, value)
            changed.append(name)
    return changed


def reject_nulls(overrides: Mapping[str, Any], required: Iterable[str]) -> None:
    """Raise BadRequestError when a required field is present with value None."""
    for name in required:
        if name in overrides and overrides[name] is None:
            raise BadRequestError(f"{name} cannot be null", field=name)
