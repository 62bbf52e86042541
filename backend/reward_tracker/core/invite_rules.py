"""Invite Rules: e-mail validation and invitee username derivation.

Invariants:
    - normalize_email raises BadRequestError for anything that is not a
      syntactically valid address; it never performs DNS lookups
    - Every stored or looked-up address goes through normalize_email, so the
      uniqueness check compares like with like (domain case folded)
    - derive_username is deterministic: the local part of the address, unchanged
    - can_invite is False for PENDING inviters (they were invited and never activated)

Design Decisions:
    - email-validator for syntax checks: same library pydantic's EmailStr uses at the
      HTTP edge, so the core and the schemas agree on what "well-formed" means
    - check_deliverability=False: validation must stay pure and offline
"""

from email_validator import EmailNotValidError, validate_email

from reward_tracker.core.domain_types import UserStatus
from reward_tracker.core.errors import BadRequestError


def normalize_email(email: str | None, field: str = "email") -> str:
    """Validate and normalize an e-mail address."""
    if not email or not email.strip():
        raise BadRequestError("invalid email format", field=field)
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError:
        raise BadRequestError("invalid email format", field=field) from None
    return result.normalized


def derive_username(email: str) -> str:
    """Username for a freshly invited user: the address local part."""
    return email[: email.index("@")]


def can_invite(inviter_status: UserStatus | str) -> bool:
    return UserStatus(inviter_status) != UserStatus.PENDING
