"""Error Hierarchy: typed, categorized exceptions for all Reward Tracker failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are raised before any mutation; infrastructure errors (5xx)
      are raised after the transaction has been rolled back
    - to_response() produces the REST error envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with RewardTrackerError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Taxonomy mirrors the service contract: NotFound, BadRequest, Validation,
      AlreadyExists, Internal
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    task_id: str | None = None
    field: str | None = None
    debug_info: dict[str, Any] | None = None


class RewardTrackerError(Exception):
    """Base exception for all Reward Tracker errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "task_id": self.context.task_id,
                    "field": self.context.field,
                },
            }
        }


# ─── Domain Errors (4xx) ─────────────────────────────────────────

class ResourceNotFoundError(RewardTrackerError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class BadRequestError(RewardTrackerError):
    """Malformed input (unparseable id, malformed e-mail)."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.field = field
        super().__init__(
            message, "BAD_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, ctx, 400,
        )
        self.field = field


class ValidationError(RewardTrackerError):
    """Business-rule violation (negative balance, unknown status code)."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.field = field
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 422,
        )
        self.field = field


class AlreadyExistsError(RewardTrackerError):
    """Unique resource already present (invitee e-mail, referral code)."""
    def __init__(
        self, resource_type: str, key: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{key}' already exists",
            "ALREADY_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.resource_type = resource_type
        self.key = key


# ─── Infrastructure Errors (5xx) ─────────────────────────────────

class DatabaseError(RewardTrackerError):
    """Database operation failed. Surfaced to callers as Internal."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "INTERNAL", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
