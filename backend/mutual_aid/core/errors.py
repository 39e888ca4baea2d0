"""Error Hierarchy — typed, categorized exceptions for all platform failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are recoverable; infrastructure errors (5xx) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with MutualAidError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - Core returns Rejection values; error_from_rejection is the single place a
      rejection becomes an exception, so kind -> HTTP status is defined once
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from mutual_aid.core.rejection import ErrorKind, Rejection


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
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
    resource_type: str | None = None
    resource_id: str | None = None
    field: str | None = None
    debug_info: dict[str, Any] | None = None


class MutualAidError(Exception):
    """Base exception for all platform errors."""

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
                    "resource_type": self.context.resource_type,
                    "resource_id": self.context.resource_id,
                    "field": self.context.field,
                },
            }
        }


# ─── Domain Errors (4xx) ────────────────────────────────────────

class UnauthenticatedError(MutualAidError):
    """No identity, or the credential did not resolve to one."""
    def __init__(
        self, message: str = "Unauthorized", code: str = "UNAUTHENTICATED",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(MutualAidError):
    """Policy evaluator denied the action."""
    def __init__(
        self, message: str, code: str = "FORBIDDEN",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class InvalidInputError(MutualAidError):
    """Missing or malformed request fields."""
    def __init__(
        self, message: str, code: str = "INVALID_INPUT",
        field: str | None = None, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.field = field
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.field = field


class InvalidTransitionError(MutualAidError):
    """Requested status is not reachable from the current status."""
    def __init__(
        self, message: str, code: str = "INVALID_TRANSITION",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class ResourceNotFoundError(MutualAidError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_type = resource_type
        ctx.resource_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


class ConflictError(MutualAidError):
    """Conditional write lost a race: the row changed since it was read."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


# ─── Infrastructure Errors (5xx) ────────────────────────────────

class DatabaseError(MutualAidError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class InternalError(MutualAidError):
    """Anything unanticipated. The message is fixed so nothing internal leaks."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "An unexpected error occurred", "INTERNAL_ERROR", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


# ─── Rejection mapping ──────────────────────────────────────────

def error_from_rejection(
    rejection: Rejection, context: ErrorContext | None = None,
) -> MutualAidError:
    """Exception for a core Rejection. NOT_FOUND needs resource info in context."""
    kind = rejection.kind
    if kind == ErrorKind.UNAUTHENTICATED:
        return UnauthenticatedError(rejection.message, rejection.code, context)
    if kind == ErrorKind.FORBIDDEN:
        return ForbiddenError(rejection.message, rejection.code, context)
    if kind == ErrorKind.INVALID_INPUT:
        return InvalidInputError(
            rejection.message, rejection.code, rejection.field, context,
        )
    if kind == ErrorKind.INVALID_TRANSITION:
        return InvalidTransitionError(rejection.message, rejection.code, context)
    if kind == ErrorKind.CONFLICT:
        return ConflictError(rejection.message, context)
    ctx = context or ErrorContext()
    return ResourceNotFoundError(
        ctx.resource_type or "resource", ctx.resource_id or "", ctx,
    )
