"""Error Hierarchy: typed, categorized exceptions for operation-factory failures.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - OperationFailure never escapes the dispatcher; it is folded into the batch errors

Design Decisions:
    - Single hierarchy with OperationFactoryError base: the FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
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
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    family: str | None = None
    handler_id: str | None = None
    batch_id: str | None = None
    debug_info: dict[str, Any] | None = None


class OperationFactoryError(Exception):
    """Base exception for all operation-factory errors."""

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
                    "family": self.context.family,
                    "handler_id": self.context.handler_id,
                    "batch_id": self.context.batch_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class PayloadValidationError(OperationFactoryError):
    """Operation payload failed schema validation."""
    def __init__(self, message: str, fields: list[str], context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.fields = fields


class ResourceNotFoundError(OperationFactoryError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class EnrollmentNotFoundError(ResourceNotFoundError):
    """No enrollment for the (attendee, session) pair."""
    def __init__(self, attendee_id: int, session_id: int, context: ErrorContext | None = None):
        super().__init__(
            "Enrollment", f"attendee={attendee_id}, session={session_id}", context,
        )
        self.code = "ENROLLMENT_NOT_FOUND"


class UnknownFamilyError(ResourceNotFoundError):
    """No operation family registered under the requested name."""
    def __init__(self, family: str, context: ErrorContext | None = None):
        super().__init__("Operation family", family, context)
        self.code = "UNKNOWN_FAMILY"


class ConflictError(OperationFactoryError):
    """Write would collide with existing state."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class EnrollmentConflictError(ConflictError):
    """Attendee is already enrolled in the target session."""
    def __init__(self, attendee_id: int, session_id: int, context: ErrorContext | None = None):
        super().__init__(
            f"Attendee {attendee_id} is already enrolled in session {session_id}",
            context,
        )
        self.code = "ENROLLMENT_EXISTS"


class InvalidTransitionError(OperationFactoryError):
    """Enrollment status change not allowed by the status machine."""
    def __init__(self, from_status: str, to_status: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot transition enrollment from '{from_status}' to '{to_status}'",
            "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )
        self.from_status = from_status
        self.to_status = to_status


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(OperationFactoryError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


# ─── Execution Failure ──────────────────────────────────────────

class OperationFailure(OperationFactoryError):
    """A handler (or the cache invalidation after it) raised during execute.

    Carries the resolved handler id and the stripped payload so the
    dispatcher can report which operation stopped the batch.
    """

    def __init__(
        self,
        handler_id: str,
        payload: dict,
        message: str,
        code: str = "OPERATION_FAILED",
        cause: BaseException | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.handler_id = handler_id
        super().__init__(
            message, code, ErrorCategory.INTERNAL,
            ErrorSeverity.ERROR, ctx, 500,
        )
        self.handler_id = handler_id
        self.payload = payload
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @classmethod
    def wrap(
        cls, handler_id: str, payload: dict, exc: BaseException,
    ) -> "OperationFailure":
        """Build a failure from whatever the handler raised, keeping its code."""
        if isinstance(exc, OperationFactoryError):
            return cls(handler_id, payload, exc.message, exc.code, exc)
        return cls(handler_id, payload, str(exc) or type(exc).__name__, cause=exc)

    def summary(self) -> str:
        return f"Operation: {self.handler_id}: {self.message}"
