"""Error Hierarchy — typed, categorized exceptions for every capture line failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with CaptureLineError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
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
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    capture_line: str | None = None
    current_state: str | None = None


class CaptureLineError(Exception):
    """Base exception for all capture line errors."""

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
                    "capture_line": self.context.capture_line,
                    "current_state": self.context.current_state,
                },
            }
        }


# ─── Codec Errors (400-level) ───────────────────────────────────

class FormatError(CaptureLineError):
    """Candidate code has the wrong length or a non-digit character."""
    def __init__(self, message: str, candidate: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_FORMAT", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.candidate = candidate


class ChecksumError(CaptureLineError):
    """Well-formed code whose check digit does not match its base digits."""
    def __init__(
        self, code: str, expected: int, received: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.capture_line = code
        super().__init__(
            "Invalid check digit",
            "CHECKSUM_MISMATCH", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, ctx, 400,
        )
        self.expected = expected
        self.received = received


class EncodingOverflow(CaptureLineError):
    """A field value does not fit its fixed width (strict overflow mode only)."""
    def __init__(
        self, field_name: str, value: str, width: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Value for {field_name} has {len(value)} digits, field width is {width}",
            "ENCODING_OVERFLOW", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field_name = field_name
        self.value = value
        self.width = width


class UnknownCodeError(CaptureLineError):
    """Entity or concept code is not present in the configured code table."""
    def __init__(self, kind: str, value: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown {kind} code '{value}'",
            "UNKNOWN_CODE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.kind = kind
        self.value = value


# ─── Lifecycle Errors (400-level) ───────────────────────────────

class InvalidStateTransition(CaptureLineError):
    """Lifecycle guard violated — the event is not legal from the current state."""
    def __init__(
        self, current_state: str, event: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.current_state = current_state
        super().__init__(
            f"Capture line not available. Current state: {current_state}",
            "INVALID_STATE_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.current_state = current_state
        self.event = event


class BatchLimitExceededError(CaptureLineError):
    """Batch issuance asked for more lines than the configured maximum."""
    def __init__(self, requested: int, maximum: int, context: ErrorContext | None = None):
        super().__init__(
            f"Maximum {maximum} capture lines per batch (requested {requested})",
            "BATCH_LIMIT_EXCEEDED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.requested = requested
        self.maximum = maximum


class ResourceNotFoundError(CaptureLineError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Conflict Errors (409) ──────────────────────────────────────

class DuplicateCodeError(CaptureLineError):
    """Insert rejected because the code is already stored."""
    def __init__(self, code: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.capture_line = code
        super().__init__(
            f"Capture line '{code}' already exists",
            "DUPLICATE_CODE", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.duplicate_code = code


class UniqueCodeExhaustedError(CaptureLineError):
    """Could not generate an unused code within the retry budget."""
    def __init__(self, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"Could not generate a unique capture line after {attempts} attempts",
            "UNIQUE_CODE_EXHAUSTED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.attempts = attempts


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(CaptureLineError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
