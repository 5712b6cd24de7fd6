"""Error Hierarchy — typed, categorized exceptions for all CertVault failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Input errors (400-level) are recoverable by the user; storage errors (500-level) are not retried
    - to_response() produces the REST envelope
    - No driver or filesystem details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with VaultError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    ATTACHMENT = "attachment"
    DATABASE = "database"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    certificate_id: str | None = None
    field: str | None = None
    operation: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class VaultError(Exception):
    """Base exception for all CertVault errors."""

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
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "certificate_id": self.context.certificate_id,
                    "field": self.context.field,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Input Errors (400-level) ───────────────────────────────────

class FieldValidationError(VaultError):
    """Required field missing or malformed. Raised before any IO."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.field = field
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, ctx, 400,
        )
        self.field = field


class AttachmentTooLargeError(VaultError):
    """Attachment exceeds the size cap. Raised before the file is read."""
    def __init__(self, size: int, limit: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.field = "image"
        ctx.user_message = ctx.user_message or (
            f"File too large! Please choose an image under {limit // (1024 * 1024)}MB."
        )
        super().__init__(
            f"Attachment of {size} bytes exceeds limit of {limit} bytes",
            "ATTACHMENT_TOO_LARGE", ErrorCategory.ATTACHMENT,
            ErrorSeverity.WARNING, ctx, 413,
        )
        self.size = size
        self.limit = limit


class ReadFailedError(VaultError):
    """Attachment read failed or produced an incomplete payload."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.field = "image"
        ctx.operation = "read"
        super().__init__(
            f"Attachment read failed: {message}",
            "ATTACHMENT_READ_FAILED", ErrorCategory.ATTACHMENT,
            ErrorSeverity.ERROR, ctx, 422,
        )


# ─── Storage Errors (500-level) ─────────────────────────────────

class StoreUnavailableError(VaultError):
    """Local database could not be opened or read."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or "open"
        super().__init__(
            f"Vault storage unavailable: {message}",
            "STORE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )


class WriteFailedError(VaultError):
    """A durable write (insert or delete) did not complete."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            f"Vault {operation} failed: {message}",
            "WRITE_FAILED", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.operation = operation


class DuplicateKeyError(VaultError):
    """A record with the same id already exists in the store."""
    def __init__(self, certificate_id: str | None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.certificate_id = certificate_id
        ctx.operation = "insert"
        super().__init__(
            f"Certificate '{certificate_id}' already exists",
            "DUPLICATE_KEY", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )
