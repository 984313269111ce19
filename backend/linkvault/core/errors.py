"""Error Hierarchy - typed, categorized exceptions for all LinkVault failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - ValidationError is raised before any store call is attempted
    - WriteError always reaches the caller of the mutation facade (never swallowed)
    - SubscriptionError is carried inside a snapshot emission, never raised past
      the sync engine
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with LinkVaultError base: FastAPI global handler catches all
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
    AUTHENTICATION = "authentication"
    RESOURCE_NOT_FOUND = "resource_not_found"
    LOCKED = "locked"
    DATABASE = "database"
    SUBSCRIPTION = "subscription"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    collection: str | None = None
    document_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class LinkVaultError(Exception):
    """Base exception for all LinkVault errors."""

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
                    "collection": self.context.collection,
                    "document_id": self.context.document_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(LinkVaultError):
    """Input rejected before reaching the store."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class NotAuthenticatedError(LinkVaultError):
    """Operation requires a signed-in identity."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No signed-in user", "NOT_AUTHENTICATED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.ERROR, context, 401,
        )


class ResourceNotFoundError(LinkVaultError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class VaultLockedError(LinkVaultError):
    """Private vault read attempted without a successful PIN check."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Private vault is locked", "VAULT_LOCKED",
            ErrorCategory.LOCKED, ErrorSeverity.WARNING, context, 423,
        )


class PinRejectedError(LinkVaultError):
    """Vault unlock attempted with a PIN that does not match the stored digest."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Incorrect PIN", "PIN_REJECTED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.INFO, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(LinkVaultError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class WriteError(LinkVaultError):
    """create/update/delete/batch against the store failed; nothing was applied."""
    def __init__(
        self,
        message: str,
        operation: str,
        collection: str | None = None,
        document_id: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.collection = collection
        ctx.document_id = document_id
        super().__init__(
            f"Store {operation} failed: {message}",
            "WRITE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.ERROR, ctx, 503,
        )
        self.operation = operation


class SubscriptionError(LinkVaultError):
    """A live subscription could not deliver a snapshot."""
    def __init__(self, message: str, collection: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.collection = collection
        super().__init__(
            f"Subscription to {collection} failed: {message}",
            "SUBSCRIPTION_ERROR", ErrorCategory.SUBSCRIPTION,
            ErrorSeverity.WARNING, ctx, 503,
        )
