"""Error Hierarchy — typed, categorized exceptions for request boundary failures.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - ClientInputError (400) means the caller sent bad data; ConfigurationError (500)
      means the route declaration itself is broken
    - Neither kind is transient: construction never retries
    - to_response() produces the REST envelope used by api/error_handlers.py

Design Decisions:
    - Single hierarchy with RequestBoundaryError base: one FastAPI handler catches all
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
    CONFIGURATION = "configuration"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str | None = None
    route_path: str | None = None


class RequestBoundaryError(Exception):
    """Base exception for all request boundary errors."""

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
                    "request_id": self.context.request_id,
                },
            }
        }


# ─── Route Misconfiguration (500-level) ─────────────────────────

class ConfigurationError(RequestBoundaryError):
    """Route declaration is not usable (bad auth options, broken validator)."""
    def __init__(self, message: str, route_path: str | None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.route_path = route_path
        super().__init__(
            message, "ROUTE_CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.route_path = route_path

    def to_response(self) -> dict:
        """Configuration details stay server-side."""
        response = super().to_response()
        response["error"]["message"] = "Route is misconfigured"
        return response


# ─── Client Input (400-level) ───────────────────────────────────

class ClientInputError(RequestBoundaryError):
    """A facet validator rejected the raw request data."""
    def __init__(
        self,
        facet: str,
        message: str,
        details: list | None = None,
        other_facets: list[str] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.facet = facet
        self.details = list(details or [])
        self.other_facets = list(other_facets or [])

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["facet"] = self.facet
        response["error"]["details"] = self.details
        return response
