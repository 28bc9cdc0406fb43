"""Error taxonomy for TravelBuddy.

Every failure that reaches the HTTP boundary is an ``AppError``. The
exception handler in ``travelbuddy.main`` turns it into the uniform
``{"error": ..., "details": ...}`` JSON body.

Core helpers (query compiler, itinerary parser, enrichment) never raise;
hard failures only happen at the network-call boundary.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    TIMEOUT = "TIMEOUT"
    PARSE_ERROR = "PARSE_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"


class AppError(Exception):
    """Base class for errors that map to an HTTP response.

    Attributes:
        message: Short, user-facing error text (the ``error`` field).
        details: Optional longer explanation (the ``details`` field).
        status_code: HTTP status to respond with.
        extra: Additional top-level fields merged into the response body.
    """

    code: ErrorCode = ErrorCode.UPSTREAM_ERROR
    default_status: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
        extra: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.status_code = status_code or self.default_status
        self.extra = extra or {}

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        body.update(self.extra)
        return body


class RequestValidationFailed(AppError):
    """Missing or malformed request fields."""

    code = ErrorCode.VALIDATION_ERROR
    default_status = 400


class CategoryNotFoundError(AppError):
    """Unknown place category id. Treated as a client error."""

    code = ErrorCode.NOT_FOUND
    default_status = 400

    def __init__(self, category_id: str, available_categories: Optional[list[str]] = None) -> None:
        super().__init__(
            f"Category '{category_id}' not found. Please use one of the available categories.",
            extra={"available_categories": available_categories} if available_categories else None,
        )
        self.category_id = category_id


class UpstreamError(AppError):
    """Non-2xx or network failure from an upstream provider."""

    code = ErrorCode.UPSTREAM_ERROR

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status_code: Optional[int] = None,
        extra: Optional[dict[str, Any]] = None,
        upstream_status: Optional[int] = None,
    ) -> None:
        super().__init__(message, details, status_code, extra)
        self.upstream_status = upstream_status


class UpstreamTimeoutError(UpstreamError):
    """Upstream call exceeded its fixed time budget."""

    code = ErrorCode.TIMEOUT


class UpstreamRateLimitedError(UpstreamError):
    """The provider answered 429; passed on to the client as 429."""

    code = ErrorCode.RATE_LIMITED
    default_status = 429


class LLMResponseParseError(AppError):
    """The model did not return JSON where JSON is required."""

    code = ErrorCode.PARSE_ERROR

    def __init__(
        self,
        message: str = "AI returned invalid response format",
        details: Optional[str] = "The AI generated malformed JSON. Please try again.",
    ) -> None:
        super().__init__(message, details)


class ConfigurationError(AppError):
    """A required API key or setting is missing."""

    code = ErrorCode.CONFIG_ERROR
