"""
Custom exception hierarchy for centralized error handling.
All exceptions map to appropriate HTTP status codes.

Messages and details are user-facing. Operator-only diagnostics (raw model
output, upstream exception text) are kept on separate attributes and are
never serialized by to_dict().
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(AppException):
    """Invalid input data."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class AuthenticationError(AppException):
    """Missing or rejected identity token."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: str = "AUTHENTICATION_REQUIRED",
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
        )
        self.reason = reason


class InvalidTokenError(AuthenticationError):
    """Token present but failed verification."""

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(
            message="Invalid or expired token",
            error_code="INVALID_TOKEN",
            reason=reason,
        )


class UpstreamServiceError(AppException):
    """Text-generation service call failed (network, quota, timeout, auth)."""

    def __init__(self, reason: str = "Unknown error") -> None:
        super().__init__(
            message="AI service temporarily unavailable",
            status_code=503,
            error_code="UPSTREAM_SERVICE_ERROR",
        )
        self.reason = reason


class NormalizationError(AppException):
    """Model reply could not be turned into a movie list."""


class MalformedResponseError(NormalizationError):
    """Cleaned model reply is not parseable JSON."""

    def __init__(self, cleaned_text: str, reason: str = "") -> None:
        super().__init__(
            message="AI returned invalid response format",
            status_code=502,
            error_code="INVALID_RESPONSE_FORMAT",
        )
        self.cleaned_text = cleaned_text
        self.reason = reason


class UnexpectedShapeError(NormalizationError):
    """Parsed model reply is not a JSON array."""

    def __init__(self, actual_type: str) -> None:
        super().__init__(
            message="AI returned invalid response format",
            status_code=502,
            error_code="INVALID_RESPONSE_FORMAT",
        )
        self.actual_type = actual_type


class EmptyResultError(NormalizationError):
    """No valid movie records survived validation."""

    def __init__(self, dropped_count: int = 0) -> None:
        super().__init__(
            message="No valid movie recommendations could be generated",
            status_code=502,
            error_code="NO_VALID_RECOMMENDATIONS",
        )
        self.dropped_count = dropped_count


class PersistenceError(AppException):
    """Search history store operation failed."""

    def __init__(self, operation: str, reason: str = "Unknown") -> None:
        super().__init__(
            message="Failed to fetch history" if operation == "read" else "Failed to save history",
            status_code=500,
            error_code="PERSISTENCE_ERROR",
        )
        self.operation = operation
        self.reason = reason
