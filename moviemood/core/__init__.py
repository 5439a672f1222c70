"""Core infrastructure components."""
from .exceptions import (
    AppException,
    AuthenticationError,
    EmptyResultError,
    InvalidTokenError,
    MalformedResponseError,
    NormalizationError,
    PersistenceError,
    UnexpectedShapeError,
    UpstreamServiceError,
    ValidationError,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "EmptyResultError",
    "InvalidTokenError",
    "MalformedResponseError",
    "NormalizationError",
    "PersistenceError",
    "UnexpectedShapeError",
    "UpstreamServiceError",
    "ValidationError",
]
