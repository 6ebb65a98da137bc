"""Custom exceptions for the PeerRec recommendation core.

Each exception carries the HTTP status code the API layer should answer with,
so route handlers never need to translate them one by one.
"""

from typing import Any, Dict, Iterable, Optional


class RecommenderError(Exception):
    """Base exception for PeerRec errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ValidationError(RecommenderError):
    """Raised when input is rejected before it reaches a store."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=400, details=details)


class InvalidInteractionTypeError(ValidationError):
    """Raised when an interaction type is outside the fixed enum."""

    def __init__(self, interaction_type: Any, valid_types: Iterable[str]):
        valid = list(valid_types)
        message = (
            f"Invalid interaction type {interaction_type!r}. "
            f"Must be one of: {', '.join(valid)}"
        )
        super().__init__(
            message=message,
            details={"type": str(interaction_type), "valid_types": valid},
        )


class NotFoundError(RecommenderError):
    """Raised when a referenced product or user cannot be resolved."""

    def __init__(self, kind: str, identifier: str):
        super().__init__(
            message=f"{kind.capitalize()} '{identifier}' not found",
            status_code=404,
            details={kind: identifier},
        )


class DependencyError(RecommenderError):
    """Raised by a store implementation when its backend is unreachable."""

    def __init__(self, dependency: str, error: Exception):
        message = f"Dependency '{dependency}' unavailable: {str(error)}"
        super().__init__(
            message=message,
            status_code=503,
            details={
                "dependency": dependency,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
