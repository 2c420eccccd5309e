"""
Error taxonomy for the blog backend.

Services raise these instead of HTTP errors; app.main maps each kind to a
status code in a single exception handler.
"""

from typing import Any, Optional


class BlogError(Exception):
    """Base exception for all domain errors."""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        body: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class AuthenticationError(BlogError):
    """Bad credentials, or an invalid/expired access token."""

    status_code = 401


class RefreshError(BlogError):
    """Unknown, expired, or already-rotated refresh token."""

    status_code = 401

    def __init__(self, message: str = "Invalid or expired refresh token"):
        super().__init__(message, code="INVALID_REFRESH_TOKEN")


class AuthorizationError(BlogError):
    """Authenticated, but not allowed to touch the resource."""

    status_code = 403


class NotFoundError(BlogError):
    """Referenced post, category or user is absent."""

    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            f"{resource} not found",
            code="NOT_FOUND",
            details={"resource": resource, "id": str(resource_id)},
        )


class ConflictError(BlogError):
    """Unique constraint or referential conflict."""

    status_code = 409


class ValidationError(BlogError):
    """Malformed input or out-of-range pagination."""

    status_code = 422
