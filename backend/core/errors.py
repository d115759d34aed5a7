"""Error kinds surfaced by services and mapped to HTTP responses."""

from __future__ import annotations

from fastapi import status


class ApiError(Exception):
    """Base error carrying a client-safe message and an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailedError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UnauthenticatedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class TokenInvalidError(ApiError):
    """Refresh token is malformed, expired, unknown or superseded.

    Callers must re-authenticate from scratch.
    """

    status_code = status.HTTP_410_GONE
    default_message = "Invalid refresh token"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InfrastructureError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"


__all__ = [
    "ApiError",
    "ValidationFailedError",
    "UnauthenticatedError",
    "TokenInvalidError",
    "NotFoundError",
    "ConflictError",
    "InfrastructureError",
]
