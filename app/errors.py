"""
Compare AI — Error taxonomy

Services and dependencies raise these exceptions; ``app.main`` maps each one
to an HTTP response with the shared ``{"message": ...}`` envelope.
"""

from __future__ import annotations

from fastapi import status


class AppError(Exception):
    """Base class for errors that carry their own HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class ConflictError(BadRequestError):
    default_message = "Already exists"


class ExternalServiceError(AppError):
    """An upstream service failed; its message is passed through to the caller."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "External service request failed"
