"""Domain errors surfaced to API callers as structured failure payloads."""

from __future__ import annotations

from fastapi import status


class StorefrontError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StorefrontError):
    """Input has the wrong shape or format."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(StorefrontError):
    """A referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidStateError(StorefrontError):
    """The entity exists but the operation is not permitted right now."""

    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(StorefrontError):
    """Unclassified failure; the message is safe to return to callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
