"""Error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations

from typing import Optional

from fastapi import status


class HelpdeskError(Exception):
    """Base error rendered as ``{"error": ..., "message": ...}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, *, error: Optional[str] = None):
        super().__init__(message or error or self.error)
        if error:
            self.error = error
        self.message = message

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body


class Unauthenticated(HelpdeskError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"


class Forbidden(HelpdeskError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Access denied"


class InvalidInput(HelpdeskError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid input"


class NotFound(HelpdeskError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class Internal(HelpdeskError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal Server Error"


class StorageError(Internal):
    """Object storage upload or removal failed."""

    error = "Storage error"


class DeliveryError(Exception):
    """An email could not be handed to the provider."""
