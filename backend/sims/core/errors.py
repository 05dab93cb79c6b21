"""Error taxonomy shared by services and the HTTP layer."""
from __future__ import annotations

from fastapi import status


class SIMSError(Exception):
    """Base class for errors that map onto a client-facing response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(SIMSError):
    """Missing, invalid or expired session. The session cookie is cleared."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class AuthorizationError(SIMSError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class ValidationError(SIMSError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DuplicateSerialError(ValidationError):
    """A manufacturer serial number is already registered to another asset."""

    def __init__(self, serial: str) -> None:
        self.serial = serial
        super().__init__(f'An asset with Serial Number "{serial}" is already registered.')


class ConflictError(SIMSError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Record already exists"


class NotFoundError(SIMSError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Record not found"


class UpstreamUnavailableError(SIMSError):
    """Partner system could not be reached. Converted to a soft status by the bridge."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Status unavailable"


class PersistenceError(SIMSError):
    default_message = "Database operation failed"
