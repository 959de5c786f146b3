"""Error taxonomy for the sightings service.

Every error carries the HTTP status it maps to. Handlers in ``main`` render
them as ``{"error": message}``; server-side failures are rendered with a
generic message so storage internals never reach the caller.
"""

from fastapi import status


class SightingsError(Exception):
    """Base class for all service errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Server error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def response_message(self) -> str:
        """Message safe to show to the caller."""
        if self.status_code >= 500:
            return self.public_message
        return self.message


class ValidationError(SightingsError):
    """Bad or missing input, correctable by the submitter."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid request"


class AuthError(SightingsError):
    """Missing or invalid operator credential."""

    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Unauthorized"


class NotFoundError(SightingsError):
    """Unknown attachment key or route."""

    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Not found"


class StorageError(SightingsError):
    """Record store or blob store failure."""


class InternalError(SightingsError):
    """Unexpected failure; unhandled exceptions are wrapped in it at the app boundary."""
