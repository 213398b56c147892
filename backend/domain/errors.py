"""Error taxonomy shared by services and controllers."""

from __future__ import annotations


class BookingSystemError(Exception):
    """Base class for all expected booking-system failures."""


class ValidationError(BookingSystemError):
    """Raised when a required field is missing or invalid."""


class ConflictError(BookingSystemError):
    """Raised when a slot is already held by an approved booking."""


class NotFoundError(BookingSystemError):
    """Raised when a room or booking id does not exist."""


class AuthError(BookingSystemError):
    """Raised when a bearer token is missing, unknown, or expired."""


class NetworkError(BookingSystemError):
    """Raised when the external AI backend is unreachable or times out."""
