# bursary/core/exceptions.py

from typing import Any, Optional


class BursaryError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    `message` is safe to show to the caller. `error` carries optional
    diagnostic detail that is also safe to expose; raw driver errors
    must never be placed here.
    """

    status_code: int = 500
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, error: Any = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(BursaryError):
    status_code = 400
    default_message = "Missing or invalid fields"


class ConflictError(BursaryError):
    # The public contract reports duplicates as 400
    status_code = 400
    default_message = "Resource already exists"


class NotFoundError(BursaryError):
    status_code = 404
    default_message = "Resource not found"


class AuthenticationError(BursaryError):
    status_code = 401
    default_message = "Invalid credentials"


class PersistenceError(BursaryError):
    status_code = 500
    default_message = "A database error occurred"


class NotificationError(BursaryError):
    """Delivery failure. Logged by the notifier, never turned into a response."""

    default_message = "Notification delivery failed"
