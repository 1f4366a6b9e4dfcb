"""Errors raised by the courier API gateway and the view-models built on it.

Every failure carries a human-readable ``message`` that can be shown to
the courier as-is. Nothing here is retried automatically.
"""
from typing import Optional


class CourierApiError(Exception):
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.message)


class AuthError(CourierApiError):
    """Missing, expired or rejected bearer token."""
    default_message = "Unauthorized"


class NotFoundError(CourierApiError):
    default_message = "Not found"


class ValidationError(CourierApiError):
    """The payload was rejected, by the server or before it was sent."""
    default_message = "Invalid request"


class TransitionError(ValidationError):
    """The requested status change is not allowed from the current status."""
    default_message = "Status change not allowed"


class ServerError(CourierApiError):
    default_message = "Server error"


class NetworkError(CourierApiError):
    default_message = "Network error, check your connection"


class UnexpectedResponseError(CourierApiError):
    """The body was not JSON or did not have the expected shape."""
    default_message = "Invalid server response"


def error_for_status(status_code: int, message: Optional[str]) -> CourierApiError:
    if status_code in (401, 403):
        return AuthError(message, status_code)
    if status_code == 404:
        return NotFoundError(message, status_code)
    if status_code in (400, 409, 422):
        return ValidationError(message, status_code)
    return ServerError(message, status_code)
