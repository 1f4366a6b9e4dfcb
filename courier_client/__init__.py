"""Courier client for the last-mile delivery mobile API."""

from .app import CourierApp
from .domain.models import OrderStatus, SessionStatus
from .application.errors import (
    CourierApiError,
    AuthError,
    NotFoundError,
    ValidationError,
    TransitionError,
    ServerError,
    NetworkError,
    UnexpectedResponseError,
)

__version__ = "1.0.0"

__all__ = [
    "CourierApp",
    "OrderStatus",
    "SessionStatus",
    "CourierApiError",
    "AuthError",
    "NotFoundError",
    "ValidationError",
    "TransitionError",
    "ServerError",
    "NetworkError",
    "UnexpectedResponseError",
]
