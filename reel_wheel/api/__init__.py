"""Reel Wheel API client layer -- re-exports the primary client class."""

from reel_wheel.api.client import ReelWheelClient
from reel_wheel.api.errors import (
    ApiError,
    AuthError,
    HttpStatusError,
    InvalidCredentialsError,
    NetworkError,
    NoRefreshTokenError,
    RefreshFailedError,
    ReelWheelError,
    SessionExpiredError,
)

__all__ = [
    "ApiError",
    "AuthError",
    "HttpStatusError",
    "InvalidCredentialsError",
    "NetworkError",
    "NoRefreshTokenError",
    "RefreshFailedError",
    "ReelWheelClient",
    "ReelWheelError",
    "SessionExpiredError",
]
