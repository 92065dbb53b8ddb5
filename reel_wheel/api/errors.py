"""Exception hierarchy for the Reel Wheel client.

Authentication problems derive from :class:`AuthError`; everything that
goes wrong talking to the catalog API derives from :class:`ApiError`.
"""

from __future__ import annotations

import httpx


class ReelWheelError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class AuthError(ReelWheelError):
    """Raised when credentials are rejected or cannot be renewed."""


class InvalidCredentialsError(AuthError):
    """The login endpoint rejected the supplied username/password."""

    def __init__(self, detail: str = "Login failed") -> None:
        self.detail = detail
        super().__init__(detail)


class NoRefreshTokenError(AuthError):
    """A refresh was requested but no refresh token is held."""

    def __init__(self) -> None:
        super().__init__("No refresh token available")


class RefreshFailedError(AuthError):
    """The refresh endpoint rejected the refresh token.

    Raising this always ends the session: the stored tokens are cleared
    before it propagates.
    """

    def __init__(self, detail: str = "Token refresh failed") -> None:
        self.detail = detail
        super().__init__(detail)


class SessionExpiredError(AuthError):
    """A request got a 401 and the tokens could not be refreshed."""

    def __init__(self) -> None:
        super().__init__("Session expired. Please login again.")


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


class ApiError(ReelWheelError):
    """Raised when a catalog request does not produce a usable response."""


class HttpStatusError(ApiError):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str | None = None) -> None:
        self.status_code = status_code
        self.detail = detail or f"HTTP error! status: {status_code}"
        super().__init__(self.detail)


class NetworkError(ApiError):
    """The request never produced a usable HTTP response.

    Covers transport failures (DNS, connect, timeout) as well as bodies
    that cannot be decoded and redirect loops.
    """


def detail_from_response(response: httpx.Response) -> str | None:
    """Extract the ``detail`` field from a JSON error body, if there is one.

    FastAPI validation errors carry a list of objects under ``detail``;
    their ``msg`` fields are joined into one line.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get("detail")
    if isinstance(detail, str):
        return detail or None
    if isinstance(detail, list):
        messages = [
            str(item.get("msg", item)) if isinstance(item, dict) else str(item)
            for item in detail
        ]
        return "; ".join(messages) or None
    return None
