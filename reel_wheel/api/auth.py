"""Credential store: the access/refresh token pair and its lifecycle.

The store is in exactly one of two states, :class:`Unauthenticated` or
:class:`Authenticated`.  Every transition is written through to the
token storage immediately, and construction hydrates from it, so a new
process picks up where the last one left off.

Token flow:

1. :meth:`CredentialStore.login` posts a password grant and stores the
   returned pair.
2. :meth:`CredentialStore.refresh` trades the refresh token for a new
   pair.  A rejected refresh ends the session; it is never retried.
3. :meth:`CredentialStore.logout` forgets everything.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol, Union

import httpx
from loguru import logger

from ..models.user import TokenPair
from ..storage.tokens import FileTokenStore
from .errors import (
    ApiError,
    InvalidCredentialsError,
    NetworkError,
    NoRefreshTokenError,
    RefreshFailedError,
    detail_from_response,
)

LOGIN_PATH = "/v1/auth/login"
REFRESH_PATH = "/v1/auth/refresh"


class TokenStorage(Protocol):
    def load(self) -> TokenPair | None: ...

    def save(self, tokens: TokenPair) -> None: ...

    def clear(self) -> None: ...


@dataclass(frozen=True)
class Unauthenticated:
    """No tokens are held."""


@dataclass(frozen=True)
class Authenticated:
    """A complete token pair is held."""

    tokens: TokenPair


AuthState = Union[Unauthenticated, Authenticated]


class CredentialStore:
    """Owns the token pair for one client session.

    Parameters
    ----------
    http:
        Shared async HTTP client used for the auth endpoints.
    base_url:
        API root, e.g. ``https://reel-wheel-api-x92jj.ondigitalocean.app``.
    storage:
        Durable token storage.  Defaults to the JSON file in the user
        config directory.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        storage: TokenStorage | None = None,
    ) -> None:
        self._http = http
        self.base_url = base_url.rstrip("/")
        self._storage = storage if storage is not None else FileTokenStore()
        self._refresh_task: asyncio.Task | None = None

        tokens = self._storage.load()
        self._state: AuthState = (
            Authenticated(tokens) if tokens is not None else Unauthenticated()
        )
        if tokens is not None:
            logger.debug("Restored tokens from storage")

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def tokens(self) -> TokenPair | None:
        """Return the held token pair, or ``None``."""
        if isinstance(self._state, Authenticated):
            return self._state.tokens
        return None

    @property
    def access_token(self) -> str | None:
        tokens = self.tokens
        return tokens.access_token if tokens else None

    @property
    def is_authenticated(self) -> bool:
        """Return ``True`` if an access token is held."""
        return isinstance(self._state, Authenticated)

    def auth_headers(self) -> dict[str, str]:
        """Build request headers: a JSON content type plus the bearer token."""
        headers = {"Content-Type": "application/json"}
        token = self.access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _set_tokens(self, tokens: TokenPair) -> None:
        self._state = Authenticated(tokens)
        self._storage.save(tokens)

    def logout(self) -> None:
        """Forget the token pair in memory and in storage.  Idempotent."""
        self._state = Unauthenticated()
        self._storage.clear()

    async def login(self, username: str, password: str) -> TokenPair:
        """Exchange *username*/*password* for a token pair.

        Raises :class:`InvalidCredentialsError` with the server-provided
        detail when the credentials are rejected.
        """
        try:
            resp = await self._http.post(
                f"{self.base_url}{LOGIN_PATH}",
                data={
                    "username": username,
                    "password": password,
                    "grant_type": "password",
                },
            )
        except httpx.RequestError as exc:
            logger.error(f"Login request failed: {exc}")
            raise NetworkError(f"Login request failed: {exc}") from exc

        if not resp.is_success:
            detail = detail_from_response(resp) or "Login failed"
            logger.error(f"Login rejected ({resp.status_code}): {detail}")
            raise InvalidCredentialsError(detail)

        try:
            tokens = TokenPair.model_validate(resp.json())
        except ValueError as exc:
            raise ApiError(f"Malformed login response: {exc}") from exc

        self._set_tokens(tokens)
        logger.debug(f"Logged in as {username}")
        return tokens

    async def refresh(self) -> TokenPair:
        """Trade the refresh token for a new pair.

        Concurrent callers share a single request.  On any failure the
        stored tokens are cleared and :class:`RefreshFailedError` is
        raised.
        """
        if self._refresh_task is None or self._refresh_task.done():
            tokens = self.tokens
            if tokens is None:
                raise NoRefreshTokenError()
            self._refresh_task = asyncio.ensure_future(
                self._refresh(tokens.refresh_token)
            )
        return await asyncio.shield(self._refresh_task)

    async def _refresh(self, refresh_token: str) -> TokenPair:
        try:
            resp = await self._http.post(
                f"{self.base_url}{REFRESH_PATH}",
                json={"refresh_token": refresh_token},
                headers={"Content-Type": "application/json"},
            )
        except httpx.RequestError as exc:
            logger.error(f"Token refresh failed: {exc}")
            self.logout()
            raise RefreshFailedError(str(exc)) from exc

        if not resp.is_success:
            detail = detail_from_response(resp) or "Token refresh failed"
            logger.error(f"Token refresh rejected ({resp.status_code}): {detail}")
            self.logout()
            raise RefreshFailedError(detail)

        try:
            tokens = TokenPair.model_validate(resp.json())
        except ValueError as exc:
            logger.error(f"Malformed refresh response: {exc}")
            self.logout()
            raise RefreshFailedError(f"Malformed refresh response: {exc}") from exc

        self._set_tokens(tokens)
        logger.debug("Access token refreshed successfully")
        return tokens
