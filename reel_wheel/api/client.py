"""Async HTTP client for the Reel Wheel catalog API.

:class:`ReelWheelClient` is the session object: it owns the HTTP
transport, the :class:`~reel_wheel.api.auth.CredentialStore` and the
:class:`~reel_wheel.storage.cache.ResponseCache`.  Every call goes
through :meth:`ReelWheelClient.request`, which

* serves cache-eligible reads from the cache when it can,
* attaches the bearer token,
* refreshes the token and retries once when the API answers 401,
* turns failures into :mod:`reel_wheel.api.errors` exceptions,
* substitutes an empty page when a collection listing fails, and
* invalidates the cached reads of a resource family after a write to it.

Example::

    async with ReelWheelClient() as client:
        if not client.is_authenticated:
            await client.login("admin@example.com", "secret")
        page = await client.get("/v1/products/", cache_key="products:")
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode, urlsplit

import httpx
from loguru import logger

from ..models.user import TokenPair
from ..storage.cache import ResponseCache
from ..storage.config import AppSettings
from .auth import CredentialStore, TokenStorage
from .errors import (
    ApiError,
    AuthError,
    HttpStatusError,
    NetworkError,
    SessionExpiredError,
    detail_from_response,
)

# Path segment under /v1/ naming each cacheable resource family.
PRODUCTS = "products"
MEMORABILIA = "memorabilia"
MERCHANDISE = "merchandises"
RESOURCE_FAMILIES = (PRODUCTS, MEMORABILIA, MERCHANDISE)

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def _path_segments(path: str) -> list[str]:
    return [seg for seg in urlsplit(path).path.split("/") if seg]


def resource_family(path: str) -> str | None:
    """Return the resource family *path* belongs to, if any.

    >>> resource_family("/v1/products/abc")
    'products'
    >>> resource_family("/v1/uploads/") is None
    True
    """
    segments = _path_segments(path)
    if len(segments) >= 2 and segments[0] == "v1" and segments[1] in RESOURCE_FAMILIES:
        return segments[1]
    return None


def is_listing_request(method: str, path: str) -> bool:
    """Return ``True`` for a GET on a collection (or its search endpoint)."""
    if method.upper() != "GET" or resource_family(path) is None:
        return False
    rest = _path_segments(path)[2:]
    return rest == [] or rest == ["search"]


def empty_list_response(error: str) -> dict[str, Any]:
    """Build the empty page returned in place of a failed listing."""
    return {"rows": [], "total": 0, "offset": 0, "error": error}


def clean_params(params: dict[str, Any]) -> dict[str, Any]:
    """Drop ``None`` values and render booleans the way the API expects.

    List values are kept as lists; :mod:`httpx` repeats the key for each
    item (``?genres=a&genres=b``).
    """
    cleaned: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            if not value:
                continue
            value = [str(v) for v in value]
        cleaned[key] = value
    return cleaned


def list_cache_key(family: str, params: dict[str, Any]) -> str:
    """Return a stable cache key for a listing of *family* with *params*."""
    query = urlencode(sorted(clean_params(params).items()), doseq=True)
    return f"{family}:{query}"


class ReelWheelClient:
    """Session-scoped API client with token refresh and response caching.

    Parameters
    ----------
    base_url:
        API root.  Defaults to the ``api_base_url`` setting.
    storage:
        Token storage handed to the credential store.  Defaults to the
        JSON file in the user config directory.
    cache:
        Response cache.  Defaults to one built from the settings.
    settings:
        Settings mapping; defaults to :meth:`AppSettings.load`.
    transport:
        Optional :mod:`httpx` transport, e.g. ``httpx.MockTransport`` in
        tests.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        storage: TokenStorage | None = None,
        cache: ResponseCache | None = None,
        settings: dict[str, Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = settings if settings is not None else AppSettings.load()
        self.base_url = (base_url or settings["api_base_url"]).rstrip("/")
        self.stale_while_revalidate: bool = settings["stale_while_revalidate"]
        self._http = httpx.AsyncClient(
            timeout=settings["request_timeout"], transport=transport
        )
        self.credentials = CredentialStore(self._http, self.base_url, storage)
        self.cache = cache if cache is not None else ResponseCache(
            default_ttl=settings["cache_ttl_seconds"],
            stale_grace=settings["cache_stale_grace_seconds"],
            enabled=settings["cache_enabled"],
        )

    # ------------------------------------------------------------------
    # Auth surface
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.credentials.is_authenticated

    def auth_headers(self) -> dict[str, str]:
        return self.credentials.auth_headers()

    async def login(self, username: str, password: str) -> TokenPair:
        return await self.credentials.login(username, password)

    def logout(self) -> None:
        self.credentials.logout()

    # ------------------------------------------------------------------
    # Request pipeline
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: Any = None,
        headers: dict[str, str] | None = None,
        cache_key: str | None = None,
        ttl: float | None = None,
        stale_while_revalidate: bool | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        ``None`` is returned for empty (204) responses.  Passing
        *cache_key* on a GET makes the call cache-eligible; *ttl* and
        *stale_while_revalidate* override the session defaults for it.
        """
        method = method.upper()

        async def send() -> Any:
            return await self._send(
                method, path, params=params, json=json, data=data, files=files,
                headers=headers,
            )

        try:
            if cache_key is not None and method == "GET":
                swr = (
                    self.stale_while_revalidate
                    if stale_while_revalidate is None
                    else stale_while_revalidate
                )
                result = await self.cache.get_or_fetch(
                    cache_key,
                    send,
                    ttl=ttl,
                    stale_while_revalidate=swr,
                    family=resource_family(path),
                )
            else:
                result = await send()
        except (ApiError, AuthError) as exc:
            if is_listing_request(method, path):
                logger.warning(f"API request failed for {path}, returning empty list: {exc}")
                return empty_list_response(str(exc))
            raise

        if method in MUTATING_METHODS:
            family = resource_family(path)
            if family is not None:
                self.cache.invalidate_family(family)
        return result

    async def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        sent_with = self.credentials.access_token
        response = await self._dispatch(method, path, **kwargs)

        if response.status_code == 401 and self.credentials.is_authenticated:
            # Another request may already have refreshed the token we sent.
            if self.credentials.access_token == sent_with:
                try:
                    await self.credentials.refresh()
                except AuthError as exc:
                    logger.error(f"Could not refresh session: {exc}")
                    self.credentials.logout()
                    raise SessionExpiredError() from exc
            response = await self._dispatch(method, path, **kwargs)

        return self._decode(response)

    async def _dispatch(
        self,
        method: str,
        path: str,
        *,
        params: Any,
        json: Any,
        data: dict[str, Any] | None,
        files: Any,
        headers: dict[str, str] | None,
    ) -> httpx.Response:
        merged = self.credentials.auth_headers()
        if data is not None or files is not None:
            # Let httpx set the form/multipart content type (with boundary).
            merged.pop("Content-Type", None)
        if headers:
            merged.update(headers)

        logger.debug(f"{method} {path}")
        try:
            return await self._http.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                data=data,
                files=files,
                headers=merged,
            )
        except httpx.RequestError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.is_success:
            raise HttpStatusError(response.status_code, detail_from_response(response))
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON in response: {exc}") from exc

    # ------------------------------------------------------------------
    # Verb helpers
    # ------------------------------------------------------------------

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying HTTP transport."""
        await self._http.aclose()

    async def __aenter__(self) -> ReelWheelClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
