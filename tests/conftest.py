"""Shared fixtures: a scripted fake API behind ``httpx.MockTransport``."""
import asyncio

import httpx
import pytest

from reel_wheel.api.client import ReelWheelClient
from reel_wheel.models.user import TokenPair
from reel_wheel.storage.cache import ResponseCache
from reel_wheel.storage.config import DEFAULT_SETTINGS
from reel_wheel.storage.tokens import MemoryTokenStore

BASE_URL = "https://api.test"


def token_response(access: str, refresh: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"access_token": access, "refresh_token": refresh, "token_type": "bearer"},
    )


def list_response(rows: list, total: int | None = None) -> httpx.Response:
    return httpx.Response(
        200,
        json={"rows": rows, "total": len(rows) if total is None else total, "offset": 0},
    )


class RawStream(httpx.AsyncByteStream):
    """Response body handed to the client undecoded."""

    def __init__(self, data: bytes) -> None:
        self.data = data

    async def __aiter__(self):
        yield self.data


def corrupt_gzip_response(request: httpx.Request) -> httpx.Response:
    """A 200 that claims gzip encoding but carries plain bytes."""
    return httpx.Response(
        200, headers={"Content-Encoding": "gzip"}, stream=RawStream(b"definitely not gzip")
    )


class FakeApi:
    """Scripted responses keyed by ``(method, path)``.

    Each route holds a queue; responses are consumed in order and the
    last one repeats.  A queue item may be an ``httpx.Response``, an
    exception to raise, or a callable taking the request and returning
    either of those.
    """

    def __init__(self) -> None:
        self.routes: dict = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses) -> None:
        self.routes.setdefault((method, path), []).extend(responses)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # Yield so concurrent requests genuinely interleave.
        await asyncio.sleep(0)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"detail": "Not Found"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(item):
            item = item(request)
        if isinstance(item, Exception):
            raise item
        return item


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_client(api, clock):
    """Build clients wired to the fake API, in-memory tokens and a fake clock."""

    def factory(tokens: TokenPair | None = None, storage=None, **settings_overrides):
        settings = {**DEFAULT_SETTINGS, **settings_overrides}
        cache = ResponseCache(
            default_ttl=settings["cache_ttl_seconds"],
            stale_grace=settings["cache_stale_grace_seconds"],
            enabled=settings["cache_enabled"],
            clock=clock,
        )
        return ReelWheelClient(
            BASE_URL,
            storage=storage if storage is not None else MemoryTokenStore(tokens),
            cache=cache,
            settings=settings,
            transport=httpx.MockTransport(api),
        )

    return factory


async def settle(cache: ResponseCache, key: str) -> None:
    """Let a background revalidation of *key* run to completion."""
    for _ in range(100):
        if not cache.is_refreshing(key):
            return
        await asyncio.sleep(0)
    raise AssertionError(f"revalidation of {key} never finished")
