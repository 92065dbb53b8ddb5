"""In-memory response cache with stale-while-revalidate.

``ResponseCache`` maps caller-supplied keys (typically endpoint plus query
string, e.g. ``"products:limit=20&offset=0"``) to the last successfully
fetched value.  Each entry belongs to a *family* (``products``,
``memorabilia``, ``merchandises``) so that a write to one resource can
drop every cached read of it at once.

At most one fetch per key is in flight: concurrent readers of the same
key await the same :class:`asyncio.Task`.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from loguru import logger

T = TypeVar("T")

Fetcher = Callable[[], Awaitable[Any]]


def family_for_key(key: str) -> str:
    """Derive the family of *key* from its leading segment.

    ``"products:p0"`` and ``"products-list-foo"`` both belong to
    ``"products"``.
    """
    for sep in (":", "-", "/"):
        head, found, _ = key.partition(sep)
        if found and head:
            return head
    return key


@dataclass
class CacheEntry(Generic[T]):
    key: str
    value: T
    fetched_at: float
    ttl: float
    family: str

    def age(self, now: float) -> float:
        return now - self.fetched_at

    def is_fresh(self, now: float) -> bool:
        return self.age(now) < self.ttl


class ResponseCache:
    """Keyed TTL cache with single-flight refresh per key.

    Parameters
    ----------
    default_ttl:
        TTL in seconds used when a read does not pass its own.
    stale_grace:
        Seconds past its TTL that a stale entry is kept around (and
        servable under stale-while-revalidate) before
        :meth:`purge_expired` drops it.
    enabled:
        When ``False`` every read goes straight to the fetcher and
        nothing is stored.
    clock:
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        default_ttl: float = 120.0,
        stale_grace: float = 600.0,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = default_ttl
        self.stale_grace = stale_grace
        self.enabled = enabled
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}
        # key -> (family, task) for fetches currently running.
        self._inflight: dict[str, tuple[str, asyncio.Task]] = {}
        # Bumped on invalidation so a fetch that started earlier cannot
        # write a pre-mutation value back into the table.
        self._generation: dict[str, int] = {}
        self._epoch = 0

    # -- inspection ---------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def peek(self, key: str) -> CacheEntry[Any] | None:
        """Return the raw entry for *key* without triggering any fetch."""
        return self._entries.get(key)

    def is_refreshing(self, key: str) -> bool:
        """Return ``True`` while a fetch for *key* is in flight."""
        running = self._inflight.get(key)
        return running is not None and not running[1].done()

    # -- reads --------------------------------------------------------------

    async def get_or_fetch(
        self,
        key: str,
        fetch: Fetcher,
        ttl: float | None = None,
        stale_while_revalidate: bool = False,
        family: str | None = None,
    ) -> Any:
        """Return the value for *key*, fetching it only when needed.

        A fresh entry is returned without calling *fetch*.  A stale entry
        is returned immediately when *stale_while_revalidate* is set, and
        a background refresh is started; otherwise the caller waits for a
        foreground refresh.  Errors from a foreground fetch propagate;
        errors from a background refresh are logged and the stale value
        stays in place.
        """
        if not self.enabled:
            return await fetch()

        ttl = self.default_ttl if ttl is None else ttl
        family = family or family_for_key(key)
        entry = self._entries.get(key)
        now = self._clock()

        if entry is not None and entry.is_fresh(now):
            logger.debug(f"Cache hit for {key}")
            return entry.value

        if entry is not None and not self._within_grace(entry, now):
            logger.debug(f"Dropping {key}: stale for longer than {self.stale_grace}s")
            del self._entries[key]
            entry = None

        if entry is not None and stale_while_revalidate:
            logger.debug(f"Serving stale {key} (age {entry.age(now):.1f}s), revalidating")
            task = self._start_fetch(key, fetch, ttl, family)
            task.add_done_callback(self._log_background_failure)
            return entry.value

        logger.debug(f"Cache miss for {key}")
        task = self._start_fetch(key, fetch, ttl, family)
        # Shielded so a cancelled caller does not cancel the shared fetch.
        return await asyncio.shield(task)

    def _within_grace(self, entry: CacheEntry[Any], now: float) -> bool:
        return entry.age(now) < entry.ttl + self.stale_grace

    def _start_fetch(
        self, key: str, fetch: Fetcher, ttl: float, family: str
    ) -> asyncio.Task:
        running = self._inflight.get(key)
        if running is not None and not running[1].done():
            return running[1]
        generation = (self._epoch, self._generation.get(family, 0))
        task = asyncio.ensure_future(
            self._fetch_and_store(key, fetch, ttl, family, generation)
        )
        self._inflight[key] = (family, task)
        return task

    async def _fetch_and_store(
        self,
        key: str,
        fetch: Fetcher,
        ttl: float,
        family: str,
        generation: tuple[int, int],
    ) -> Any:
        try:
            value = await fetch()
            if (self._epoch, self._generation.get(family, 0)) == generation:
                self.put(key, value, ttl=ttl, family=family)
            else:
                logger.debug(f"Discarding fetch for {key}: {family} was invalidated")
            return value
        finally:
            running = self._inflight.get(key)
            if running is not None and running[1] is asyncio.current_task():
                del self._inflight[key]

    @staticmethod
    def _log_background_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Background revalidation failed, keeping stale value: {exc}")

    # -- writes -------------------------------------------------------------

    def put(
        self,
        key: str,
        value: Any,
        ttl: float | None = None,
        family: str | None = None,
    ) -> None:
        """Store *value* under *key*, replacing any existing entry.

        Entries past their grace period are purged on every store, so the
        table does not grow without bound in a long-lived session.
        """
        if not self.enabled:
            return
        self.purge_expired()
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            fetched_at=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
            family=family or family_for_key(key),
        )

    # -- eviction -----------------------------------------------------------

    def invalidate(self, key: str) -> bool:
        """Drop a single entry.  Returns ``True`` if one was present."""
        return self._entries.pop(key, None) is not None

    def invalidate_family(self, family: str) -> int:
        """Drop every entry belonging to *family* and return the count."""
        self._generation[family] = self._generation.get(family, 0) + 1
        # Later readers must not join a fetch that started before the write.
        for key in [k for k, (f, _) in self._inflight.items() if f == family]:
            del self._inflight[key]
        keys = [k for k, e in self._entries.items() if e.family == family]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.debug(f"Invalidated {len(keys)} cached {family} entries")
        return len(keys)

    def purge_expired(self) -> int:
        """Drop entries older than their TTL plus the stale grace period."""
        now = self._clock()
        expired = [
            k
            for k, e in self._entries.items()
            if not self._within_grace(e, now) and not self.is_refreshing(k)
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def clear(self) -> None:
        """Drop every cached entry."""
        self._epoch += 1
        self._inflight.clear()
        self._entries.clear()
