"""Per-run memoization of read-only cluster queries.

Every read the matching engine issues goes through ObjectCache.fetch().
The first fetch of a query performs the read; later fetches return the
stored bytes untouched, so one run sees a single consistent snapshot of
each object. Only completed reads are stored: a read that raises leaves
no entry behind and the next fetch retries it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Protocol

from pvcrestart.errors import TransientReadFailure
from pvcrestart.models.resources import ObjectQuery
from pvcrestart.observability.logging import get_logger

_log = get_logger("cache")


class ObjectReader(Protocol):
    """Anything that can perform a raw read against the API server."""

    async def read(self, query: ObjectQuery) -> bytes: ...


@dataclass(frozen=True)
class CacheStats:
    """Counters for one cache lifetime."""

    hits: int
    misses: int
    entries: int


class ObjectCache:
    """In-memory, write-once store of raw read results keyed by query.

    No eviction, TTL or size bound: the store lives for one run and is
    discarded by close() (or on leaving ``async with``).
    """

    def __init__(self, reader: ObjectReader) -> None:
        self._reader = reader
        self._store: dict[str, bytes] = {}
        self._hits = 0
        self._misses = 0
        self._closed = False

    async def fetch(self, query: ObjectQuery) -> bytes:
        """Return the raw bytes for *query*, reading at most once per key."""
        if self._closed:
            raise RuntimeError("ObjectCache is closed")
        key = query.cache_key
        cached = self._store.get(key)
        if cached is not None:
            self._hits += 1
            return cached

        self._misses += 1
        data = await self._reader.read(query)
        # First writer wins so a key is never rebound once stored.
        return self._store.setdefault(key, data)

    async def fetch_json(self, query: ObjectQuery) -> Any:
        """Fetch *query* and decode it as JSON."""
        data = await self.fetch(query)
        try:
            return json.loads(data)
        except ValueError as exc:
            raise TransientReadFailure(query, f"invalid JSON: {exc}") from exc

    def __contains__(self, query: ObjectQuery) -> bool:
        return query.cache_key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, entries=len(self._store))

    def close(self) -> None:
        """Discard every entry. Safe to call more than once."""
        if self._closed:
            return
        _log.debug("cache_closed", hits=self._hits, misses=self._misses, entries=len(self._store))
        self._store.clear()
        self._closed = True

    async def __aenter__(self) -> ObjectCache:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
