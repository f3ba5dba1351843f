"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Keyed TTL store with single-flight loaders.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Generic

from .base import CacheEntry, Clock, Loader, V
from .coalescing import RequestCoalescer

logger = logging.getLogger("sessioncore.cache")


class TTLCache(Generic[V]):
    """
    Session-scoped keyed cache with freshness windows.

    Fresh hits return without suspending on any loader. Misses go through a
    ``RequestCoalescer`` so concurrent callers for one key share a single
    loader invocation. Failed loads store nothing, so the next call retries.

    Several caches may share one coalescer; ``namespace`` keeps their
    in-flight slots apart.
    """

    def __init__(
        self,
        *,
        default_ttl_s: float | None = 300.0,
        coalescer: RequestCoalescer | None = None,
        namespace: str = "cache",
        clock: Clock = time.time,
    ) -> None:
        self._default_ttl_s = default_ttl_s
        self._coalescer = coalescer or RequestCoalescer()
        self._namespace = namespace
        self._clock = clock
        self._rows: dict[str, CacheEntry[V]] = {}

    @property
    def default_ttl_s(self) -> float | None:
        return self._default_ttl_s

    def _slot_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def _resolve_ttl(self, ttl_s: float | None) -> float | None:
        return self._default_ttl_s if ttl_s is None else ttl_s

    def _fresh_entry(self, key: str, ttl_s: float | None) -> CacheEntry[V] | None:
        row = self._rows.get(key)
        if row is None:
            return None
        if not row.is_fresh(self._resolve_ttl(ttl_s), self._clock()):
            return None
        return row

    async def get_or_fetch(
        self,
        key: str,
        loader: Loader[V],
        *,
        ttl_s: float | None = None,
        force_refresh: bool = False,
    ) -> V:
        """
        Return the cached value for ``key`` or load it.

        Args:
            key: Cache key.
            loader: Zero-argument coroutine factory performing the I/O.
            ttl_s: Freshness window for this lookup; defaults to the cache's.
            force_refresh: Skip the freshness check and always load, unless
                a load for the key is already in flight, which is joined.

        Raises:
            Whatever ``loader`` raised, identically for every coalesced caller.
        """
        if not force_refresh:
            row = self._fresh_entry(key, ttl_s)
            if row is not None:
                return row.value

        def _store(value: V) -> None:
            self._rows[key] = CacheEntry(key=key, value=value, created_at=self._clock())

        if not self._coalescer.in_flight(self._slot_key(key)):
            logger.debug("cache miss for %s (force_refresh=%s)", key, force_refresh)
        return await self._coalescer.run(self._slot_key(key), loader, on_success=_store)

    async def refresh(self, key: str, loader: Loader[V], *, ttl_s: float | None = None) -> V:
        """Reload ``key`` regardless of freshness."""
        return await self.get_or_fetch(key, loader, ttl_s=ttl_s, force_refresh=True)

    def peek(self, key: str, *, ttl_s: float | None = None) -> V | None:
        """Synchronous read of a fresh value, ``None`` when missing or stale."""
        row = self._fresh_entry(key, ttl_s)
        return None if row is None else row.value

    def is_fresh(self, key: str, *, ttl_s: float | None = None) -> bool:
        return self._fresh_entry(key, ttl_s) is not None

    def contains(self, key: str) -> bool:
        """Whether any entry, fresh or stale, is stored for ``key``."""
        return key in self._rows

    def last_updated(self, key: str) -> datetime | None:
        row = self._rows.get(key)
        if row is None:
            return None
        return datetime.fromtimestamp(row.created_at, tz=timezone.utc)

    def in_flight(self, key: str) -> bool:
        return self._coalescer.in_flight(self._slot_key(key))

    def invalidate(self, key: str) -> None:
        """Drop one entry. In-flight loads are left to settle."""
        self._rows.pop(key, None)

    def invalidate_by_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with ``prefix``; returns the count."""
        doomed = [key for key in self._rows if key.startswith(prefix)]
        for key in doomed:
            del self._rows[key]
        return len(doomed)

    def invalidate_all(self) -> None:
        self._rows.clear()

    def keys(self) -> list[str]:
        return list(self._rows.keys())

    def __len__(self) -> int:
        return len(self._rows)
