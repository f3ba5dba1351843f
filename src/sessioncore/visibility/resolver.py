"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Visibility-gated, session-lifetime status resolution.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..cache import RequestCoalescer, TTLCache
from ..errors import ConfigurationError, classify_error
from .base import Unsubscribe, Visibility

logger = logging.getLogger("sessioncore.visibility")

StatusLookup = Callable[[str], Awaitable[Sequence[Any]]]


class ResolutionStatus(str, Enum):
    UNKNOWN = "unknown"
    POSITIVE = "blocked"
    NEGATIVE = "unblocked"


STATUS_LABELS: dict[ResolutionStatus, str] = {
    ResolutionStatus.POSITIVE: "Bloqueado",
    ResolutionStatus.NEGATIVE: "Normal",
    ResolutionStatus.UNKNOWN: "—",
}

OnResolved = Callable[[str, ResolutionStatus], None]


def status_label(status: ResolutionStatus) -> str:
    return STATUS_LABELS[status]


def normalize_key(key: str | int | None) -> str:
    return str(key if key is not None else "").strip()


def _noop() -> None:
    return None


@dataclass(slots=True)
class _Subscription:
    active: bool = True
    fired: bool = False
    stop_watch: Unsubscribe | None = None


class LazyVisibilityResolver:
    """
    Resolves a per-key status only once the consuming element is visible.

    Results live in a no-TTL store for the whole session. Lookup failures of
    any kind resolve to ``UNKNOWN`` and that ``UNKNOWN`` is cached too, so a
    key is fetched at most once per session unless ``clear`` is called.
    """

    def __init__(
        self,
        lookup: StatusLookup,
        visibility: Visibility,
        *,
        coalescer: RequestCoalescer | None = None,
        root_margin_px: int = 200,
        namespace: str = "visibility",
    ) -> None:
        self._lookup = lookup
        self._visibility = visibility
        self._root_margin_px = root_margin_px
        self._cache: TTLCache[ResolutionStatus] = TTLCache(
            default_ttl_s=None,
            coalescer=coalescer,
            namespace=namespace,
        )
        self._pending: set[asyncio.Task[None]] = set()

    def subscribe_visible(
        self,
        key: str | int,
        on_resolved: OnResolved,
        *,
        element: Hashable | None = None,
    ) -> Unsubscribe:
        """
        Deliver the status for ``key`` once ``element`` becomes visible.

        Cached statuses are delivered synchronously and no watcher is
        attached. The returned callable tears the subscription down: before
        the watcher fired it disconnects it, afterwards it only drops the
        pending callback while the lookup settles into the cache.
        """
        norm = normalize_key(key)
        if not norm:
            on_resolved(norm, ResolutionStatus.UNKNOWN)
            return _noop

        cached = self._cache.peek(norm)
        if cached is not None:
            on_resolved(norm, cached)
            return _noop

        sub = _Subscription()

        def _on_visible() -> None:
            if not sub.active or sub.fired:
                return
            sub.fired = True
            if sub.stop_watch is not None:
                sub.stop_watch()
            known = self._cache.peek(norm)
            if known is not None:
                on_resolved(norm, known)
                return
            task = asyncio.get_running_loop().create_task(self._deliver(norm, on_resolved, sub))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        stop_watch = self._visibility.subscribe(
            element if element is not None else norm,
            _on_visible,
            root_margin_px=self._root_margin_px,
        )
        if sub.fired:
            stop_watch()
        else:
            sub.stop_watch = stop_watch

        def _unsubscribe() -> None:
            if not sub.active:
                return
            sub.active = False
            if not sub.fired and sub.stop_watch is not None:
                sub.stop_watch()

        return _unsubscribe

    async def _deliver(self, key: str, on_resolved: OnResolved, sub: _Subscription) -> None:
        status = await self.resolve(key)
        if sub.active:
            on_resolved(key, status)

    async def resolve(self, key: str | int) -> ResolutionStatus:
        """Resolve ``key`` through the shared coalescer without a visibility gate."""
        norm = normalize_key(key)
        if not norm:
            return ResolutionStatus.UNKNOWN
        return await self._cache.get_or_fetch(norm, lambda: self._load(norm))

    async def _load(self, key: str) -> ResolutionStatus:
        try:
            rows = await self._lookup(key)
        except ConfigurationError as e:
            logger.warning("status lookup for %s skipped: %s", key, e)
            return ResolutionStatus.UNKNOWN
        except Exception as e:  # noqa: BLE001
            classified = classify_error(e)
            logger.warning(
                "status lookup for %s failed (%s); caching unknown for this session",
                key,
                type(classified).__name__,
            )
            return ResolutionStatus.UNKNOWN
        return ResolutionStatus.POSITIVE if rows else ResolutionStatus.NEGATIVE

    def status_of(self, key: str | int) -> ResolutionStatus | None:
        return self._cache.peek(normalize_key(key))

    def invalidate(self, key: str | int) -> None:
        self._cache.invalidate(normalize_key(key))

    def clear(self) -> None:
        """Forget every resolved status, including cached ``UNKNOWN`` ones."""
        self._cache.invalidate_all()

    async def drain(self) -> None:
        """Wait for lookups triggered by visibility to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
