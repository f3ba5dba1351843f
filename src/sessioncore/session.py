"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Session root that owns the shared cache, resolver and notification state.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import Any

from .cache import Clock, Loader, RequestCoalescer, TTLCache
from .notifications import (
    EventFeed,
    EventFeedClient,
    NotificationCenter,
    NotificationDeduplicator,
    NotificationPoller,
    PollResult,
)
from .persistence import InMemoryPersistence, PersistenceAdapter
from .settings import SessionSettings
from .status import BlockStatusClient
from .utils import utcnow
from .visibility import (
    LazyVisibilityResolver,
    ManualVisibility,
    OnResolved,
    StatusLookup,
    Unsubscribe,
    Visibility,
)

logger = logging.getLogger("sessioncore.session")


class Session:
    """
    Explicitly constructed owner of every shared store in one UI session.

    Consumers receive the session (or one of its members) by injection;
    nothing is held in module globals, so each test can build its own.
    """

    def __init__(
        self,
        settings: SessionSettings | None = None,
        *,
        persistence: PersistenceAdapter | None = None,
        visibility: Visibility | None = None,
        status_lookup: StatusLookup | None = None,
        feed: EventFeed | None = None,
        clock: Clock = time.time,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self.settings = settings or SessionSettings()
        self.persistence = persistence or InMemoryPersistence()
        self.visibility = visibility or ManualVisibility()
        self.coalescer = RequestCoalescer()
        self.cache: TTLCache[Any] = TTLCache(
            default_ttl_s=self.settings.cache_ttl_s,
            coalescer=self.coalescer,
            namespace="data",
            clock=clock,
        )

        if status_lookup is None:
            client = BlockStatusClient(self.settings)

            async def status_lookup(contract_id: str) -> list[Any]:
                return await client.list_blocks(contract_id, active_only=True)

        self.resolver = LazyVisibilityResolver(
            status_lookup,
            self.visibility,
            coalescer=self.coalescer,
            root_margin_px=self.settings.root_margin_px,
            namespace="block-status",
        )

        prefix = self.settings.storage_prefix
        self.notifications = NotificationCenter(
            self.persistence,
            storage_key=f"{prefix}notifications",
            max_items=self.settings.max_notifications,
            clock=now,
        )
        self.poller = NotificationPoller(
            feed or EventFeedClient(self.settings),
            self.notifications,
            self.persistence,
            deduplicator=NotificationDeduplicator(window_s=self.settings.dedup_window_s, clock=now),
            poll_interval_s=self.settings.poll_interval_s,
            initial_delay_s=self.settings.initial_delay_s,
            checkpoint_key=f"{prefix}lastPolledAt",
            clock=now,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "Session":
        """Build a session from `SESSIONCORE_*` variables, including the persistence backend."""
        from .persistence import create_persistence_from_env

        kwargs.setdefault("persistence", create_persistence_from_env())
        return cls(SessionSettings.from_env(), **kwargs)

    async def open(self, *, start_polling: bool = True) -> None:
        """Restore persisted notifications and checkpoint, then start the poll timer."""
        restored = await self.notifications.load()
        checkpoint = await self.poller.load()
        logger.info(
            "session opened (notifications=%d, checkpoint=%s)",
            restored,
            checkpoint.isoformat() if checkpoint else None,
        )
        if start_polling:
            self.poller.start()

    async def close(self) -> None:
        """Tear down timers; in-flight loaders are left to settle."""
        await self.poller.stop()

    async def __aenter__(self) -> "Session":
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def get_or_fetch(
        self,
        key: str,
        loader: Loader[Any],
        *,
        ttl_s: float | None = None,
        force_refresh: bool = False,
    ) -> Any:
        return await self.cache.get_or_fetch(key, loader, ttl_s=ttl_s, force_refresh=force_refresh)

    async def refresh(self, key: str, loader: Loader[Any], *, ttl_s: float | None = None) -> Any:
        return await self.cache.refresh(key, loader, ttl_s=ttl_s)

    def invalidate(self, key: str | None = None, *, prefix: str | None = None) -> None:
        """Drop one key, every key under ``prefix``, or everything when neither is given."""
        if key is not None:
            self.cache.invalidate(key)
        elif prefix is not None:
            self.cache.invalidate_by_prefix(prefix)
        else:
            self.cache.invalidate_all()

    def subscribe_visible(self, key: str | int, on_resolved: OnResolved, *, element: Any = None) -> Unsubscribe:
        return self.resolver.subscribe_visible(key, on_resolved, element=element)

    async def poll(self) -> PollResult | None:
        return await self.poller.poll()

    async def mark_read(self, notification_id: str) -> bool:
        return await self.notifications.mark_read(notification_id)

    async def mark_all_read(self) -> None:
        await self.notifications.mark_all_read()

    async def clear_notification(self, notification_id: str) -> bool:
        return await self.notifications.clear_notification(notification_id)

    async def clear_all(self) -> None:
        await self.notifications.clear_all()
