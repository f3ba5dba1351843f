"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Session-owned notification list with read/clear operations and subscribers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from ..errors import ParseError
from ..persistence import PersistenceAdapter
from ..utils import json_dumps, json_loads, new_notification_id, utcnow
from .types import EntityRef, NotificationCategory, NotificationEvent

logger = logging.getLogger("sessioncore.notifications")

Listener = Callable[[tuple[NotificationEvent, ...]], None]


class NotificationCenter:
    """
    Owns the capped, newest-first notification list.

    New items are inserted at the front; once the list exceeds ``max_items``
    the entries at the back are evicted. Every mutation persists the list and
    then hands the new snapshot to subscribers.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        *,
        storage_key: str = "sysprov_notifications",
        max_items: int = 50,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if max_items <= 0:
            raise ValueError("max_items must be > 0")
        self._persistence = persistence
        self._storage_key = storage_key
        self._max_items = max_items
        self._clock = clock
        self._items: list[NotificationEvent] = []
        self._listeners: list[Listener] = []

    @property
    def notifications(self) -> tuple[NotificationEvent, ...]:
        return tuple(self._items)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.read)

    @property
    def max_items(self) -> int:
        return self._max_items

    def get(self, notification_id: str) -> NotificationEvent | None:
        for row in self._items:
            if row.id == notification_id:
                return row
        return None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for list snapshots; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def load(self) -> int:
        """Restore the persisted list; unreadable rows are dropped."""
        blob = await self._persistence.get(self._storage_key)
        if blob is None:
            return 0
        try:
            rows = json_loads(blob)
        except ValueError:
            logger.warning("stored notifications under %s are not JSON; ignoring", self._storage_key)
            return 0
        if not isinstance(rows, list):
            logger.warning("stored notifications under %s are not a list; ignoring", self._storage_key)
            return 0

        restored: list[NotificationEvent] = []
        for row in rows:
            try:
                restored.append(NotificationEvent.from_dict(row))
            except ParseError as e:
                logger.debug("dropping stored notification: %s", e)
        self._items = restored[: self._max_items]
        self._publish()
        return len(self._items)

    def build(
        self,
        category: NotificationCategory,
        title: str,
        message: str,
        *,
        entity_ref: EntityRef | None = None,
        data: dict[str, Any] | None = None,
        timestamp: datetime | None = None,
    ) -> NotificationEvent:
        return NotificationEvent(
            id=new_notification_id(),
            category=category,
            title=title,
            message=message,
            timestamp=timestamp or self._clock(),
            entity_ref=entity_ref or EntityRef(),
            data=dict(data or {}),
        )

    async def add(
        self,
        category: NotificationCategory,
        title: str,
        message: str,
        *,
        entity_ref: EntityRef | None = None,
        data: dict[str, Any] | None = None,
    ) -> NotificationEvent:
        """Insert one notification at the front, bypassing deduplication."""
        row = self.build(category, title, message, entity_ref=entity_ref, data=data)
        await self._commit([row, *self._items])
        return row

    async def prepend(self, rows: Iterable[NotificationEvent]) -> None:
        """Insert ``rows`` so that the last one given ends up first."""
        updated = list(self._items)
        for row in rows:
            updated.insert(0, row)
        await self._commit(updated)

    async def mark_read(self, notification_id: str) -> bool:
        if self.get(notification_id) is None:
            return False
        await self._commit(
            [n.as_read() if n.id == notification_id else n for n in self._items]
        )
        return True

    async def mark_all_read(self) -> None:
        await self._commit([n.as_read() for n in self._items])

    async def clear_notification(self, notification_id: str) -> bool:
        updated = [n for n in self._items if n.id != notification_id]
        if len(updated) == len(self._items):
            return False
        await self._commit(updated)
        return True

    async def clear_all(self) -> None:
        await self._commit([])

    async def _commit(self, items: list[NotificationEvent]) -> None:
        # The in-memory list is authoritative; a failed write still reaches subscribers.
        self._items = items[: self._max_items]
        try:
            await self._persistence.set(
                self._storage_key,
                json_dumps([n.to_dict() for n in self._items]),
            )
        finally:
            self._publish()

    def _publish(self) -> None:
        snapshot = self.notifications
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:  # noqa: BLE001
                logger.exception("notification listener failed")
