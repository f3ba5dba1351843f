"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Time-windowed suppression of repeated notifications.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Protocol

from ..utils import utcnow
from .types import EntityRef, NotificationCategory, NotificationEvent


class DedupCandidate(Protocol):
    @property
    def entity_ref(self) -> EntityRef: ...

    @property
    def category(self) -> NotificationCategory: ...


class NotificationDeduplicator:
    """Rejects a candidate already notified for the same entity and category recently."""

    def __init__(
        self,
        *,
        window_s: float = 300.0,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._window = timedelta(seconds=window_s)
        self._clock = clock

    @property
    def window_s(self) -> float:
        return self._window.total_seconds()

    def should_admit(
        self,
        candidate: DedupCandidate,
        existing: Iterable[NotificationEvent],
        *,
        at: datetime | None = None,
    ) -> bool:
        """
        Whether ``candidate`` may become a notification.

        ``at`` is the moment the candidate happened; it defaults to now.
        Feed events pass their own creation time so a batch spanning several
        minutes is windowed by when things happened, not when they arrived.
        """
        # Without an entity id there is nothing to key the window on.
        entity_id = candidate.entity_ref.id
        if not entity_id:
            return True
        reference = self._clock() if at is None else at
        category = candidate.category
        for row in existing:
            if (
                row.entity_ref.id == entity_id
                and row.category is category
                and abs(row.timestamp - reference) < self._window
            ):
                return False
        return True
