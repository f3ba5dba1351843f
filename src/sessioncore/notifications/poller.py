"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Periodic feed poller: fetch, classify, deduplicate, persist, publish.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from ..errors import ConfigurationError, ParseError, classify_error
from ..persistence import PersistenceAdapter
from ..utils import ensure_aware, utcnow
from .center import NotificationCenter
from .classifier import classify
from .dedup import NotificationDeduplicator
from .feed import EventFeed
from .types import FeedEvent, NotificationEvent

logger = logging.getLogger("sessioncore.notifications.poller")


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"


@dataclass(frozen=True, slots=True)
class PollResult:
    """
    Summary of one poll cycle.

    Attributes:
        ok: Whether fetch and parse succeeded and the checkpoint advanced.
        fetched: Rows returned by the feed.
        new: Rows newer than the checkpoint.
        admitted: Notifications inserted.
        suppressed: Rows matching an omit pattern.
        duplicates: Rows rejected by the dedup window.
        unclassified: Rows that produce no notification.
        skipped: Malformed rows.
        error: Failure description when ``ok`` is false.
    """

    ok: bool
    fetched: int = 0
    new: int = 0
    admitted: int = 0
    suppressed: int = 0
    duplicates: int = 0
    unclassified: int = 0
    skipped: int = 0
    error: str | None = None


class NotificationPoller:
    """
    Turns the polled event feed into deduplicated notifications.

    A cycle only runs from ``IDLE``; ticks arriving while a cycle is in
    progress are ignored. The checkpoint advances only after the fetch and
    parse step succeeded, so a failed cycle is rescanned by the next one.
    """

    def __init__(
        self,
        feed: EventFeed,
        center: NotificationCenter,
        persistence: PersistenceAdapter,
        *,
        deduplicator: NotificationDeduplicator | None = None,
        poll_interval_s: float = 60.0,
        initial_delay_s: float = 5.0,
        checkpoint_key: str = "sysprov_lastPolledAt",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be > 0")
        self._feed = feed
        self._center = center
        self._persistence = persistence
        self._deduplicator = deduplicator or NotificationDeduplicator(clock=clock)
        self._poll_interval_s = poll_interval_s
        self._initial_delay_s = initial_delay_s
        self._checkpoint_key = checkpoint_key
        self._clock = clock
        self._state = PollerState.IDLE
        self._last_polled_at: datetime | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def last_polled_at(self) -> datetime | None:
        return self._last_polled_at

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def load(self) -> datetime | None:
        """Restore the persisted checkpoint."""
        raw = await self._persistence.get(self._checkpoint_key)
        if raw is None:
            return None
        try:
            self._last_polled_at = ensure_aware(datetime.fromisoformat(raw))
        except ValueError:
            logger.warning("ignoring unreadable checkpoint %r", raw)
            self._last_polled_at = None
        return self._last_polled_at

    def _window_start(self, now: datetime) -> datetime:
        if self._last_polled_at is not None:
            return self._last_polled_at
        return now - timedelta(seconds=self._poll_interval_s)

    async def poll(self) -> PollResult | None:
        """
        Run one cycle now, outside the timer.

        Returns ``None`` when a cycle is already in progress.
        """
        if self._state is PollerState.POLLING:
            logger.debug("poll skipped: cycle already in progress")
            return None
        self._state = PollerState.POLLING
        try:
            return await self._cycle()
        finally:
            self._state = PollerState.IDLE

    async def _cycle(self) -> PollResult:
        now = self._clock()
        since = self._window_start(now)

        try:
            rows = await self._feed.fetch_events()
        except ConfigurationError as e:
            logger.warning("notification poll skipped: %s", e)
            return PollResult(ok=False, error=str(e))
        except Exception as e:  # noqa: BLE001
            classified = classify_error(e)
            logger.warning(
                "notification poll failed (%s): %s; checkpoint kept at %s",
                type(classified).__name__,
                classified,
                since.isoformat(),
            )
            return PollResult(ok=False, error=str(classified))

        skipped = 0
        fresh: list[FeedEvent] = []
        for raw in rows:
            try:
                event = FeedEvent.parse(raw)
            except ParseError as e:
                skipped += 1
                logger.debug("skipping feed event: %s", e)
                continue
            if event.timestamp >= since:
                fresh.append(event)
        fresh.sort(key=lambda ev: ev.timestamp)

        suppressed = duplicates = unclassified = 0
        retained = list(self._center.notifications)
        admitted: list[NotificationEvent] = []
        for event in fresh:
            verdict = classify(event)
            if verdict is None:
                unclassified += 1
                continue
            if verdict.suppressed:
                suppressed += 1
                continue
            if not self._deduplicator.should_admit(verdict, retained, at=event.timestamp):
                duplicates += 1
                continue
            row = self._center.build(
                verdict.category,
                verdict.title,
                verdict.message,
                entity_ref=verdict.entity_ref,
                data=verdict.data,
                timestamp=event.timestamp,
            )
            admitted.append(row)
            retained.insert(0, row)

        try:
            if admitted:
                await self._center.prepend(admitted)
            await self._persistence.set(self._checkpoint_key, now.isoformat())
        except Exception as e:  # noqa: BLE001
            classified = classify_error(e)
            logger.warning(
                "notification poll could not persist (%s): %s; checkpoint kept at %s",
                type(classified).__name__,
                classified,
                since.isoformat(),
            )
            return PollResult(
                ok=False,
                fetched=len(rows),
                new=len(fresh),
                admitted=len(admitted),
                suppressed=suppressed,
                duplicates=duplicates,
                unclassified=unclassified,
                skipped=skipped,
                error=str(classified),
            )
        self._last_polled_at = now

        result = PollResult(
            ok=True,
            fetched=len(rows),
            new=len(fresh),
            admitted=len(admitted),
            suppressed=suppressed,
            duplicates=duplicates,
            unclassified=unclassified,
            skipped=skipped,
        )
        if admitted:
            logger.info(
                "notification poll admitted %d (suppressed=%d, duplicates=%d, skipped=%d)",
                result.admitted,
                result.suppressed,
                result.duplicates,
                result.skipped,
            )
        return result

    def start(self) -> None:
        """Start the poll timer on the running loop."""
        if self.running:
            raise RuntimeError("NotificationPoller is already running")
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "NotificationPoller started (interval=%.1fs, initial_delay=%.1fs)",
            self._poll_interval_s,
            self._initial_delay_s,
        )

    async def stop(self) -> None:
        """Cancel the poll timer. A cycle in progress is cancelled with it."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _loop(self) -> None:
        await asyncio.sleep(self._initial_delay_s)
        while True:
            try:
                await self.poll()
            except asyncio.CancelledError:
                raise
            except Exception:  # noqa: BLE001
                logger.exception("notification poll cycle crashed")
            await asyncio.sleep(self._poll_interval_s)
