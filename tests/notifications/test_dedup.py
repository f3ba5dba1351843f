from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sessioncore.notifications import (
    EntityRef,
    NotificationCategory,
    NotificationDeduplicator,
    NotificationEvent,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _row(entity_id: str, category: NotificationCategory, age: timedelta) -> NotificationEvent:
    return NotificationEvent(
        id=f"n-{entity_id}-{age.total_seconds()}",
        category=category,
        title="t",
        message="m",
        timestamp=NOW - age,
        entity_ref=EntityRef(id=entity_id),
    )


def test_same_entity_and_category_inside_window_is_rejected():
    dedup = NotificationDeduplicator(clock=lambda: NOW)
    existing = [_row("42", NotificationCategory.NEW_ENTITY_CREATED, timedelta(minutes=4))]
    candidate = _row("42", NotificationCategory.NEW_ENTITY_CREATED, timedelta(0))
    assert dedup.should_admit(candidate, existing) is False


def test_window_expires_after_five_minutes():
    dedup = NotificationDeduplicator(clock=lambda: NOW)
    candidate = _row("42", NotificationCategory.NEW_ENTITY_CREATED, timedelta(0))
    assert dedup.should_admit(
        candidate, [_row("42", NotificationCategory.NEW_ENTITY_CREATED, timedelta(minutes=5))]
    )
    assert dedup.should_admit(
        candidate, [_row("42", NotificationCategory.NEW_ENTITY_CREATED, timedelta(minutes=6))]
    )


def test_other_category_or_entity_is_admitted():
    dedup = NotificationDeduplicator(clock=lambda: NOW)
    existing = [_row("42", NotificationCategory.NEW_ENTITY_CREATED, timedelta(minutes=1))]
    assert dedup.should_admit(_row("42", NotificationCategory.OPERATIONAL_ERROR, timedelta(0)), existing)
    assert dedup.should_admit(_row("43", NotificationCategory.NEW_ENTITY_CREATED, timedelta(0)), existing)


def test_candidates_without_entity_id_are_never_deduplicated():
    dedup = NotificationDeduplicator(clock=lambda: NOW)
    existing = [_row("", NotificationCategory.OPERATIONAL_ERROR, timedelta(seconds=10))]
    assert dedup.should_admit(_row("", NotificationCategory.OPERATIONAL_ERROR, timedelta(0)), existing)


def test_should_admit_does_not_mutate_existing():
    dedup = NotificationDeduplicator(window_s=60, clock=lambda: NOW)
    existing = [_row("1", NotificationCategory.NEW_ENTITY_CREATED, timedelta(seconds=30))]
    snapshot = list(existing)
    dedup.should_admit(_row("1", NotificationCategory.NEW_ENTITY_CREATED, timedelta(0)), existing)
    assert existing == snapshot
    assert dedup.window_s == 60


def test_window_is_measured_from_the_candidate_event_time():
    dedup = NotificationDeduplicator(clock=lambda: NOW)
    existing = [_row("42", NotificationCategory.OPERATIONAL_ERROR, timedelta(minutes=10))]
    candidate = _row("42", NotificationCategory.OPERATIONAL_ERROR, timedelta(minutes=3))

    assert dedup.should_admit(candidate, existing, at=NOW - timedelta(minutes=3))
    assert not dedup.should_admit(candidate, existing, at=NOW - timedelta(minutes=8))
    assert not dedup.should_admit(candidate, existing, at=NOW - timedelta(minutes=12))
