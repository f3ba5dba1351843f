"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Session-scoped data cache, request coalescing, lazy visibility resolution and
notification deduplication.

Quick start::

    from sessioncore import Session

    async with Session.from_env() as session:
        rows = await session.get_or_fetch("clients:list", load_clients)
        await session.poll()
"""

from .cache import CacheEntry, RequestCoalescer, TTLCache
from .errors import (
    ConfigurationError,
    ParseError,
    SessionCoreError,
    TransientNetworkError,
    classify_error,
)
from .notifications import (
    EntityRef,
    NotificationCategory,
    NotificationCenter,
    NotificationDeduplicator,
    NotificationEvent,
    NotificationPoller,
    PollResult,
    classify,
)
from .session import Session
from .settings import SessionSettings
from .utils import format_time_ago
from .visibility import (
    ImmediateVisibility,
    LazyVisibilityResolver,
    ManualVisibility,
    ResolutionStatus,
    Visibility,
    status_label,
)

__all__ = [
    "Session",
    "SessionSettings",
    "CacheEntry",
    "RequestCoalescer",
    "TTLCache",
    "Visibility",
    "ManualVisibility",
    "ImmediateVisibility",
    "LazyVisibilityResolver",
    "ResolutionStatus",
    "status_label",
    "EntityRef",
    "NotificationCategory",
    "NotificationEvent",
    "NotificationCenter",
    "NotificationDeduplicator",
    "NotificationPoller",
    "PollResult",
    "classify",
    "format_time_ago",
    "SessionCoreError",
    "TransientNetworkError",
    "ConfigurationError",
    "ParseError",
    "classify_error",
]
