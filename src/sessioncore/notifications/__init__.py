"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Notification pipeline: classification, deduplication, retention and polling.
"""

from .center import Listener, NotificationCenter
from .classifier import (
    CREATED_PATTERNS,
    OMIT_PATTERNS,
    SUPPRESSED,
    Classification,
    Verdict,
    classify,
)
from .dedup import NotificationDeduplicator
from .feed import EventFeed, EventFeedClient, parse_feed_response
from .poller import NotificationPoller, PollerState, PollResult
from .types import EntityRef, FeedEvent, NotificationCategory, NotificationEvent

__all__ = [
    "NotificationCategory",
    "NotificationEvent",
    "EntityRef",
    "FeedEvent",
    "Verdict",
    "Classification",
    "SUPPRESSED",
    "OMIT_PATTERNS",
    "CREATED_PATTERNS",
    "classify",
    "NotificationDeduplicator",
    "NotificationCenter",
    "Listener",
    "EventFeed",
    "EventFeedClient",
    "parse_feed_response",
    "NotificationPoller",
    "PollerState",
    "PollResult",
]
