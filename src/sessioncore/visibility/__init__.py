"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Lazy visibility resolution package.
"""

from .base import ImmediateVisibility, ManualVisibility, OnVisible, Unsubscribe, Visibility
from .resolver import (
    STATUS_LABELS,
    LazyVisibilityResolver,
    OnResolved,
    ResolutionStatus,
    StatusLookup,
    normalize_key,
    status_label,
)

__all__ = [
    "Visibility",
    "ManualVisibility",
    "ImmediateVisibility",
    "OnVisible",
    "Unsubscribe",
    "LazyVisibilityResolver",
    "ResolutionStatus",
    "StatusLookup",
    "OnResolved",
    "STATUS_LABELS",
    "normalize_key",
    "status_label",
]
