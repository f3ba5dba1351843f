"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/base.py.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

V = TypeVar("V")

Loader = Callable[[], Awaitable[V]]
Clock = Callable[[], float]


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    """One cached value with the epoch second it was fetched at."""

    key: str
    value: V
    created_at: float

    def is_fresh(self, ttl_s: float | None, now: float) -> bool:
        """``None`` ttl never goes stale."""
        if ttl_s is None:
            return True
        return now - self.created_at < ttl_s
