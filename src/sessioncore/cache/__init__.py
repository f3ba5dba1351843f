"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/__init__.py.
"""

from .base import CacheEntry, Clock, Loader
from .coalescing import RequestCoalescer
from .ttl import TTLCache

__all__ = [
    "CacheEntry",
    "Clock",
    "Loader",
    "RequestCoalescer",
    "TTLCache",
]
