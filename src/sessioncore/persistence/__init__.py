"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: persistence/__init__.py.
"""

from .base import PersistenceAdapter
from .factory import create_persistence_from_env
from .file import JsonFilePersistence
from .memory import InMemoryPersistence
from .redis import RedisPersistence

__all__ = [
    "PersistenceAdapter",
    "InMemoryPersistence",
    "JsonFilePersistence",
    "RedisPersistence",
    "create_persistence_from_env",
]
