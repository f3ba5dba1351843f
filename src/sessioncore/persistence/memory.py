"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: persistence/memory.py.
"""

from __future__ import annotations

from dataclasses import dataclass

from .base import PersistenceAdapter


@dataclass(slots=True)
class InMemoryPersistence(PersistenceAdapter):
    """Process-local store; state is lost when the session ends."""

    backend_id: str = "inmemory"

    def __post_init__(self) -> None:
        self._rows: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._rows.get(key)

    async def set(self, key: str, value: str) -> None:
        self._rows[key] = value

    async def delete(self, key: str) -> None:
        self._rows.pop(key, None)
