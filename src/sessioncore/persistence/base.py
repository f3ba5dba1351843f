"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: persistence/base.py.
"""

from __future__ import annotations

from typing import Protocol


class PersistenceAdapter(Protocol):
    """Durable string key-value store used for checkpoints and notification lists."""

    backend_id: str

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...
