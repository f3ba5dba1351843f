"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: persistence/file.py.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from .base import PersistenceAdapter

logger = logging.getLogger("sessioncore.persistence")


class JsonFilePersistence(PersistenceAdapter):
    """
    Local key-value store kept as one JSON object on disk.

    Mirrors browser local storage: survives restarts of a single host and is
    never shared across devices. Disk I/O runs in a worker thread.
    """

    backend_id: str = "file"

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._rows: dict[str, str] | None = None
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("persistence file %s is unreadable; starting empty", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, rows: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(rows, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self._path)

    async def _rows_loaded(self) -> dict[str, str]:
        if self._rows is None:
            self._rows = await asyncio.to_thread(self._read)
        return self._rows

    async def get(self, key: str) -> str | None:
        async with self._lock:
            rows = await self._rows_loaded()
            return rows.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            rows = await self._rows_loaded()
            rows[key] = value
            await asyncio.to_thread(self._write, dict(rows))

    async def delete(self, key: str) -> None:
        async with self._lock:
            rows = await self._rows_loaded()
            if rows.pop(key, None) is not None:
                await asyncio.to_thread(self._write, dict(rows))
