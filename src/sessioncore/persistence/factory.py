"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for selecting persistence backends from environment variables.
"""

from __future__ import annotations

import os
from typing import Any

from ..settings import _env_first
from .base import PersistenceAdapter
from .file import JsonFilePersistence
from .memory import InMemoryPersistence


def create_persistence_from_env(*, redis_client: Any | None = None) -> PersistenceAdapter:
    """
    Create a persistence backend from `SESSIONCORE_PERSISTENCE_*` variables.

    Backends:
    - `inmemory` (default)
    - `file` (path from `SESSIONCORE_PERSISTENCE_PATH`)
    - `redis`

    Redis resolution:
    - Uses the provided `redis_client` when supplied.
    - Otherwise builds a client from `SESSIONCORE_REDIS_URL`.
    - If no URL is set, falls back to host/port/db/password variables.
    """
    backend = os.getenv("SESSIONCORE_PERSISTENCE_BACKEND", "inmemory").strip().lower()

    if backend in ("mem", "memory", "inmemory", "in_memory"):
        return InMemoryPersistence()

    if backend in ("file", "json"):
        path = (
            _env_first("SESSIONCORE_PERSISTENCE_PATH", default=".sessioncore/state.json")
            or ".sessioncore/state.json"
        )
        return JsonFilePersistence(path)

    if backend in ("redis",):
        from .redis import RedisPersistence

        prefix = _env_first("SESSIONCORE_REDIS_PREFIX", default="sessioncore") or "sessioncore"

        client = redis_client
        if client is None:
            try:
                import redis.asyncio as redis
            except ModuleNotFoundError as exc:  # pragma: no cover
                raise RuntimeError(
                    "Redis persistence backend requires `redis` to be installed."
                ) from exc

            url = _env_first("SESSIONCORE_REDIS_URL")
            if not url:
                host = _env_first("SESSIONCORE_REDIS_HOST", default="localhost") or "localhost"
                port = _env_first("SESSIONCORE_REDIS_PORT", default="6379") or "6379"
                db = _env_first("SESSIONCORE_REDIS_DB", default="0") or "0"
                password = _env_first("SESSIONCORE_REDIS_PASSWORD", default="") or ""
                if password:
                    url = f"redis://:{password}@{host}:{port}/{db}"
                else:
                    url = f"redis://{host}:{port}/{db}"

            client = redis.Redis.from_url(url)

        return RedisPersistence(client, prefix=prefix)

    raise ValueError(f"Unknown SESSIONCORE_PERSISTENCE_BACKEND: {backend}")
