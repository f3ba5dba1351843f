"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Utility functions shared across session core modules.
"""

from __future__ import annotations

import json
import random
import string
import time
from datetime import datetime, timezone
from typing import Any

_BASE36 = string.digits + string.ascii_lowercase


def now_ms() -> int:
    return int(time.time() * 1000)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_notification_id() -> str:
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"{now_ms()}-{suffix}"


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def local_to_utc(value: datetime) -> datetime:
    """Read naive datetimes as host local time and convert to UTC."""
    return value.astimezone(timezone.utc)


def json_dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=str)


def json_loads(s: str | bytes) -> Any:
    if isinstance(s, bytes):
        s = s.decode("utf-8")
    return json.loads(s)


def format_time_ago(value: datetime, *, now: datetime | None = None) -> str:
    """Render a compact relative age such as ``Agora``, ``5min``, ``3h`` or ``2d``."""
    current = now or utcnow()
    diff_minutes = int((current - ensure_aware(value)).total_seconds() // 60)
    if diff_minutes < 1:
        return "Agora"
    if diff_minutes < 60:
        return f"{diff_minutes}min"
    diff_hours = diff_minutes // 60
    if diff_hours < 24:
        return f"{diff_hours}h"
    return f"{diff_hours // 24}d"
