"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Session core settings and explicit config loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


@dataclass(frozen=True, slots=True)
class SessionSettings:
    """Explicit settings used by the cache, resolver and notification modules."""

    cache_ttl_s: float = 300.0
    root_margin_px: int = 200

    dedup_window_s: float = 300.0
    max_notifications: int = 50
    poll_interval_s: float = 60.0
    initial_delay_s: float = 5.0
    storage_prefix: str = "sysprov_"

    status_api_base_url: str = "https://api.oletv.net.br"
    status_api_keyapi: str | None = None
    status_api_login: str | None = None
    status_api_pass: str | None = None

    feed_base_url: str | None = None
    integrator_id: str | None = None

    http_timeout_s: float = 20.0

    @property
    def has_status_credentials(self) -> bool:
        return bool(self.status_api_keyapi and self.status_api_login and self.status_api_pass)

    @staticmethod
    def from_env() -> "SessionSettings":
        """Load settings from `SESSIONCORE_*` environment variables."""
        return SessionSettings(
            cache_ttl_s=float(_env_first("SESSIONCORE_CACHE_TTL_S", default="300") or "300"),
            root_margin_px=int(_env_first("SESSIONCORE_ROOT_MARGIN_PX", default="200") or "200"),
            dedup_window_s=float(_env_first("SESSIONCORE_DEDUP_WINDOW_S", default="300") or "300"),
            max_notifications=int(
                _env_first("SESSIONCORE_MAX_NOTIFICATIONS", default="50") or "50"
            ),
            poll_interval_s=float(_env_first("SESSIONCORE_POLL_INTERVAL_S", default="60") or "60"),
            initial_delay_s=float(_env_first("SESSIONCORE_INITIAL_DELAY_S", default="5") or "5"),
            storage_prefix=_env_first("SESSIONCORE_STORAGE_PREFIX", default="sysprov_")
            or "sysprov_",
            status_api_base_url=_env_first(
                "SESSIONCORE_STATUS_API_URL", default="https://api.oletv.net.br"
            )
            or "https://api.oletv.net.br",
            status_api_keyapi=_env_first("SESSIONCORE_STATUS_KEYAPI"),
            status_api_login=_env_first("SESSIONCORE_STATUS_LOGIN"),
            status_api_pass=_env_first("SESSIONCORE_STATUS_PASS"),
            feed_base_url=_env_first("SESSIONCORE_FEED_URL"),
            integrator_id=_env_first("SESSIONCORE_INTEGRATOR_ID"),
            http_timeout_s=float(_env_first("SESSIONCORE_HTTP_TIMEOUT_S", default="20") or "20"),
        )
