"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

HTTP client for the integration log feed.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from typing import Any, Protocol

from ..errors import ConfigurationError, ParseError, TransientNetworkError
from ..settings import SessionSettings

FEED_PATH = "/src/services/LogsDistintosClientes.php"

GetFn = Callable[[str], bytes]


class EventFeed(Protocol):
    """Source of raw feed events, oldest or newest first."""

    async def fetch_events(self) -> list[Any]: ...


class EventFeedClient:
    """Fetches integration logs for the configured integrator."""

    def __init__(self, settings: SessionSettings, *, get: GetFn | None = None) -> None:
        self._settings = settings
        self._get = get or self.http_get

    def url(self) -> str:
        if not self._settings.feed_base_url:
            raise ConfigurationError("Event feed URL is not configured")
        if not self._settings.integrator_id:
            raise ConfigurationError("Integrator id is not configured")
        query = urllib.parse.urlencode({"idIntegra": self._settings.integrator_id})
        return f"{self._settings.feed_base_url.rstrip('/')}{FEED_PATH}?{query}"

    async def fetch_events(self) -> list[Any]:
        """
        Return the raw feed rows.

        Raises:
            ConfigurationError: Feed URL or integrator id missing.
            TransientNetworkError: HTTP or network failure.
            ParseError: Body is not JSON or has no event list.
        """
        url = self.url()
        body = await asyncio.to_thread(self._get, url)
        return parse_feed_response(body)

    def http_get(self, url: str) -> bytes:
        req = urllib.request.Request(url, method="GET", headers={"Accept": "application/json"})
        try:
            with urllib.request.urlopen(req, timeout=self._settings.http_timeout_s) as resp:  # noqa: S310
                return resp.read()
        except urllib.error.HTTPError as e:
            raise TransientNetworkError(f"HTTP {e.code} calling event feed: {e.reason}") from e
        except urllib.error.URLError as e:
            raise TransientNetworkError(f"Network error calling event feed: {e.reason}") from e
        except TimeoutError as e:
            raise TransientNetworkError("Timed out calling event feed") from e


def parse_feed_response(body: bytes) -> list[Any]:
    try:
        decoded = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError("Invalid JSON response from event feed") from e

    if isinstance(decoded, list):
        return decoded
    if isinstance(decoded, dict):
        rows = decoded.get("data")
        if rows is None:
            return []
        if isinstance(rows, list):
            return rows
    raise ParseError("Event feed response has no event list")
