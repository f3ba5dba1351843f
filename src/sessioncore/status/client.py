"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

HTTP client for the remote contract block status endpoint.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from typing import Any

from ..errors import ConfigurationError, ParseError, TransientNetworkError
from ..settings import SessionSettings

logger = logging.getLogger("sessioncore.status")

PostFn = Callable[[str, bytes], bytes]


class BlockStatusClient:
    """
    Lists the blocks registered against one contract.

    Only "is the list non-empty" matters to callers; the block records are
    returned as opaque dicts.
    """

    def __init__(
        self,
        settings: SessionSettings,
        *,
        post: PostFn | None = None,
    ) -> None:
        self._settings = settings
        self._post = post or self.http_post

    def _form(self) -> bytes:
        if not self._settings.has_status_credentials:
            raise ConfigurationError("Status API credentials are not configured")
        return urllib.parse.urlencode(
            {
                "keyapi": self._settings.status_api_keyapi,
                "login": self._settings.status_api_login,
                "pass": self._settings.status_api_pass,
            }
        ).encode("utf-8")

    def url_for(self, contract_id: str, *, active_only: bool) -> str:
        base = self._settings.status_api_base_url.rstrip("/")
        quoted = urllib.parse.quote(str(contract_id), safe="")
        return f"{base}/contratos/listarbloqueios/{quoted}/{'true' if active_only else 'false'}"

    async def list_blocks(self, contract_id: str, *, active_only: bool = True) -> list[Any]:
        """
        Fetch blocks for ``contract_id``.

        Raises:
            ConfigurationError: Credentials missing; raised before any I/O.
            TransientNetworkError: HTTP or network failure.
            ParseError: Body is not the expected JSON object.
        """
        payload = self._form()
        url = self.url_for(contract_id, active_only=active_only)
        body = await asyncio.to_thread(self._post, url, payload)
        return parse_blocks_response(body)

    def http_post(self, url: str, payload: bytes) -> bytes:
        req = urllib.request.Request(
            url,
            data=payload,
            method="POST",
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self._settings.http_timeout_s) as resp:  # noqa: S310
                return resp.read()
        except urllib.error.HTTPError as e:
            raise TransientNetworkError(f"HTTP {e.code} calling status API: {e.reason}") from e
        except urllib.error.URLError as e:
            raise TransientNetworkError(f"Network error calling status API: {e.reason}") from e
        except TimeoutError as e:
            raise TransientNetworkError("Timed out calling status API") from e


def parse_blocks_response(body: bytes) -> list[Any]:
    try:
        decoded = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ParseError("Invalid JSON response from status API") from e

    if not isinstance(decoded, dict):
        raise ParseError("Status API response is not an object")

    blocks = decoded.get("bloqueios")
    if blocks is None:
        if decoded.get("error"):
            logger.debug("status API reported no blocks: %s", decoded.get("error"))
        return []
    if not isinstance(blocks, list):
        raise ParseError("Status API field 'bloqueios' is not a list")
    return list(blocks)
