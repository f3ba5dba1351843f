"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error taxonomy shared by the cache, resolver and notification layers.
"""

from __future__ import annotations

import asyncio
import json
import socket


class SessionCoreError(RuntimeError):
    """Base error for session core failures."""


class TransientNetworkError(SessionCoreError):
    """Retryable transport failure; nothing is cached and checkpoints stay put."""


class ConfigurationError(SessionCoreError):
    """Raised before any network call when credentials or ids are missing."""


class ParseError(SessionCoreError):
    """Raised when a remote response or a single feed event is malformed."""


def classify_error(error: Exception) -> SessionCoreError:
    """Classify arbitrary exceptions into the session core taxonomy."""
    if isinstance(error, SessionCoreError):
        return error
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, socket.timeout)):
        return TransientNetworkError(f"timeout: {error}")
    if isinstance(error, (ConnectionError, OSError)):
        return TransientNetworkError(str(error))
    if isinstance(error, (json.JSONDecodeError, UnicodeDecodeError)):
        return ParseError(str(error))

    msg = str(error).lower()
    retry_phrases = ("timeout", "temporarily", "service unavailable", "429", "502", "503", "504")
    if any(token in msg for token in retry_phrases):
        return TransientNetworkError(str(error))
    return SessionCoreError(str(error))
