"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Viewport visibility capability and host adapters.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Protocol

OnVisible = Callable[[], None]
Unsubscribe = Callable[[], None]


def _noop() -> None:
    return None


class Visibility(Protocol):
    """Capability that reports when an element enters the (margin-extended) viewport."""

    def subscribe(
        self,
        element: Hashable,
        on_visible: OnVisible,
        *,
        root_margin_px: int = 0,
    ) -> Unsubscribe: ...


@dataclass(slots=True)
class _Watcher:
    element: Hashable
    on_visible: OnVisible
    root_margin_px: int


class ManualVisibility:
    """
    Visibility adapter driven by explicit ``reveal`` calls.

    Hosts that receive visibility events from elsewhere push them here, and
    tests use it to control exactly when rows become visible.
    """

    def __init__(self) -> None:
        self._watchers: list[_Watcher] = []

    def subscribe(
        self,
        element: Hashable,
        on_visible: OnVisible,
        *,
        root_margin_px: int = 0,
    ) -> Unsubscribe:
        watcher = _Watcher(element=element, on_visible=on_visible, root_margin_px=root_margin_px)
        self._watchers.append(watcher)

        def _unsubscribe() -> None:
            if watcher in self._watchers:
                self._watchers.remove(watcher)

        return _unsubscribe

    def reveal(self, element: Hashable) -> int:
        """Fire every watcher registered for ``element``; returns how many fired."""
        fired = [w for w in self._watchers if w.element == element]
        for watcher in fired:
            watcher.on_visible()
        return len(fired)

    def reveal_all(self) -> int:
        fired = list(self._watchers)
        for watcher in fired:
            watcher.on_visible()
        return len(fired)

    def watcher_count(self, element: Hashable | None = None) -> int:
        if element is None:
            return len(self._watchers)
        return sum(1 for w in self._watchers if w.element == element)


class ImmediateVisibility:
    """Headless adapter: every element counts as visible on subscribe."""

    def subscribe(
        self,
        element: Hashable,
        on_visible: OnVisible,
        *,
        root_margin_px: int = 0,
    ) -> Unsubscribe:
        _ = element
        _ = root_margin_px
        on_visible()
        return _noop
