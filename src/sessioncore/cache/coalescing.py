"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/coalescing.py.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


def _consume_outcome(task: asyncio.Task[Any]) -> None:
    # Settled loaders nobody awaits anymore must not warn about lost errors.
    if not task.cancelled():
        task.exception()


class RequestCoalescer:
    """
    Deduplicate identical in-flight requests.

    Every caller for a key attaches to the same task, so all of them observe
    the identical value or the identical exception. The slot is removed when
    the task settles, success or failure, which makes the next call retry.
    Waiters attach through ``asyncio.shield``: cancelling one waiter never
    cancels the shared loader.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    async def run(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        *,
        on_success: Callable[[T], None] | None = None,
    ) -> T:
        """
        Run ``factory`` once per key, or attach to the run already in flight.

        ``on_success`` is applied inside the shared task, so a result is
        recorded even when every waiter has gone away.
        """
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.create_task(self._settle(key, factory, on_success))
            task.add_done_callback(_consume_outcome)
            self._tasks[key] = task
        return await asyncio.shield(task)

    async def _settle(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]],
        on_success: Callable[[T], None] | None,
    ) -> T:
        try:
            value = await factory()
            if on_success is not None:
                on_success(value)
            return value
        finally:
            if self._tasks.get(key) is asyncio.current_task():
                self._tasks.pop(key, None)
