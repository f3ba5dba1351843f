from __future__ import annotations

import asyncio

from sessioncore.errors import ConfigurationError, TransientNetworkError
from sessioncore.visibility import (
    ImmediateVisibility,
    LazyVisibilityResolver,
    ManualVisibility,
    ResolutionStatus,
    status_label,
)


def run_async(coro):
    return asyncio.run(coro)


class FakeLookup:
    def __init__(self, rows=None, error: Exception | None = None) -> None:
        self.rows = rows if rows is not None else []
        self.error = error
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None

    async def __call__(self, key: str):
        self.calls.append(key)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.rows


def test_hundred_rows_with_the_same_key_fetch_once():
    async def scenario() -> None:
        lookup = FakeLookup(rows=[{"id": "b1"}])
        visibility = ManualVisibility()
        resolver = LazyVisibilityResolver(lookup, visibility)
        seen: list[ResolutionStatus] = []

        for row in range(100):
            resolver.subscribe_visible(
                "12345",
                lambda _key, status: seen.append(status),
                element=("row", row),
            )
        assert visibility.watcher_count() == 100
        assert lookup.calls == []

        visibility.reveal_all()
        await resolver.drain()

        assert lookup.calls == ["12345"]
        assert seen == [ResolutionStatus.POSITIVE] * 100
        assert visibility.watcher_count() == 0

    run_async(scenario())


def test_two_rows_render_blocked_with_a_single_call():
    async def scenario() -> None:
        lookup = FakeLookup(rows=[{"id": "b1", "tipo_nome": "Financeiro"}])
        visibility = ManualVisibility()
        resolver = LazyVisibilityResolver(lookup, visibility)
        labels: dict[str, str] = {}

        resolver.subscribe_visible(
            "12345", lambda k, s: labels.__setitem__("clients", status_label(s)), element="clients-row"
        )
        resolver.subscribe_visible(
            12345, lambda k, s: labels.__setitem__("invoices", status_label(s)), element="invoices-row"
        )
        visibility.reveal("clients-row")
        await resolver.drain()
        visibility.reveal("invoices-row")
        await resolver.drain()

        assert labels == {"clients": "Bloqueado", "invoices": "Bloqueado"}
        assert lookup.calls == ["12345"]

    run_async(scenario())


def test_two_rows_render_normal_when_remote_list_is_empty():
    async def scenario() -> None:
        lookup = FakeLookup(rows=[])
        resolver = LazyVisibilityResolver(lookup, ImmediateVisibility())
        labels: list[str] = []

        resolver.subscribe_visible("12345", lambda k, s: labels.append(status_label(s)))
        await resolver.drain()
        resolver.subscribe_visible("12345", lambda k, s: labels.append(status_label(s)))

        assert labels == ["Normal", "Normal"]
        assert lookup.calls == ["12345"]

    run_async(scenario())


def test_cached_status_is_delivered_synchronously_without_watcher():
    async def scenario() -> None:
        lookup = FakeLookup(rows=[])
        visibility = ManualVisibility()
        resolver = LazyVisibilityResolver(lookup, visibility)

        assert await resolver.resolve("777") is ResolutionStatus.NEGATIVE

        seen: list[tuple[str, ResolutionStatus]] = []
        unsubscribe = resolver.subscribe_visible(" 777 ", lambda k, s: seen.append((k, s)))

        assert seen == [("777", ResolutionStatus.NEGATIVE)]
        assert visibility.watcher_count() == 0
        unsubscribe()

    run_async(scenario())


def test_failure_caches_unknown_for_the_session():
    async def scenario() -> None:
        lookup = FakeLookup(error=TransientNetworkError("connection reset"))
        resolver = LazyVisibilityResolver(lookup, ImmediateVisibility())
        seen: list[ResolutionStatus] = []

        resolver.subscribe_visible("555", lambda k, s: seen.append(s))
        await resolver.drain()
        assert seen == [ResolutionStatus.UNKNOWN]
        assert resolver.status_of("555") is ResolutionStatus.UNKNOWN

        lookup.error = None
        lookup.rows = [{"id": "b"}]
        resolver.subscribe_visible("555", lambda k, s: seen.append(s))
        assert seen == [ResolutionStatus.UNKNOWN, ResolutionStatus.UNKNOWN]
        assert lookup.calls == ["555"]

        resolver.clear()
        assert await resolver.resolve("555") is ResolutionStatus.POSITIVE
        assert lookup.calls == ["555", "555"]

    run_async(scenario())


def test_missing_credentials_resolve_unknown_without_raising():
    async def scenario() -> None:
        lookup = FakeLookup(error=ConfigurationError("Status API credentials are not configured"))
        resolver = LazyVisibilityResolver(lookup, ImmediateVisibility())
        assert await resolver.resolve("1") is ResolutionStatus.UNKNOWN

    run_async(scenario())


def test_unsubscribe_before_visible_cancels_watcher():
    async def scenario() -> None:
        lookup = FakeLookup(rows=[])
        visibility = ManualVisibility()
        resolver = LazyVisibilityResolver(lookup, visibility)
        seen: list[ResolutionStatus] = []

        unsubscribe = resolver.subscribe_visible("9", lambda k, s: seen.append(s), element="row-9")
        assert visibility.watcher_count("row-9") == 1
        unsubscribe()
        assert visibility.watcher_count("row-9") == 0

        assert visibility.reveal("row-9") == 0
        await resolver.drain()
        assert seen == []
        assert lookup.calls == []

    run_async(scenario())


def test_unsubscribe_after_visible_drops_callback_but_keeps_result():
    async def scenario() -> None:
        lookup = FakeLookup(rows=[{"id": "b"}])
        lookup.gate = asyncio.Event()
        visibility = ManualVisibility()
        resolver = LazyVisibilityResolver(lookup, visibility)
        seen: list[ResolutionStatus] = []

        unsubscribe = resolver.subscribe_visible("9", lambda k, s: seen.append(s), element="row-9")
        visibility.reveal("row-9")
        await asyncio.sleep(0)
        unsubscribe()
        lookup.gate.set()
        await resolver.drain()

        assert seen == []
        assert resolver.status_of("9") is ResolutionStatus.POSITIVE

    run_async(scenario())


def test_watcher_is_one_shot():
    async def scenario() -> None:
        lookup = FakeLookup(rows=[])
        visibility = ManualVisibility()
        resolver = LazyVisibilityResolver(lookup, visibility)
        seen: list[ResolutionStatus] = []

        resolver.subscribe_visible("3", lambda k, s: seen.append(s), element="row-3")
        visibility.reveal("row-3")
        visibility.reveal("row-3")
        await resolver.drain()

        assert seen == [ResolutionStatus.NEGATIVE]

    run_async(scenario())


def test_root_margin_is_passed_to_visibility():
    class RecordingVisibility(ManualVisibility):
        def __init__(self) -> None:
            super().__init__()
            self.margins: list[int] = []

        def subscribe(self, element, on_visible, *, root_margin_px=0):
            self.margins.append(root_margin_px)
            return super().subscribe(element, on_visible, root_margin_px=root_margin_px)

    visibility = RecordingVisibility()
    resolver = LazyVisibilityResolver(FakeLookup(), visibility, root_margin_px=320)
    resolver.subscribe_visible("1", lambda k, s: None)
    assert visibility.margins == [320]


def test_empty_key_resolves_unknown_without_lookup():
    lookup = FakeLookup(rows=[{"id": "b"}])
    visibility = ManualVisibility()
    resolver = LazyVisibilityResolver(lookup, visibility)
    seen: list[ResolutionStatus] = []

    resolver.subscribe_visible("   ", lambda k, s: seen.append(s))

    assert seen == [ResolutionStatus.UNKNOWN]
    assert visibility.watcher_count() == 0
    assert lookup.calls == []
    assert resolver.status_of("") is None
