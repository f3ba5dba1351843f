from __future__ import annotations

import asyncio

import pytest

from sessioncore.persistence import (
    InMemoryPersistence,
    JsonFilePersistence,
    RedisPersistence,
    create_persistence_from_env,
)


def run_async(coro):
    return asyncio.run(coro)


class _FakeRedis:
    def __init__(self) -> None:
        self.rows: dict[str, bytes] = {}

    async def get(self, key: str):
        return self.rows.get(key)

    async def set(self, key: str, value: str):
        self.rows[key] = value.encode("utf-8")

    async def delete(self, key: str):
        self.rows.pop(key, None)


def test_in_memory_round_trip():
    async def scenario() -> None:
        store = InMemoryPersistence()
        assert await store.get("lastPolledAt") is None
        await store.set("lastPolledAt", "2026-10-18T12:00:00+00:00")
        assert await store.get("lastPolledAt") == "2026-10-18T12:00:00+00:00"
        await store.delete("lastPolledAt")
        assert await store.get("lastPolledAt") is None

    run_async(scenario())


def test_json_file_survives_reopen(tmp_path):
    path = tmp_path / "state" / "session.json"

    async def write() -> None:
        store = JsonFilePersistence(path)
        await store.set("notifications", "[]")
        await store.set("lastPolledAt", "2026-10-18T12:00:00+00:00")
        await store.delete("notifications")

    async def read() -> tuple[str | None, str | None]:
        store = JsonFilePersistence(path)
        return await store.get("notifications"), await store.get("lastPolledAt")

    run_async(write())
    assert run_async(read()) == (None, "2026-10-18T12:00:00+00:00")


def test_json_file_with_corrupt_content_starts_empty(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFilePersistence(path)
    assert run_async(store.get("notifications")) is None


def test_redis_backend_prefixes_and_decodes_keys():
    async def scenario() -> None:
        fake = _FakeRedis()
        store = RedisPersistence(fake, prefix="tests:session")
        await store.set("notifications", "[]")
        assert fake.rows == {"tests:session:notifications": b"[]"}
        assert await store.get("notifications") == "[]"
        await store.delete("notifications")
        assert await store.get("notifications") is None

    run_async(scenario())


def test_factory_defaults_to_in_memory(monkeypatch):
    monkeypatch.delenv("SESSIONCORE_PERSISTENCE_BACKEND", raising=False)
    assert isinstance(create_persistence_from_env(), InMemoryPersistence)


def test_factory_file_backend_uses_path(monkeypatch, tmp_path):
    monkeypatch.setenv("SESSIONCORE_PERSISTENCE_BACKEND", "file")
    monkeypatch.setenv("SESSIONCORE_PERSISTENCE_PATH", str(tmp_path / "s.json"))
    store = create_persistence_from_env()
    assert isinstance(store, JsonFilePersistence)
    assert store._path == tmp_path / "s.json"  # noqa: SLF001


def test_factory_redis_with_injected_client(monkeypatch):
    monkeypatch.setenv("SESSIONCORE_PERSISTENCE_BACKEND", "redis")
    monkeypatch.setenv("SESSIONCORE_REDIS_PREFIX", "tests:session")
    injected = object()

    store = create_persistence_from_env(redis_client=injected)

    assert isinstance(store, RedisPersistence)
    assert store._redis is injected  # noqa: SLF001
    assert store._prefix == "tests:session"  # noqa: SLF001


def test_factory_invalid_backend_raises(monkeypatch):
    monkeypatch.setenv("SESSIONCORE_PERSISTENCE_BACKEND", "bad-backend")
    with pytest.raises(ValueError, match="Unknown SESSIONCORE_PERSISTENCE_BACKEND"):
        create_persistence_from_env()
