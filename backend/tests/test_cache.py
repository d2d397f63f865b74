import asyncio
from types import SimpleNamespace

import pytest

from league_tracker.cache import TTLCache


@pytest.mark.anyio
async def test_get_or_compute_caches_value():
    cache = TTLCache(ttl_seconds=60)
    calls = []

    async def compute():
        calls.append(1)
        return {"numberOfGames": len(calls)}

    first = await cache.get_or_compute(("p", None), compute)
    second = await cache.get_or_compute(("p", None), compute)
    assert first == second == {"numberOfGames": 1}
    assert len(calls) == 1


@pytest.mark.anyio
async def test_expired_entries_are_dropped(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(
        "league_tracker.cache.time", SimpleNamespace(monotonic=lambda: clock[0])
    )
    cache = TTLCache(ttl_seconds=5)
    await cache.set(("p", None), "value")
    assert await cache.get(("p", None)) == "value"
    clock[0] += 5
    assert await cache.get(("p", None)) is None


@pytest.mark.anyio
async def test_invalidate_players_drops_every_window():
    cache = TTLCache()
    await cache.set(("p", None), 1)
    await cache.set(("p", 7), 2)
    await cache.set(("q", None), 3)
    await cache.invalidate_players(["p"])
    assert await cache.get(("p", None)) is None
    assert await cache.get(("p", 7)) is None
    assert await cache.get(("q", None)) == 3


@pytest.mark.anyio
async def test_zero_ttl_does_not_store():
    cache = TTLCache()
    await cache.set("k", "v", ttl_seconds=0)
    assert await cache.get("k") is None


@pytest.mark.anyio
async def test_invalidation_during_compute_discards_result():
    cache = TTLCache(ttl_seconds=60)
    started = asyncio.Event()
    release = asyncio.Event()

    async def slow_compute():
        started.set()
        await release.wait()
        return "stale"

    async def fresh_compute():
        return "fresh"

    pending = asyncio.create_task(cache.get_or_compute(("p", None), slow_compute))
    await started.wait()
    await cache.invalidate_players(["p"])
    release.set()
    assert await pending == "stale"

    assert await cache.get(("p", None)) is None
    assert await cache.get_or_compute(("p", None), fresh_compute) == "fresh"


@pytest.mark.anyio
async def test_invalidation_leaves_other_players_computing():
    cache = TTLCache(ttl_seconds=60)

    async def compute():
        await cache.invalidate_players(["q"])
        return "value"

    await cache.get_or_compute(("p", None), compute)
    assert await cache.get(("p", None)) == "value"


@pytest.mark.anyio
async def test_set_purges_expired_entries(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(
        "league_tracker.cache.time", SimpleNamespace(monotonic=lambda: clock[0])
    )
    cache = TTLCache(ttl_seconds=5)
    for days in range(1, 201):
        await cache.set(("p", days), days)
    assert len(cache) == 200
    clock[0] += 5
    await cache.set(("p", None), "latest")
    assert len(cache) == 1
