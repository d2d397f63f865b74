from __future__ import annotations

from asyncio import Lock
from collections.abc import Awaitable, Callable, Iterable
import time
from typing import Any, Hashable

from .config import STATS_CACHE_TTL_SECONDS


def _owner(key: Hashable) -> Any:
    return key[0] if isinstance(key, tuple) and key else None


class TTLCache:
    """In-memory TTL cache keyed by tuples whose first item is a player id.

    Every player carries a generation number that ``invalidate_players``
    bumps. A value computed under an older generation is not stored.
    """

    def __init__(self, ttl_seconds: float = 300.0) -> None:
        self._ttl = ttl_seconds
        self._lock = Lock()
        self._store: dict[Hashable, tuple[Any, float]] = {}
        self._generations: dict[Any, int] = {}

    def __len__(self) -> int:
        return len(self._store)

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._store.items() if expires_at <= now]
        for key in expired:
            self._store.pop(key, None)

    async def get(self, key: Hashable) -> Any | None:
        now = time.monotonic()
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at <= now:
                self._store.pop(key, None)
                return None
            return value

    async def set(
        self,
        key: Hashable,
        value: Any,
        ttl_seconds: float | None = None,
        *,
        generation: int | None = None,
    ) -> None:
        """Store ``value``; skipped when ``generation`` is stale for the key's player."""
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        now = time.monotonic()
        async with self._lock:
            self._purge_expired(now)
            if generation is not None and generation != self._generations.get(_owner(key), 0):
                return
            if ttl <= 0:
                self._store.pop(key, None)
            else:
                self._store[key] = (value, now + ttl)

    async def get_or_compute(
        self, key: Hashable, compute: Callable[[], Awaitable[Any]]
    ) -> Any:
        """Return the cached value for ``key``, computing and storing it on a miss.

        The lock is not held while ``compute`` runs, so two concurrent misses
        may both compute. A result is dropped if its player was invalidated
        while it was being computed.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached
        async with self._lock:
            generation = self._generations.get(_owner(key), 0)
        value = await compute()
        await self.set(key, value, generation=generation)
        return value

    async def invalidate_players(self, player_ids: Iterable[str]) -> None:
        ids = {pid for pid in player_ids if pid}
        if not ids:
            return
        async with self._lock:
            for pid in ids:
                self._generations[pid] = self._generations.get(pid, 0) + 1
            keys_to_remove = [key for key in self._store if _owner(key) in ids]
            for key in keys_to_remove:
                self._store.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()
            self._generations.clear()


player_stats_cache = TTLCache(ttl_seconds=STATS_CACHE_TTL_SECONDS)
