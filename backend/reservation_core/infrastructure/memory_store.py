"""
In-process key-value store with TTL semantics.

Use when:
- Running tests without a Redis server
- Local development with a single worker process

Expiry is evaluated lazily against an injectable clock, so tests can move
time forward instead of sleeping. Each method completes without awaiting,
which keeps it atomic with respect to other coroutines on the same loop.
"""

import math
import time
from typing import Callable, Optional

from reservation_core.infrastructure.store import KEY_MISSING, KeyValueStore


class MemoryStore(KeyValueStore):
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[str, float]] = {}

    def _live(self, key: str) -> Optional[tuple[str, float]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._data[key]
            return None
        return entry

    async def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        if self._live(key) is not None:
            return False
        self._data[key] = (value, self._clock() + ttl)
        return True

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._data[key] = (value, self._clock() + ttl)

    async def get(self, key: str) -> Optional[str]:
        entry = self._live(key)
        return entry[0] if entry else None

    async def ttl(self, key: str) -> int:
        entry = self._live(key)
        if entry is None:
            return KEY_MISSING
        return math.ceil(entry[1] - self._clock())

    async def delete(self, key: str) -> bool:
        if self._live(key) is None:
            return False
        del self._data[key]
        return True

    async def delete_if_equals(self, key: str, value: str) -> bool:
        entry = self._live(key)
        if entry is None or entry[0] != value:
            return False
        del self._data[key]
        return True

    async def expire_if_equals(self, key: str, value: str, ttl: int) -> bool:
        entry = self._live(key)
        if entry is None or entry[0] != value:
            return False
        self._data[key] = (value, self._clock() + ttl)
        return True

    def keys(self) -> list[str]:
        return [key for key in list(self._data) if self._live(key) is not None]
