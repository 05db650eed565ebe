"""
Key-value store capability used for holds and checkout sessions.
Allows swapping the Redis backend for an in-memory one without changing
hold or session logic.
"""

from abc import ABC, abstractmethod
from typing import Optional

# Returned by ttl() for a key that does not exist (mirrors Redis TTL)
KEY_MISSING = -2


class KeyValueStore(ABC):
    """
    Interface for the ephemeral store.

    Implementations:
    - RedisStore: shared Redis instance, native key expiry
    - MemoryStore: single-process dict with an injectable clock

    Every method raises StoreUnavailableError when the backend cannot be
    reached. Callers must never read that as "key absent".
    """

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        """Atomically create key with a TTL. True only if it did not exist."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int) -> None:
        """Unconditionally write key with a TTL."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    async def get_many(self, keys: list[str]) -> list[Optional[str]]:
        return [await self.get(key) for key in keys]

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Remaining seconds to live, or KEY_MISSING."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def delete_if_equals(self, key: str, value: str) -> bool:
        """Delete key only while it still holds value."""

    @abstractmethod
    async def expire_if_equals(self, key: str, value: str, ttl: int) -> bool:
        """Reset the TTL of key only while it still holds value."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass
