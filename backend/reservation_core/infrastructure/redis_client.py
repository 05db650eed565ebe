"""
Redis-backed key-value store for holds and checkout sessions.

Acquisition uses SET NX EX, so at most one claimant wins a hold key.
Owner-checked refresh and release run as Lua scripts, which makes the
compare and the write a single atomic step on the server.

Unlike a cache, this store never fails open: a Redis outage is raised
as StoreUnavailableError, since reading it as "no hold" would let two
claimants pay for the same seat.
"""

import os
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from reservation_core.core.config import get_settings
from reservation_core.core.errors import StoreUnavailableError
from reservation_core.core.logging import get_logger
from reservation_core.core.metrics import record_store_error
from reservation_core.infrastructure.store import KeyValueStore

logger = get_logger(__name__)
settings = get_settings()

SCRIPT_DIR = os.path.join(os.path.dirname(__file__), "lua")


def _load_script(name: str) -> str:
    with open(os.path.join(SCRIPT_DIR, name), "r") as f:
        return f.read()


COMPARE_AND_DELETE = _load_script("compare_and_delete.lua")
COMPARE_AND_EXPIRE = _load_script("compare_and_expire.lua")


class RedisStore(KeyValueStore):
    """Shared Redis store with connection pooling."""

    def __init__(self, client: redis.Redis):
        self.redis = client
        self._compare_and_delete = client.register_script(COMPARE_AND_DELETE)
        self._compare_and_expire = client.register_script(COMPARE_AND_EXPIRE)

    @classmethod
    def from_url(cls, url: Optional[str] = None) -> "RedisStore":
        client = redis.from_url(
            url or settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        return cls(client)

    def _unavailable(self, operation: str, key: str, exc: Exception) -> StoreUnavailableError:
        record_store_error(operation)
        logger.error("store_error", operation=operation, key=key, error=str(exc))
        return StoreUnavailableError(operation)

    async def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        try:
            return bool(await self.redis.set(key, value, nx=True, ex=ttl))
        except RedisError as e:
            raise self._unavailable("set_if_absent", key, e) from e

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self.redis.set(key, value, ex=ttl)
        except RedisError as e:
            raise self._unavailable("set", key, e) from e

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except RedisError as e:
            raise self._unavailable("get", key, e) from e

    async def get_many(self, keys: list[str]) -> list[Optional[str]]:
        if not keys:
            return []
        try:
            return await self.redis.mget(keys)
        except RedisError as e:
            raise self._unavailable("get_many", keys[0], e) from e

    async def ttl(self, key: str) -> int:
        try:
            return int(await self.redis.ttl(key))
        except RedisError as e:
            raise self._unavailable("ttl", key, e) from e

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.redis.delete(key))
        except RedisError as e:
            raise self._unavailable("delete", key, e) from e

    async def delete_if_equals(self, key: str, value: str) -> bool:
        try:
            return bool(await self._compare_and_delete(keys=[key], args=[value]))
        except RedisError as e:
            raise self._unavailable("delete_if_equals", key, e) from e

    async def expire_if_equals(self, key: str, value: str, ttl: int) -> bool:
        try:
            return bool(await self._compare_and_expire(keys=[key], args=[value, ttl]))
        except RedisError as e:
            raise self._unavailable("expire_if_equals", key, e) from e

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as e:
            logger.error("redis_ping_failed", error=str(e))
            return False

    async def close(self) -> None:
        await self.redis.aclose()
