"""
Key-value store factory.
Configures which backend holds and sessions live in.
"""

from typing import Optional

from reservation_core.core.config import get_settings
from reservation_core.core.logging import get_logger
from reservation_core.infrastructure.memory_store import MemoryStore
from reservation_core.infrastructure.redis_client import RedisStore
from reservation_core.infrastructure.store import KeyValueStore

logger = get_logger(__name__)


def build_store() -> KeyValueStore:
    """
    Build the configured store.

    - redis: shared Redis (required with more than one worker process)
    - memory: single-process store, for local runs and tests

    Selected via the STORE_BACKEND env var.
    """
    backend = get_settings().STORE_BACKEND
    if backend == "memory":
        logger.warning("memory_store_selected", message="Holds are not shared across processes")
        return MemoryStore()
    if backend == "redis":
        return RedisStore.from_url()
    raise ValueError(f"Unknown STORE_BACKEND: {backend}")


# Singleton instance
_store: Optional[KeyValueStore] = None


def get_store() -> KeyValueStore:
    """Get key-value store singleton."""
    global _store
    if _store is None:
        _store = build_store()
    return _store


async def close_store() -> None:
    global _store
    if _store is not None:
        await _store.close()
        _store = None
