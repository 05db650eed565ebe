"""
Infrastructure layer - external system integrations.
Keeps hold and session logic clean from storage details.
"""

from .store import KEY_MISSING, KeyValueStore
from .memory_store import MemoryStore
from .redis_client import RedisStore
from .store_factory import close_store, get_store

__all__ = ['KEY_MISSING', 'KeyValueStore', 'MemoryStore', 'RedisStore', 'close_store', 'get_store']
