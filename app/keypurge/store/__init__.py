"""Key-value store adapters.

This module exports the store interface and its Redis implementation.
"""

from keypurge.store.base import KeyValueStore
from keypurge.store.redis_store import RedisStore

__all__ = ["KeyValueStore", "RedisStore"]
