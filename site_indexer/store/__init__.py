"""Key-value store backends."""
from site_indexer.store.base import KeyValueStore
from site_indexer.store.memory import InMemoryStore
from site_indexer.store.redis_store import RedisStore

__all__ = ["KeyValueStore", "InMemoryStore", "RedisStore"]
