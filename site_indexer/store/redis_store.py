"""Redis-backed implementation of :class:`KeyValueStore`."""
from __future__ import annotations

from functools import wraps
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Set, TypeVar

from redis.asyncio import Redis
from redis.exceptions import RedisError

from site_indexer.errors import StoreUnavailableError
from site_indexer.logger import get_logger
from site_indexer.store.base import KeyValueStore

log = get_logger("store")

_T = TypeVar("_T")


def _reraise_unavailable(func: Callable[..., Awaitable[_T]]) -> Callable[..., Awaitable[_T]]:
    """Translate redis client errors into :class:`StoreUnavailableError`."""

    @wraps(func)
    async def wrapper(self: RedisStore, *args: Any, **kwargs: Any) -> _T:
        try:
            return await func(self, *args, **kwargs)
        except (RedisError, OSError) as exc:
            log.error("Redis %s failed: %s", func.__name__, exc)
            raise StoreUnavailableError(f"redis {func.__name__} failed: {exc}") from exc

    return wrapper


class RedisStore(KeyValueStore):
    """Thin async wrapper around :class:`redis.asyncio.Redis` with ``decode_responses``."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisStore:
        return cls(Redis.from_url(url, decode_responses=True))

    @_reraise_unavailable
    async def sadd(self, key: str, members: Iterable[str]) -> int:
        values = list(members)
        if not values:
            return 0
        return int(await self._client.sadd(key, *values))

    @_reraise_unavailable
    async def smembers(self, key: str) -> Set[str]:
        return set(await self._client.smembers(key))

    @_reraise_unavailable
    async def sismember(self, key: str, member: str) -> bool:
        return bool(await self._client.sismember(key, member))

    @_reraise_unavailable
    async def hset(self, key: str, field: str, value: str) -> None:
        await self._client.hset(key, field, value)

    @_reraise_unavailable
    async def hget(self, key: str, field: str) -> Optional[str]:
        return await self._client.hget(key, field)

    @_reraise_unavailable
    async def hmget(self, key: str, fields: List[str]) -> List[Optional[str]]:
        if not fields:
            return []
        return list(await self._client.hmget(key, fields))

    @_reraise_unavailable
    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(key)

    @_reraise_unavailable
    async def set(self, key: str, value: str) -> None:
        await self._client.set(key, value)

    @_reraise_unavailable
    async def type(self, key: str) -> str:
        return str(await self._client.type(key))

    @_reraise_unavailable
    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def close(self) -> None:
        await self._client.aclose()
