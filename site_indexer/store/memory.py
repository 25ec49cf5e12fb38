"""In-process :class:`KeyValueStore` for tests and single-process runs.

Each coroutine completes without awaiting, so operations are atomic with
respect to other tasks on the same event loop.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set, Union

from site_indexer.store.base import KeyValueStore

_Value = Union[str, Set[str], Dict[str, str]]


class InMemoryStore(KeyValueStore):
    def __init__(self) -> None:
        self.data: Dict[str, _Value] = {}

    def _typed(self, key: str, kind: type, factory) -> _Value:
        value = self.data.get(key)
        if value is None:
            value = factory()
            self.data[key] = value
        if not isinstance(value, kind):
            raise TypeError(f"WRONGTYPE operation against key {key!r}")
        return value

    async def sadd(self, key: str, members: Iterable[str]) -> int:
        values = list(members)
        if not values:
            return 0
        target = self._typed(key, set, set)
        before = len(target)
        target.update(values)
        return len(target) - before

    async def smembers(self, key: str) -> Set[str]:
        if key not in self.data:
            return set()
        return set(self._typed(key, set, set))

    async def sismember(self, key: str, member: str) -> bool:
        return key in self.data and member in self._typed(key, set, set)

    async def hset(self, key: str, field: str, value: str) -> None:
        self._typed(key, dict, dict)[field] = value

    async def hget(self, key: str, field: str) -> Optional[str]:
        if key not in self.data:
            return None
        return self._typed(key, dict, dict).get(field)

    async def hmget(self, key: str, fields: List[str]) -> List[Optional[str]]:
        if key not in self.data:
            return [None] * len(fields)
        mapping = self._typed(key, dict, dict)
        return [mapping.get(f) for f in fields]

    async def get(self, key: str) -> Optional[str]:
        if key not in self.data:
            return None
        return self._typed(key, str, str)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def type(self, key: str) -> str:
        value = self.data.get(key)
        if value is None:
            return "none"
        if isinstance(value, set):
            return "set"
        if isinstance(value, dict):
            return "hash"
        return "string"

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self.data if k.startswith(prefix))
