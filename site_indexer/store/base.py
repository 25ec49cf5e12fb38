"""Key-value store interface consumed by the crawl pipeline.

Every operation must be individually atomic on the backend; the pipeline
never relies on multi-key transactions.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Set


class KeyValueStore(ABC):
    """Set / hash / string operations shared by concurrent crawl tasks."""

    # -- sets ----------------------------------------------------------------
    @abstractmethod
    async def sadd(self, key: str, members: Iterable[str]) -> int:
        """Add members to a set; return how many were new."""

    @abstractmethod
    async def smembers(self, key: str) -> Set[str]:
        """Return all members of a set (empty when the key is absent)."""

    @abstractmethod
    async def sismember(self, key: str, member: str) -> bool:
        pass

    # -- hashes --------------------------------------------------------------
    @abstractmethod
    async def hset(self, key: str, field: str, value: str) -> None:
        pass

    @abstractmethod
    async def hget(self, key: str, field: str) -> Optional[str]:
        pass

    @abstractmethod
    async def hmget(self, key: str, fields: List[str]) -> List[Optional[str]]:
        """Bulk :meth:`hget`, one value (or ``None``) per requested field."""

    # -- strings -------------------------------------------------------------
    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass

    # -- keys ----------------------------------------------------------------
    @abstractmethod
    async def type(self, key: str) -> str:
        """Redis-style type name: ``none``, ``string``, ``set``, ``hash``..."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    async def close(self) -> None:
        """Release backend resources (no-op by default)."""

    async def __aenter__(self) -> KeyValueStore:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
