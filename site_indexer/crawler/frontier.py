# site_indexer/crawler/frontier.py
"""
Frontier management: URL discovery, deduplication and revisit throttling.

The frontier (``urls:to_crawl``) is a store set and the visit log
(``urls:visited``) a store hash of ``url -> epoch ms``. Both live in the
shared key-value store, so several crawl tasks may touch them concurrently;
every call below maps onto a single atomic store operation.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from site_indexer.logger import get_logger
from site_indexer.store.base import KeyValueStore
from site_indexer.utils import now_ms, remove_duplicates

__all__ = ("FrontierManager", "FRONTIER_KEY", "VISITED_KEY", "REVISIT_WINDOW_MS")

FRONTIER_KEY = "urls:to_crawl"
VISITED_KEY = "urls:visited"
#: six hours
REVISIT_WINDOW_MS = 6 * 60 * 60 * 1000


class FrontierManager:
    """Owns the frontier set and the visited-timestamp hash."""

    def __init__(self, store: KeyValueStore, revisit_window_ms: int = REVISIT_WINDOW_MS) -> None:
        self.store = store
        self.revisit_window_ms = revisit_window_ms
        self.log = get_logger("frontier")

    async def initialize(self, seed_url: str) -> None:
        """Make sure the frontier is a set and contains *seed_url*. Idempotent."""
        key_type = await self.store.type(FRONTIER_KEY)
        if key_type not in ("set", "none"):
            self.log.warning("Resetting %s because the type is incorrect: %s", FRONTIER_KEY, key_type)
            await self.store.delete(FRONTIER_KEY)

        if await self.store.sismember(FRONTIER_KEY, seed_url):
            self.log.debug("Seed URL already in %s: %s", FRONTIER_KEY, seed_url)
            return
        await self.store.sadd(FRONTIER_KEY, [seed_url])
        self.log.info("Initialized %s with seed URL: %s", FRONTIER_KEY, seed_url)

    async def select_batch(self, max_size: int) -> List[str]:
        """Return up to *max_size* frontier URLs, least recently visited first.

        Never-visited URLs come before visited ones and ties are broken by URL,
        so repeated invocations rotate through the whole frontier. Revisit
        eligibility is *not* checked here, see :meth:`can_crawl`.
        """
        if max_size <= 0:
            return []
        members = sorted(await self.store.smembers(FRONTIER_KEY))
        if not members:
            return []
        stamps = await self.store.hmget(VISITED_KEY, members)

        def order(pair: tuple) -> tuple:
            stamp = self._parse(pair[1])
            return (-1 if stamp is None else stamp, pair[0])

        batch = [url for url, _ in sorted(zip(members, stamps), key=order)[:max_size]]
        self.log.debug("Selected %d of %d frontier URLs", len(batch), len(members))
        return batch

    async def last_visited(self, url: str) -> Optional[int]:
        return self._parse(await self.store.hget(VISITED_KEY, url))

    async def can_crawl(self, url: str, now: Optional[int] = None) -> bool:
        """True when *url* was never visited or its revisit window has elapsed."""
        last = await self.last_visited(url)
        if last is None:
            return True
        current = now_ms() if now is None else now
        return current - last >= self.revisit_window_ms

    async def mark_visited(self, url: str, now: Optional[int] = None) -> None:
        """Record a crawl attempt, successful or not."""
        stamp = now_ms() if now is None else now
        await self.store.hset(VISITED_KEY, url, str(stamp))

    async def enqueue_discovered(self, urls: Iterable[str]) -> int:
        """Add discovered URLs; already-known ones are absorbed by the set."""
        unique = [u for u in remove_duplicates(urls) if u]
        if not unique:
            return 0
        added = await self.store.sadd(FRONTIER_KEY, unique)
        self.log.debug("Enqueued %d URLs (%d new)", len(unique), added)
        return added

    async def size(self) -> int:
        return len(await self.store.smembers(FRONTIER_KEY))

    def _parse(self, raw: Optional[str]) -> Optional[int]:
        if raw is None or raw == "":
            return None
        try:
            return int(float(raw))
        except ValueError:
            self.log.warning("Ignoring malformed visit timestamp: %r", raw)
            return None
