# File: site_indexer/engine.py
"""site_indexer.engine: оркестрация обхода, индексации и поиска."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from site_indexer.config import IndexerConfig, load_config
from site_indexer.crawler.crawler import CrawlPipeline
from site_indexer.crawler.fetcher import PageFetcher
from site_indexer.crawler.models import CrawlSummary, Document
from site_indexer.logger import logger
from site_indexer.search.index_builder import IndexBuilder
from site_indexer.search.query import QueryService
from site_indexer.search.snapshot import read_snapshot_or_empty
from site_indexer.store.base import KeyValueStore
from site_indexer.store.redis_store import RedisStore

__all__ = ["Engine"]

StoreFactory = Callable[[IndexerConfig], KeyValueStore]
FetcherFactory = Callable[[IndexerConfig], PageFetcher]


def _redis_store(config: IndexerConfig) -> KeyValueStore:
    return RedisStore.from_url(config.redis_url)


class Engine:
    """Фасад для CLI, веб-слоя и тестов: обход + индексация, поиск."""

    @staticmethod
    def load_config(path: Optional[str]) -> IndexerConfig:
        """Загружает конфиг из YAML/JSON."""
        return load_config(path)

    def __init__(
        self,
        config: IndexerConfig,
        store_factory: StoreFactory = _redis_store,
        fetcher_factory: FetcherFactory = PageFetcher,
    ) -> None:
        self.config = config
        self.store_factory = store_factory
        self.fetcher_factory = fetcher_factory

    async def crawl(self) -> CrawlSummary:
        """Crawl one batch and merge its documents into the persisted index.

        Store failures and an empty resulting index abort the invocation;
        per-URL failures only show up in the summary. The snapshot merge runs
        in a worker thread.
        """
        async with self.store_factory(self.config) as store:
            async with self.fetcher_factory(self.config) as fetcher:
                result = await CrawlPipeline(self.config, store, fetcher).run()

        summary = result.summary
        summary.indexed_documents = await asyncio.to_thread(self.index, result.documents)
        return summary

    def index(self, documents: List[Document]) -> int:
        """Merge *documents* into the snapshot in memory and rewrite it."""
        snapshot = read_snapshot_or_empty(self.config.snapshot_path)
        builder = IndexBuilder.from_snapshot(snapshot)
        added = builder.add_all(documents)
        fresh = builder.snapshot()
        builder.persist(fresh, self.config.snapshot_path)
        logger.info(
            "Index updated: %d documents added or replaced, %d total",
            added,
            len(fresh.documents),
        )
        return len(fresh.documents)

    def search(self, query: Optional[str], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return QueryService(self.config.snapshot_path).search(query, limit=limit)
