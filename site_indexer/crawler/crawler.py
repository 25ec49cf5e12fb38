# site_indexer/crawler/crawler.py
"""
One crawl invocation: select a batch from the frontier, fetch / extract /
store every URL concurrently, feed discovered links back into the frontier.
"""
from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from site_indexer.config import IndexerConfig
from site_indexer.crawler.fetcher import PageFetcher
from site_indexer.crawler.frontier import FrontierManager
from site_indexer.crawler.models import CrawlSummary, Document, FetchStatus
from site_indexer.errors import EmptyFrontierError, StoreUnavailableError
from site_indexer.logger import get_logger
from site_indexer.parser.html_parser import extract
from site_indexer.store.base import KeyValueStore

__all__ = ("CrawlPipeline", "CrawlResult", "DOCUMENT_KEY_PREFIX")

DOCUMENT_KEY_PREFIX = "index:"


@dataclass
class CrawlResult:
    """Summary plus the documents produced by this invocation."""

    summary: CrawlSummary
    documents: List[Document] = field(default_factory=list)


class CrawlPipeline:
    """Fan-out / join crawl of a single frontier batch."""

    def __init__(
        self,
        config: IndexerConfig,
        store: KeyValueStore,
        fetcher: PageFetcher,
        frontier: Optional[FrontierManager] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.fetcher = fetcher
        self.frontier = frontier or FrontierManager(store, config.revisit_window_ms)
        self.logger = get_logger("crawler")

    async def run(self) -> CrawlResult:
        crawl_id = str(uuid.uuid4())
        start = time.monotonic()
        self.logger.info("Starting crawl %s of %s", crawl_id, self.config.seed_url)

        await self.frontier.initialize(self.config.seed_url)
        batch = await self.frontier.select_batch(self.config.batch_size)
        if not batch:
            self.logger.info("No URLs to crawl, exiting...")
            raise EmptyFrontierError("No URLs to crawl")
        self.logger.info("Processing %d URLs...", len(batch))

        summary = CrawlSummary(crawl_id=crawl_id)
        documents: List[Document] = []
        results = await asyncio.gather(
            *(self._crawl_one(url, summary) for url in batch),
            return_exceptions=True,
        )
        for url, result in zip(batch, results):
            if isinstance(result, StoreUnavailableError):
                raise result
            if isinstance(result, BaseException):
                self.logger.error("Unexpected failure on %s: %r", url, result)
                summary.failed_urls.append(url)
            elif result is not None:
                documents.append(result)

        summary.pages_crawled = len(summary.crawled_urls)
        duration = time.monotonic() - start
        self.logger.info(
            "Crawl complete. Crawled %d pages, %d failed, %d skipped in %.2f s",
            summary.pages_crawled,
            len(summary.failed_urls),
            len(summary.skipped_urls),
            duration,
        )
        return CrawlResult(summary=summary, documents=documents)

    async def _crawl_one(self, url: str, summary: CrawlSummary) -> Optional[Document]:
        if not await self.frontier.can_crawl(url):
            self.logger.debug("Skipping %s - visited within the revisit window.", url)
            summary.skipped_urls.append(url)
            return None

        self.logger.info("Crawling URL: %s", url)
        outcome = await self.fetcher.fetch(url)
        await self.frontier.mark_visited(url)

        if not outcome.ok:
            self.logger.warning("Failed to crawl %s: %s", url, outcome.error)
            summary.failed_urls.append(url)
            return None

        page = outcome.page()
        document, hrefs = extract(page.url, page.content, self.config.max_content_length)
        await self.store.set(f"{DOCUMENT_KEY_PREFIX}{document.id}", document.model_dump_json(by_alias=True))
        await self.frontier.enqueue_discovered(hrefs)

        if outcome.status is FetchStatus.DEGRADED:
            summary.degraded_urls.append(url)
        summary.crawled_urls.append(url)
        return document
