# site_indexer/crawler/models.py
"""
Data models for the SiteIndexer crawler.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = (
    "PageData",
    "FetchStatus",
    "FetchOutcome",
    "Document",
    "CrawlSummary",
    "document_id_for",
)


@dataclass(slots=True)
class PageData:
    """Holds the URL and the raw HTML of a fetched page."""

    url: str
    content: str


class FetchStatus(str, Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"
    FAILURE = "failure"


@dataclass(slots=True)
class FetchOutcome:
    """Typed result of the fetch strategy chain.

    ``SUCCESS`` – rendered by the browser; ``DEGRADED`` – served by the plain
    HTTP fallback; ``FAILURE`` – no content, ``error`` explains why.
    """

    url: str
    status: FetchStatus
    html: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.status is not FetchStatus.FAILURE and bool(self.html)

    def page(self) -> PageData:
        if not self.ok:
            raise ValueError(f"no content for {self.url}: {self.error}")
        return PageData(self.url, self.html or "")

    @classmethod
    def success(cls, url: str, html: str, attempts: int = 1) -> FetchOutcome:
        return cls(url, FetchStatus.SUCCESS, html=html, attempts=attempts)

    @classmethod
    def degraded(cls, url: str, html: str, attempts: int = 1) -> FetchOutcome:
        return cls(url, FetchStatus.DEGRADED, html=html, attempts=attempts)

    @classmethod
    def failure(cls, url: str, error: str, attempts: int = 0) -> FetchOutcome:
        return cls(url, FetchStatus.FAILURE, error=error, attempts=attempts)


def document_id_for(url: str) -> str:
    """Stable document id: re-crawling a URL replaces its index entry."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, url))


class Document(BaseModel):
    """A crawled page ready for indexing.

    Serialized with camelCase aliases (``lastCrawled``). Every field is
    required and unknown keys are rejected, so snapshots and store records
    keep a fixed shape.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str
    title: str
    description: str
    content: str
    url: str
    links: str
    last_crawled: int = Field(..., alias="lastCrawled")

    def dump(self) -> dict:
        return self.model_dump(by_alias=True)


class CrawlSummary(BaseModel):
    """Result of one crawl invocation."""

    model_config = ConfigDict(populate_by_name=True)

    crawl_id: str = Field(..., alias="crawlId")
    pages_crawled: int = Field(0, alias="pagesCrawled")
    crawled_urls: List[str] = Field(default_factory=list, alias="crawledUrls")
    failed_urls: List[str] = Field(default_factory=list, alias="failedUrls")
    skipped_urls: List[str] = Field(default_factory=list, alias="skippedUrls")
    degraded_urls: List[str] = Field(default_factory=list, alias="degradedUrls")
    indexed_documents: int = Field(0, alias="indexedDocuments")

    def dump(self) -> dict:
        return self.model_dump(by_alias=True)
