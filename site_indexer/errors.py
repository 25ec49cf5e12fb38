"""Exception hierarchy of SiteIndexer.

Per-URL problems (fetch failures, malformed markup) are handled inside the
crawl pipeline; everything raised from here up to the caller is either an
infrastructure failure or a client error.
"""
from __future__ import annotations

__all__ = (
    "SiteIndexerError",
    "StoreUnavailableError",
    "EmptyFrontierError",
    "BrowserUnavailableError",
    "FetchError",
    "DocumentShapeError",
    "EmptyIndexError",
    "SnapshotError",
    "InvalidQueryError",
    "IndexEmptyError",
    "SearchError",
)


class SiteIndexerError(Exception):
    """Base class for all project errors."""


class StoreUnavailableError(SiteIndexerError):
    """The key-value store could not be reached or answered with an error."""


class EmptyFrontierError(SiteIndexerError):
    """The frontier has no URLs to crawl."""


class BrowserUnavailableError(SiteIndexerError):
    """The headless browser binary is missing or cannot be launched."""


class FetchError(SiteIndexerError):
    """A single fetch attempt failed (network, timeout, render, HTTP status)."""


class DocumentShapeError(SiteIndexerError, ValueError):
    """A document does not carry exactly the declared index fields."""


class EmptyIndexError(SiteIndexerError):
    """Indexing produced zero documents; nothing is persisted."""


class SnapshotError(SiteIndexerError):
    """The index snapshot could not be written."""


class InvalidQueryError(SiteIndexerError, ValueError):
    """The search query is missing or blank."""


class IndexEmptyError(SiteIndexerError):
    """The index holds no documents yet."""


class SearchError(SiteIndexerError):
    """Unexpected failure while executing a search."""
