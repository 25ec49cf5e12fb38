# File: tests/conftest.py
from pathlib import Path
from typing import Callable

import pytest

from site_indexer.config import IndexerConfig
from site_indexer.crawler.models import Document, PageData, document_id_for
from site_indexer.errors import FetchError
from site_indexer.store.memory import InMemoryStore


class FakeStrategy:
    """Scripted fetch strategy: fails ``failures`` times, then returns ``html``."""

    def __init__(self, html: str = "<html><title>Fake</title><body>ok</body></html>",
                 failures: int = 0, exc: type = FetchError, name: str = "fake"):
        self.html = html
        self.failures = failures
        self.exc = exc
        self.name = name
        self.calls = 0
        self.urls: list[str] = []

    async def fetch(self, url: str) -> str:
        self.calls += 1
        self.urls.append(url)
        if self.failures < 0 or self.calls <= self.failures:
            raise self.exc(f"{self.name} failure #{self.calls}")
        return self.html


@pytest.fixture()
def fake_strategy() -> type:
    return FakeStrategy


@pytest.fixture()
def snapshot_path(tmp_path) -> Path:
    return tmp_path / "data" / "search-index.json"


@pytest.fixture()
def basic_config(snapshot_path) -> IndexerConfig:
    """
    Return a basic valid IndexerConfig without browser and retry delays.
    """
    return IndexerConfig(
        base_url="https://example.com",
        use_browser=False,
        retry_delay=0,
        http_timeout=2.0,
        redis_url="redis://localhost:6379/15",
        snapshot_path=snapshot_path,
    )


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def make_document() -> Callable[..., Document]:
    def _make(url: str, title: str = "Page", content: str = "", description: str = "",
              links: str = "", last_crawled: int = 1_700_000_000_000) -> Document:
        return Document(
            id=document_id_for(url),
            title=title,
            description=description,
            content=content,
            url=url,
            links=links,
            last_crawled=last_crawled,
        )

    return _make


@pytest.fixture()
def mock_page_data() -> PageData:
    """
    Provide a simple PageData instance with HTML content.
    """
    html = (
        '<html><body><a href="/a">A</a><a href="https://other.site/b">B</a>'
        '<a href="#frag">F</a></body></html>'
    )
    return PageData(url="https://example.com", content=html)
