# File: tests/test_web.py
from __future__ import annotations

import asyncio
import time

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from site_indexer.crawler.fetcher import PageFetcher
from site_indexer.engine import Engine
from site_indexer.errors import EmptyFrontierError, StoreUnavailableError
from site_indexer.store.memory import InMemoryStore
from site_indexer.web import create_app

INDEX_DELAY = 1.0

HOME = (
    "<html><head><title>Idemitsu</title></head><body>"
    '<h1>Lubricants</h1><a href="/about">About us</a></body></html>'
)


class DownStore(InMemoryStore):
    async def type(self, key):
        raise StoreUnavailableError("Error 111 connecting to localhost:6379")


class NoWorkEngine(Engine):
    async def crawl(self):
        raise EmptyFrontierError("No URLs to crawl")


class SlowIndexEngine(Engine):
    """Engine whose snapshot merge blocks its thread for ``INDEX_DELAY`` seconds."""

    def index(self, documents):
        time.sleep(INDEX_DELAY)
        return super().index(documents)


@pytest_asyncio.fixture
async def client_for():
    clients = []

    async def _make(engine: Engine) -> TestClient:
        client = TestClient(TestServer(create_app(engine)))
        await client.start_server()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.close()


@pytest.fixture()
def offline_engine(basic_config, store, fake_strategy):
    """Engine over an in-memory store whose pages all render as ``HOME``."""
    return Engine(
        basic_config,
        store_factory=lambda cfg: store,
        fetcher_factory=lambda cfg: PageFetcher(cfg, fallback=fake_strategy(html=HOME)),
    )


# --------------------------------------------------------------------------- #
#                                 /api/search                                 #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
@pytest.mark.parametrize("path", ["/api/search", "/api/search?q=", "/api/search?q=%20%20"])
async def test_search_requires_query(client_for, basic_config, path):
    client = await client_for(Engine(basic_config))
    resp = await client.get(path)
    assert resp.status == 400
    assert (await resp.json())["error"] == "Query parameter is required"


@pytest.mark.asyncio()
async def test_search_on_empty_index(client_for, basic_config):
    client = await client_for(Engine(basic_config))
    resp = await client.get("/api/search", params={"q": "oil"})
    assert resp.status == 404
    assert "error" in await resp.json()


@pytest.mark.asyncio()
@pytest.mark.parametrize("limit", ["abc", "0", "-3"])
async def test_search_bad_limit(client_for, basic_config, limit):
    client = await client_for(Engine(basic_config))
    resp = await client.get("/api/search", params={"q": "oil", "limit": limit})
    assert resp.status == 400


@pytest.mark.asyncio()
async def test_search_returns_ranked_hits(client_for, basic_config, make_document):
    engine = Engine(basic_config)
    engine.index([
        make_document("https://example.com/oil", title="Engine oil"),
        make_document("https://example.com/grease", title="Grease", content="engine parts"),
        make_document("https://example.com/about", title="About"),
    ])
    client = await client_for(engine)

    resp = await client.get("/api/search", params={"q": "engine"})
    assert resp.status == 200
    hits = await resp.json()
    assert [h["url"] for h in hits] == ["https://example.com/oil", "https://example.com/grease"]

    resp = await client.get("/api/search", params={"query": "engine", "limit": "1"})
    assert len(await resp.json()) == 1


# --------------------------------------------------------------------------- #
#                                  /api/crawl                                 #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_crawl_then_search(client_for, offline_engine):
    client = await client_for(offline_engine)

    resp = await client.post("/api/crawl")
    assert resp.status == 200
    body = await resp.json()
    assert body["message"] == "Crawl complete"
    assert body["crawledUrls"] == ["https://example.com"]
    assert body["pagesCrawled"] == 1
    assert body["indexedDocuments"] == 1
    assert body["crawlId"]

    resp = await client.get("/api/search", params={"q": "lubricants"})
    assert [h["url"] for h in await resp.json()] == ["https://example.com"]


@pytest.mark.asyncio()
async def test_second_crawl_follows_discovered_links(client_for, offline_engine):
    client = await client_for(offline_engine)
    await client.post("/api/crawl")

    body = await (await client.post("/api/crawl")).json()
    assert body["crawledUrls"] == ["https://example.com/about"]
    assert body["skippedUrls"] == ["https://example.com"]
    assert body["indexedDocuments"] == 2


@pytest.mark.asyncio()
async def test_crawl_with_nothing_to_do(client_for, basic_config):
    client = await client_for(NoWorkEngine(basic_config))
    resp = await client.post("/api/crawl")
    assert resp.status == 400
    assert (await resp.json())["error"] == "No URLs to crawl"


@pytest.mark.asyncio()
async def test_crawl_store_unavailable(client_for, basic_config, fake_strategy):
    engine = Engine(
        basic_config,
        store_factory=lambda cfg: DownStore(),
        fetcher_factory=lambda cfg: PageFetcher(cfg, fallback=fake_strategy()),
    )
    client = await client_for(engine)
    resp = await client.post("/api/crawl")
    assert resp.status == 500
    body = await resp.json()
    assert body["error"] == "Failed to crawl"
    assert "6379" in body["details"]
    assert not basic_config.snapshot_path.exists()


@pytest.mark.asyncio()
async def test_search_served_while_crawl_indexes(client_for, basic_config, store, fake_strategy, make_document):
    Engine(basic_config).index([make_document("https://example.com/oil", title="Engine oil")])
    engine = SlowIndexEngine(
        basic_config,
        store_factory=lambda cfg: store,
        fetcher_factory=lambda cfg: PageFetcher(cfg, fallback=fake_strategy(html=HOME)),
    )
    client = await client_for(engine)

    async def _crawl():
        return await client.post("/api/crawl")

    crawl = asyncio.create_task(_crawl())
    await asyncio.sleep(0.2)

    resp = await client.get("/api/search", params={"q": "oil"})
    assert resp.status == 200
    assert [h["url"] for h in await resp.json()] == ["https://example.com/oil"]
    assert not crawl.done()

    resp = await crawl
    assert resp.status == 200
    assert (await resp.json())["indexedDocuments"] == 2
