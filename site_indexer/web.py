# File: site_indexer/web.py
"""site_indexer.web: HTTP-триггеры обхода и поиска (aiohttp).

Routes
------
* ``POST /api/crawl``  – crawl one batch, answer with the crawl summary.
* ``GET  /api/search?q=...[&limit=N]`` – ranked hits.
"""
from __future__ import annotations

import asyncio
from typing import Optional

from aiohttp import web

from site_indexer.engine import Engine
from site_indexer.errors import (
    EmptyFrontierError,
    IndexEmptyError,
    InvalidQueryError,
    SearchError,
    SiteIndexerError,
)
from site_indexer.logger import logger

__all__ = ["ENGINE_KEY", "create_app", "crawl_handler", "search_handler"]

ENGINE_KEY = web.AppKey("engine", Engine)


def _error(status: int, error: str, details: Optional[str] = None) -> web.Response:
    payload = {"error": error}
    if details:
        payload["details"] = details
    return web.json_response(payload, status=status)


async def crawl_handler(request: web.Request) -> web.Response:
    engine = request.app[ENGINE_KEY]
    try:
        summary = await engine.crawl()
    except EmptyFrontierError as exc:
        return _error(400, str(exc))
    except SiteIndexerError as exc:
        logger.error("Crawl error: %s", exc)
        return _error(500, "Failed to crawl", str(exc))
    except Exception as exc:
        logger.exception("Unexpected crawl error")
        return _error(500, "Failed to crawl", str(exc))
    return web.json_response({"message": "Crawl complete", **summary.dump()})


async def search_handler(request: web.Request) -> web.Response:
    engine = request.app[ENGINE_KEY]
    query = request.query.get("q", request.query.get("query"))

    limit: Optional[int] = None
    raw_limit = request.query.get("limit")
    if raw_limit:
        try:
            limit = int(raw_limit)
        except ValueError:
            return _error(400, "limit must be an integer")
        if limit < 1:
            return _error(400, "limit must be positive")

    try:
        hits = await asyncio.to_thread(engine.search, query, limit)
    except InvalidQueryError as exc:
        return _error(400, str(exc))
    except IndexEmptyError as exc:
        return _error(404, str(exc))
    except SearchError as exc:
        return _error(500, "Search failed", str(exc))
    except Exception as exc:
        logger.exception("Unexpected search error")
        return _error(500, "Search failed", str(exc))
    return web.json_response(hits)


def create_app(engine: Engine) -> web.Application:
    app = web.Application()
    app[ENGINE_KEY] = engine
    app.router.add_post("/api/crawl", crawl_handler)
    app.router.add_get("/api/search", search_handler)
    return app
