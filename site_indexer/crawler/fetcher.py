# site_indexer/crawler/fetcher.py
"""
Fetcher module: acquires page HTML through a two-stage strategy chain.

1. :class:`BrowserStrategy` renders the page in an isolated headless Chromium
   session (Playwright), retried ``retry_times`` times with a fixed delay.
2. :class:`HttpStrategy` issues a plain GET (aiohttp) with the same header
   profile when the browser stage is exhausted or unusable.

:meth:`PageFetcher.fetch` never raises for per-URL problems; it returns a
:class:`~site_indexer.crawler.models.FetchOutcome`.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Optional, Protocol

from aiohttp import ClientError, ClientSession, ClientTimeout
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from site_indexer.config import IndexerConfig
from site_indexer.crawler.models import FetchOutcome
from site_indexer.errors import BrowserUnavailableError, FetchError
from site_indexer.logger import get_logger

__all__ = ("FetchStrategy", "BrowserStrategy", "HttpStrategy", "PageFetcher")

log = get_logger("fetcher")

_BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]


class FetchStrategy(Protocol):
    name: str

    async def fetch(self, url: str) -> str:
        """Return page HTML or raise :class:`FetchError` / :class:`BrowserUnavailableError`."""
        ...


class BrowserStrategy:
    """Render a page in a fresh headless Chromium per attempt."""

    name = "browser"

    def __init__(self, config: IndexerConfig) -> None:
        self.config = config

    def _launch_options(self) -> Dict[str, object]:
        options: Dict[str, object] = {"headless": True, "args": _BROWSER_ARGS}
        executable = self.config.browser_executable
        if executable:
            if not Path(executable).exists():
                raise BrowserUnavailableError(f"Chromium binary not found at {executable}")
            options["executable_path"] = executable
        return options

    def _context_headers(self) -> Dict[str, str]:
        # the browser negotiates encoding and user agent itself
        return {
            k: v
            for k, v in self.config.headers().items()
            if k not in ("User-Agent", "Accept-Encoding")
        }

    async def fetch(self, url: str) -> str:
        options = self._launch_options()
        timeout_ms = self.config.navigation_timeout * 1000
        async with async_playwright() as pw:
            try:
                browser = await pw.chromium.launch(**options)
            except PlaywrightError as exc:
                raise BrowserUnavailableError(f"browser launch failed: {exc}") from exc
            try:
                context = await browser.new_context(
                    user_agent=self.config.user_agent,
                    extra_http_headers=self._context_headers(),
                )
                page = await context.new_page()
                await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
                return await page.content()
            except PlaywrightError as exc:
                raise FetchError(f"render failed: {exc}") from exc
            finally:
                await browser.close()


class HttpStrategy:
    """Plain GET with the browser's header profile."""

    name = "http"

    def __init__(self, session: ClientSession) -> None:
        self.session = session

    async def fetch(self, url: str) -> str:
        try:
            async with self.session.get(url, allow_redirects=True) as resp:
                if resp.status >= 400:
                    raise FetchError(f"HTTP {resp.status}")
                body = await resp.text(errors="replace")
        except (ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(f"{type(exc).__name__}: {exc}") from exc
        if not body.strip():
            raise FetchError("empty response body")
        return body


class PageFetcher:
    """Retry-then-fallback fetch chain.

    Usable as an async context manager; it then owns the aiohttp session of
    the fallback strategy.
    """

    def __init__(
        self,
        config: IndexerConfig,
        primary: Optional[FetchStrategy] = None,
        fallback: Optional[FetchStrategy] = None,
    ) -> None:
        self.config = config
        self.primary = primary
        if self.primary is None and config.use_browser:
            self.primary = BrowserStrategy(config)
        self.fallback = fallback
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> PageFetcher:
        if self.fallback is None:
            self._session = ClientSession(
                timeout=ClientTimeout(total=self.config.http_timeout),
                headers=self.config.headers(),
                raise_for_status=False,
            )
            self.fallback = HttpStrategy(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def fetch(self, url: str) -> FetchOutcome:
        attempts = 0
        errors = []

        if self.primary is not None:
            max_attempts = self.config.retry_times + 1
            while attempts < max_attempts:
                attempts += 1
                try:
                    html = await self.primary.fetch(url)
                    return FetchOutcome.success(url, html, attempts)
                except BrowserUnavailableError as exc:
                    log.warning("Browser unusable, falling back for %s: %s", url, exc)
                    errors.append(str(exc))
                    break
                except FetchError as exc:
                    errors.append(str(exc))
                    if attempts >= max_attempts:
                        log.warning("%s exhausted %d attempts for %s: %s", self.primary.name, attempts, url, exc)
                        break
                    log.debug("Retry %d/%d for %s: %s", attempts, self.config.retry_times, url, exc)
                    await asyncio.sleep(self.config.retry_delay)

        if self.fallback is None:
            raise RuntimeError("PageFetcher used outside of its context manager")

        attempts += 1
        try:
            html = await self.fallback.fetch(url)
        except FetchError as exc:
            errors.append(str(exc))
            log.error("Fallback %s failed for %s: %s", self.fallback.name, url, exc)
            return FetchOutcome.failure(url, "; ".join(errors), attempts)

        if self.primary is None:
            return FetchOutcome.success(url, html, attempts)
        log.info("Fetched %s via %s fallback", url, self.fallback.name)
        return FetchOutcome.degraded(url, html, attempts)
