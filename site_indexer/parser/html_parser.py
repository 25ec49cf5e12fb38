# === FILE: site_indexer/parser/html_parser.py ===
"""HTML parsing utilities for SiteIndexer.

Turns raw page markup into an indexable
:class:`~site_indexer.crawler.models.Document`:

* title: document <title> text or :data:`UNTITLED` if absent.
* description: ``<meta name="description">`` (or ``og:description``) content or ``""``.
* content: h1–h5 text in document order, followed by the visible body
  text with whitespace collapsed, bounded by ``max_length``.
* links: same-origin, fragment-free, non-asset anchors, both as a plain
  list of URLs (frontier seeding) and as ``"text (href)"`` lines (indexing).

Pages whose structure BeautifulSoup cannot make sense of still produce a
document: when no heading or body text is found, tags are stripped from the
raw markup with a regular expression.
"""
from __future__ import annotations

import html as html_lib
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_indexer.crawler.models import Document, PageData, document_id_for
from site_indexer.utils import (
    is_asset_url,
    is_same_origin,
    normalize_url,
    now_ms,
    origin_of,
    resolve_href,
)

__all__: Sequence[str] = (
    "ParsedPage",
    "UNTITLED",
    "DEFAULT_MAX_LENGTH",
    "parse_html",
    "extract",
)

UNTITLED = "Untitled"
DEFAULT_MAX_LENGTH = 100_000

_HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5")
_INVISIBLE_TAGS = ("script", "style", "noscript", "template", "svg")
_WS_RE = re.compile(r"\s+")
_SCRIPT_RE = re.compile(r"<(script|style|noscript|template)\b.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")


@dataclass(slots=True)
class ParsedPage:
    """Intermediate extraction result, before it becomes a Document."""

    url: str
    title: str
    description: str
    headings: str
    body: str
    links: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def hrefs(self) -> List[str]:
        return [href for _, href in self.links]

    def serialized_links(self) -> str:
        return "\n".join(f"{text} ({href})" if text else href for text, href in self.links)

    def content(self, max_length: int = DEFAULT_MAX_LENGTH) -> str:
        return _truncate(" ".join(p for p in (self.headings, self.body) if p), max_length)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _collapse(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _truncate(text: str, max_length: int) -> str:
    return text if len(text) <= max_length else text[:max_length].rstrip()


def _strip_tags(raw: str) -> str:
    """Regex fallback for markup the parser could not structure."""
    text = _COMMENT_RE.sub(" ", raw)
    text = _SCRIPT_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    return _collapse(html_lib.unescape(text))


def _title(soup: BeautifulSoup) -> str:
    tag = soup.find("title")
    title = _collapse(tag.get_text()) if isinstance(tag, Tag) else ""
    return title or UNTITLED


def _description(soup: BeautifulSoup) -> str:
    for meta in soup.find_all("meta"):
        if not isinstance(meta, Tag):
            continue
        name = str(meta.get("name") or meta.get("property") or "").lower()
        if name in ("description", "og:description"):
            return _collapse(str(meta.get("content") or ""))
    return ""


def _link_pairs(soup: BeautifulSoup, page_url: str) -> List[Tuple[str, str]]:
    origin = origin_of(page_url)
    pairs: List[Tuple[str, str]] = []
    seen: set[str] = set()
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        absolute = resolve_href(href_val, page_url)
        if absolute is None or "#" in absolute:
            continue
        if not is_same_origin(absolute, origin) or is_asset_url(absolute):
            continue
        url = normalize_url(absolute)
        if url in seen:
            continue
        seen.add(url)
        pairs.append((_collapse(tag.get_text(" ")), url))
    return pairs


# ---------------------------------------------------------------------------
# Public functions
# ---------------------------------------------------------------------------


def parse_html(page: Any, max_length: int = DEFAULT_MAX_LENGTH) -> ParsedPage:
    """Parse a :class:`PageData` (or an object with ``url`` / ``content``)."""
    url = str(page.url)
    raw = page.content if isinstance(page.content, str) else page.content.decode("utf-8", "replace")

    soup = BeautifulSoup(raw, "html.parser")
    title = _title(soup)
    description = _description(soup)
    links = _link_pairs(soup, url)

    for element in soup(_INVISIBLE_TAGS):
        element.decompose()

    headings = _collapse(
        " ".join(h.get_text(" ") for h in soup.find_all(_HEADING_TAGS) if isinstance(h, Tag))
    )
    root: Optional[Tag] = soup.body if isinstance(soup.body, Tag) else soup
    body = _truncate(_collapse(root.get_text(" ")), max_length)

    if not headings and not body:
        body = _truncate(_strip_tags(raw), max_length)

    return ParsedPage(
        url=url,
        title=title,
        description=description,
        headings=headings,
        body=body,
        links=links,
    )


def extract(
    url: str,
    html: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    crawled_at: Optional[int] = None,
) -> Tuple[Document, List[str]]:
    """Build the index document for *url* and return it with its outgoing hrefs."""
    parsed = parse_html(PageData(url, html), max_length=max_length)
    document = Document(
        id=document_id_for(url),
        title=parsed.title,
        description=parsed.description,
        content=parsed.content(max_length),
        url=url,
        links=parsed.serialized_links(),
        last_crawled=now_ms() if crawled_at is None else crawled_at,
    )
    return document, parsed.hrefs
