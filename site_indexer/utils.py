# File: site_indexer/utils.py
"""site_indexer.utils: URL helpers shared by the frontier and the content extractor."""

from __future__ import annotations

import time
from collections.abc import Iterable
from pathlib import PurePosixPath
from typing import List, Sequence
from urllib.parse import urldefrag, urljoin, urlparse, urlunparse

from site_indexer.logger import logger

__all__: Sequence[str] = (
    "ASSET_EXTENSIONS",
    "now_ms",
    "origin_of",
    "normalize_url",
    "resolve_href",
    "is_same_origin",
    "is_asset_url",
    "remove_duplicates",
)

#: extensions of binary / static assets that never become frontier entries
ASSET_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".ico", ".bmp", ".tif", ".tiff",
        ".zip", ".rar", ".7z", ".tar", ".gz", ".tgz", ".bz2",
        ".css", ".js", ".mjs", ".map", ".json", ".xml",
        ".mp3", ".mp4", ".avi", ".mov", ".webm", ".wav", ".ogg",
        ".woff", ".woff2", ".ttf", ".eot", ".otf",
        ".exe", ".dmg", ".apk", ".iso",
    }
)

_SKIPPED_SCHEMES = ("mailto:", "javascript:", "tel:", "data:")


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` of *url* in lower case."""
    parsed = urlparse(url)
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


def normalize_url(url: str) -> str:
    """Lower-case scheme and host, drop the fragment and a trailing slash on the root."""
    parsed = urlparse(url)
    path = parsed.path
    if path == "/":
        path = ""
    normalized = urlunparse(
        (parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, "")
    )
    return normalized


def resolve_href(href: str, page_url: str) -> str | None:
    """Resolve *href* against the page URL.

    Returns ``None`` for empty, fragment-only and non-navigational hrefs
    (``mailto:``, ``javascript:``...). The result keeps its fragment so that
    callers can decide what to do with it.
    """
    raw = href.strip()
    if not raw or raw.startswith("#"):
        return None
    if raw.lower().startswith(_SKIPPED_SCHEMES):
        return None
    try:
        return urljoin(page_url, raw)
    except ValueError as exc:
        logger.debug("Unresolvable href %r on %s: %s", raw, page_url, exc)
        return None


def is_same_origin(url: str, origin: str) -> bool:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return False
    return origin_of(url) == origin.lower().rstrip("/")


def is_asset_url(url: str) -> bool:
    """True when the URL path ends with a denylisted binary/static extension."""
    path = urldefrag(url)[0]
    suffix = PurePosixPath(urlparse(path).path).suffix.lower()
    return suffix in ASSET_EXTENSIONS


def remove_duplicates(urls: Iterable[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    items = list(urls)
    unique = list(dict.fromkeys(items))
    removed = len(items) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
