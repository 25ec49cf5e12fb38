"""Field layout of the full-text index and its whoosh schema."""
from __future__ import annotations

from typing import Dict, Final, Tuple

from whoosh.analysis import StandardAnalyzer
from whoosh.fields import ID, NUMERIC, STORED, TEXT, Schema

#: searchable fields, in snapshot order
INDEX_FIELDS: Final[Tuple[str, ...]] = ("title", "content", "description", "links")
#: fields returned with every hit
STORE_FIELDS: Final[Tuple[str, ...]] = ("title", "description", "url", "links")

FIELD_BOOSTS: Final[Dict[str, float]] = {
    "title": 2.0,
    "description": 1.5,
    "content": 1.0,
    "links": 1.0,
}

#: fuzzy tolerance as a fraction of the query term length
FUZZY_FRACTION: Final[float] = 0.3

ANALYZER = StandardAnalyzer()


def build_schema() -> Schema:
    """Every field is stored so the whole document can be snapshotted back out.

    Field boosts are applied at query time, see :mod:`site_indexer.search.query`.
    """
    return Schema(
        id=ID(stored=True, unique=True),
        url=STORED(),
        title=TEXT(stored=True, analyzer=ANALYZER),
        description=TEXT(stored=True, analyzer=ANALYZER),
        content=TEXT(stored=True, analyzer=ANALYZER),
        links=TEXT(stored=True, analyzer=ANALYZER),
        lastCrawled=NUMERIC(stored=True, bits=64),
    )


def analyze(text: str) -> list[str]:
    """Tokenize query text exactly as field text is tokenized at index time."""
    return [token.text for token in ANALYZER(text)]
