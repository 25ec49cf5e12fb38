# site_indexer/search/query.py
"""
Query service: fielded, boosted, fuzzy and prefix search over the snapshot.

Every call rebuilds the in-memory index from the persisted snapshot; no
index state is kept between requests.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from whoosh import query as wq

from site_indexer.errors import IndexEmptyError, InvalidQueryError, SearchError
from site_indexer.logger import get_logger
from site_indexer.search.index_builder import IndexBuilder
from site_indexer.search.schema import FIELD_BOOSTS, FUZZY_FRACTION, analyze
from site_indexer.search.snapshot import read_snapshot_or_empty

__all__ = ("QueryService", "fuzzy_distance", "build_query")

log = get_logger("query")


def fuzzy_distance(term: str, fraction: float = FUZZY_FRACTION) -> int:
    """Maximum edit distance for *term*, rounded half up."""
    return int(len(term) * fraction + 0.5)


def build_query(
    text: str,
    fields: List[str],
    boosts: Mapping[str, float] = FIELD_BOOSTS,
    fuzzy: float = FUZZY_FRACTION,
    prefix: bool = True,
) -> Optional[wq.Query]:
    """OR of (exact | fuzzy | prefix) clauses for every term in every field.

    Returns ``None`` when the analyzer leaves no terms (e.g. only stop words).
    """
    terms = list(dict.fromkeys(analyze(text)))
    if not terms:
        return None

    clauses: List[wq.Query] = []
    for term in terms:
        maxdist = fuzzy_distance(term, fuzzy) if fuzzy > 0 else 0
        for field in fields:
            boost = boosts.get(field, 1.0)
            clauses.append(wq.Term(field, term, boost=boost))
            if maxdist > 0:
                clauses.append(
                    wq.FuzzyTerm(field, term, boost=boost, maxdist=maxdist, prefixlength=0)
                )
            if prefix:
                clauses.append(wq.Prefix(field, term, boost=boost))
    return wq.Or(clauses)


class QueryService:
    """Loads the snapshot and answers one search per call."""

    def __init__(
        self,
        snapshot_path: Union[str, Path],
        boosts: Optional[Mapping[str, float]] = None,
        fuzzy: float = FUZZY_FRACTION,
        prefix: bool = True,
    ) -> None:
        self.snapshot_path = Path(snapshot_path)
        self.boosts = dict(FIELD_BOOSTS if boosts is None else boosts)
        self.fuzzy = fuzzy
        self.prefix = prefix

    def load_index(self) -> IndexBuilder:
        """Fresh index from the snapshot, empty when the snapshot is missing or malformed."""
        snapshot = read_snapshot_or_empty(self.snapshot_path)
        return IndexBuilder.from_snapshot(snapshot)

    def search(self, query: Optional[str], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        if query is None or not isinstance(query, str) or not query.strip():
            raise InvalidQueryError("Query parameter is required")

        index = self.load_index()
        if index.doc_count() == 0:
            raise IndexEmptyError("Search index is empty; run a crawl first")

        try:
            return self._execute(index, query.strip(), limit)
        except Exception as exc:
            log.exception("Search for %r failed", query)
            raise SearchError(f"search failed: {exc}") from exc

    def _execute(self, index: IndexBuilder, text: str, limit: Optional[int]) -> List[Dict[str, Any]]:
        q = build_query(text, index.fields, self.boosts, self.fuzzy, self.prefix)
        if q is None:
            return []
        with index.index.searcher() as searcher:
            results = searcher.search(q, limit=limit)
            hits = [
                {
                    "id": hit["id"],
                    "score": float(hit.score),
                    "title": hit.get("title", ""),
                    "description": hit.get("description", ""),
                    "url": hit.get("url", ""),
                    "links": hit.get("links", ""),
                }
                for hit in results
            ]
        log.info("Query %r matched %d documents", text, len(hits))
        return hits
