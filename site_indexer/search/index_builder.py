# site_indexer/search/index_builder.py
"""
In-memory full-text index (whoosh ``RamStorage``) keyed by document id.

Documents are upserted: adding a document whose id is already indexed
replaces it, so re-indexing an unchanged site keeps the same document count.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping, Sequence, Union

from pydantic import ValidationError
from whoosh.filedb.filestore import RamStorage
from whoosh.index import Index

from site_indexer.crawler.models import Document
from site_indexer.errors import DocumentShapeError, EmptyIndexError
from site_indexer.logger import get_logger
from site_indexer.search.schema import INDEX_FIELDS, build_schema
from site_indexer.search.snapshot import IndexSnapshot, persist_snapshot

__all__ = ("IndexBuilder",)

log = get_logger("index")

_DocLike = Union[Document, Mapping[str, object]]


class IndexBuilder:
    """Accumulates documents and turns them into an :class:`IndexSnapshot`."""

    def __init__(self, fields: Sequence[str] = INDEX_FIELDS) -> None:
        unknown = [f for f in fields if f not in INDEX_FIELDS]
        if unknown:
            raise ValueError(f"unknown index fields: {unknown}")
        self.fields: List[str] = list(fields)
        self.index: Index = RamStorage().create_index(build_schema())

    @classmethod
    def from_snapshot(cls, snapshot: IndexSnapshot) -> IndexBuilder:
        builder = cls(snapshot.fields)
        builder.add_all(snapshot.documents)
        return builder

    @staticmethod
    def _coerce(doc: _DocLike) -> Document:
        if isinstance(doc, Document):
            return doc
        try:
            return Document.model_validate(doc)
        except ValidationError as exc:
            raise DocumentShapeError(f"document does not match the index fields: {exc}") from exc

    def add_all(self, documents: Iterable[_DocLike]) -> int:
        """Upsert *documents*; returns how many were written."""
        docs = [self._coerce(d) for d in documents]
        if not docs:
            return 0
        writer = self.index.writer()
        try:
            for doc in docs:
                writer.update_document(**doc.dump())
        except Exception:
            writer.cancel()
            raise
        writer.commit()
        log.debug("Indexed %d documents (total %d)", len(docs), self.doc_count())
        return len(docs)

    def doc_count(self) -> int:
        return self.index.doc_count()

    def documents(self) -> List[Document]:
        with self.index.searcher() as searcher:
            stored = list(searcher.all_stored_fields())
        docs = [Document.model_validate(fields) for fields in stored]
        return sorted(docs, key=lambda d: d.url)

    def snapshot(self) -> IndexSnapshot:
        return IndexSnapshot(fields=list(self.fields), documents=self.documents())

    def persist(self, snapshot: IndexSnapshot, destination: Union[str, Path]) -> Path:
        """Write *snapshot* over *destination*; zero documents is a hard failure."""
        if not snapshot.documents:
            raise EmptyIndexError("indexing produced no documents; snapshot not written")
        return persist_snapshot(snapshot, destination)
