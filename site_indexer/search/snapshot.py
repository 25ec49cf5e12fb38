# site_indexer/search/snapshot.py
"""
Durable JSON snapshot of the search index.

A snapshot carries the ordered list of indexed field names and the complete
document collection; it is rewritten in full on every successful indexing
run and is the only persisted form of the index.
"""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from site_indexer.crawler.models import Document
from site_indexer.errors import SnapshotError
from site_indexer.logger import get_logger
from site_indexer.search.schema import INDEX_FIELDS, STORE_FIELDS

__all__ = ("IndexSnapshot", "load_snapshot", "read_snapshot_or_empty", "persist_snapshot")

log = get_logger("snapshot")


class IndexSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    fields: List[str]
    store_fields: List[str] = Field(default_factory=lambda: list(STORE_FIELDS), alias="storeFields")
    documents: List[Document]

    @field_validator("fields")
    def _known_fields(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("field list is empty")
        unknown = [f for f in v if f not in INDEX_FIELDS]
        if unknown:
            raise ValueError(f"unknown index fields: {unknown}")
        return v

    @classmethod
    def empty(cls) -> IndexSnapshot:
        return cls(fields=list(INDEX_FIELDS), documents=[])

    def to_json(self, *, pretty: bool = False) -> str:
        return json.dumps(
            self.model_dump(by_alias=True),
            ensure_ascii=False,
            indent=2 if pretty else None,
        )


def load_snapshot(path: Union[str, Path]) -> IndexSnapshot:
    """Read and validate a snapshot; raises on any problem."""
    raw = Path(path).read_text(encoding="utf-8")
    return IndexSnapshot.model_validate(json.loads(raw))


def read_snapshot_or_empty(path: Union[str, Path]) -> IndexSnapshot:
    """Like :func:`load_snapshot` but degrades to an empty snapshot."""
    try:
        return load_snapshot(path)
    except FileNotFoundError:
        log.warning("Snapshot %s not found, using an empty index", path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        log.warning("Snapshot %s unreadable (%s), using an empty index", path, exc)
    except ValidationError as exc:
        log.warning("Snapshot %s is malformed (%d errors), using an empty index", path, exc.error_count())
    return IndexSnapshot.empty()


def persist_snapshot(snapshot: IndexSnapshot, destination: Union[str, Path]) -> Path:
    """
    Fully overwrite *destination* with *snapshot*.

    The data goes to a temporary file in the same directory first and is then
    moved into place, so readers never observe a half-written snapshot.
    """
    output = Path(destination)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{output.name}.", dir=str(output.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(snapshot.to_json())
            os.replace(tmp_name, output)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise SnapshotError(f"cannot write snapshot to {output}: {exc}") from exc
    log.info("Persisted %d documents to %s", len(snapshot.documents), output)
    return output
