"""Full-text index construction, persistence and querying."""
from site_indexer.search.index_builder import IndexBuilder
from site_indexer.search.query import QueryService
from site_indexer.search.snapshot import IndexSnapshot, load_snapshot, persist_snapshot

__all__ = ["IndexBuilder", "QueryService", "IndexSnapshot", "load_snapshot", "persist_snapshot"]
