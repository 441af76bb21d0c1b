"""Name index interfaces and the bundled SQLite FTS5 implementation."""

from gazetteer.index.interfaces import IndexHit, IndexSession, IndexSessionProviderInterface, SearchHits
from gazetteer.index.sqlite import SQLiteIndexSession, SQLiteNameIndex

__all__ = [
    "IndexHit",
    "IndexSession",
    "IndexSessionProviderInterface",
    "SQLiteIndexSession",
    "SQLiteNameIndex",
    "SearchHits",
]
