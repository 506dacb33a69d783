"""Search index sinks.

- NoOpSearchIndex - indexing disabled
- SqliteSearchIndex - SQLite file, substring search, newest first

Usage:
    from miniblob.index import create_search_index

    index = create_search_index(settings)
"""

from typing import Optional

from miniblob.config import Settings
from miniblob.logger import Logger

from .base import IndexRecord, SearchIndex, SearchResult
from .noop import NoOpSearchIndex
from .sqlite import SqliteSearchIndex


def create_search_index(settings: Settings, logger: Optional[Logger] = None) -> SearchIndex:
    """Select the index sink from settings."""
    if settings.index.enabled:
        return SqliteSearchIndex(settings.index_db_path, logger=logger)
    return NoOpSearchIndex()


__all__ = [
    "IndexRecord",
    "SearchIndex",
    "SearchResult",
    "NoOpSearchIndex",
    "SqliteSearchIndex",
    "create_search_index",
]
