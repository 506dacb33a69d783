"""Base protocol for search index sinks.

The orchestrator notifies the index after every successful write. Sinks are
best-effort: their failures are logged by the caller and never change a
response.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Protocol, runtime_checkable


@dataclass(frozen=True)
class IndexRecord:
    """One indexed blob."""

    container: str
    blob_path: str
    file_name: str
    created_utc: datetime
    created_by: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_utc"] = self.created_utc.isoformat()
        return data


@dataclass
class SearchResult:
    """A page of search results.

    Attributes:
        total_count: Matches across all pages
        page: 1-based page number
        page_size: Maximum records per page
        records: Matches on this page, newest first
    """

    total_count: int
    page: int
    page_size: int
    records: List[IndexRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_count": self.total_count,
            "page": self.page,
            "page_size": self.page_size,
            "records": [r.to_dict() for r in self.records],
        }


@runtime_checkable
class SearchIndex(Protocol):
    """Protocol for search index sinks."""

    async def add_or_update(self, record: IndexRecord) -> None:
        """Insert or replace the record for (container, blob_path)."""
        ...

    async def search(self, query: str, page: int = 1, page_size: int = 50) -> SearchResult:
        """Substring search over file name, blob path and author."""
        ...
