"""Search index that records nothing."""

from .base import IndexRecord, SearchResult


class NoOpSearchIndex:
    """Zero-effect index used when indexing is disabled."""

    async def add_or_update(self, record: IndexRecord) -> None:
        return None

    async def search(self, query: str, page: int = 1, page_size: int = 50) -> SearchResult:
        return SearchResult(total_count=0, page=page, page_size=page_size, records=[])
