"""SQLite-backed search index.

One row per (container, blob_path), upserted on every write. Blocking sqlite
calls run in the Starlette thread pool so request tasks are never stalled.
"""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from starlette.concurrency import run_in_threadpool

from miniblob.logger import Logger, create_logger

from .base import IndexRecord, SearchResult

MAX_PAGE_SIZE = 500

_SCHEMA = """
CREATE TABLE IF NOT EXISTS blobs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    container TEXT NOT NULL,
    blob_path TEXT NOT NULL,
    file_name TEXT NOT NULL,
    created_by TEXT NOT NULL,
    created_utc TEXT NOT NULL,
    size INTEGER NOT NULL,
    UNIQUE (container, blob_path)
);
CREATE INDEX IF NOT EXISTS ix_blobs_created_utc ON blobs (created_utc);
"""

_UPSERT = """
INSERT INTO blobs (container, blob_path, file_name, created_by, created_utc, size)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT (container, blob_path) DO UPDATE SET
    file_name = excluded.file_name,
    created_by = excluded.created_by,
    created_utc = excluded.created_utc,
    size = excluded.size
"""

_WHERE = """
WHERE file_name LIKE :pattern ESCAPE '\\'
   OR blob_path LIKE :pattern ESCAPE '\\'
   OR created_by LIKE :pattern ESCAPE '\\'
"""


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqliteSearchIndex:
    """Search index stored in a single SQLite file.

    Example:
        index = SqliteSearchIndex("/var/miniblob/miniblob_index.db")
        await index.add_or_update(record)
        result = await index.search("report", page=1, page_size=20)
    """

    def __init__(self, db_path: Union[str, Path], logger: Optional[Logger] = None) -> None:
        self.db_path = Path(db_path)
        self.logger = logger or create_logger(name="miniblob-index")
        self._lock = threading.Lock()

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        with self._lock:
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        self.logger.info("Search index opened", path=str(self.db_path))

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _upsert(self, record: IndexRecord) -> None:
        with self._lock:
            self._conn.execute(
                _UPSERT,
                (
                    record.container,
                    record.blob_path,
                    record.file_name,
                    record.created_by,
                    record.created_utc.isoformat(),
                    record.size,
                ),
            )
            self._conn.commit()

    def _search(self, query: str, page: int, page_size: int) -> SearchResult:
        page = max(page, 1)
        page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
        params = {
            "pattern": _like_pattern(query or ""),
            "limit": page_size,
            "offset": (page - 1) * page_size,
        }
        with self._lock:
            total = self._conn.execute(f"SELECT COUNT(*) FROM blobs {_WHERE}", params).fetchone()[0]
            rows = self._conn.execute(
                "SELECT container, blob_path, file_name, created_utc, created_by, size "
                f"FROM blobs {_WHERE} ORDER BY created_utc DESC, id DESC "
                "LIMIT :limit OFFSET :offset",
                params,
            ).fetchall()

        records: List[IndexRecord] = [
            IndexRecord(
                container=row[0],
                blob_path=row[1],
                file_name=row[2],
                created_utc=datetime.fromisoformat(row[3]),
                created_by=row[4],
                size=row[5],
            )
            for row in rows
        ]
        return SearchResult(total_count=total, page=page, page_size=page_size, records=records)

    async def add_or_update(self, record: IndexRecord) -> None:
        await run_in_threadpool(self._upsert, record)
        self.logger.debug(
            "Blob indexed", container=record.container, blob_path=record.blob_path
        )

    async def search(self, query: str, page: int = 1, page_size: int = 50) -> SearchResult:
        return await run_in_threadpool(self._search, query, page, page_size)
