"""Blob repository for content storage

Handles raw content separately from metadata. Writes go to a temporary file
in the destination directory and are published with an atomic rename once
fully written and closed, so readers never observe partial content.
"""

from __future__ import annotations

import os
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from stat import S_ISREG
from typing import AsyncIterable, AsyncIterator, Optional, Union

import aiofiles
import aiofiles.os

from miniblob.exceptions import StorageIOError
from miniblob.logger import Logger, create_logger

from .metadata import BlobMetadata
from .paths import TEMP_PREFIX

DEFAULT_CHUNK_SIZE = 64 * 1024

Content = Union[bytes, AsyncIterable[bytes]]


def compute_etag(size: int, mtime_ns: int) -> str:
    """Fixed-width fingerprint of (size, last-write ticks).

    16 hex digits of size followed by 16 hex digits of the modification time
    in 100 ns ticks. Cheap and non-cryptographic: fine for HTTP caching, not
    for integrity checks.
    """
    return f"{size:016x}{(mtime_ns // 100):016x}"


async def _iter_content(content: Content) -> AsyncIterator[bytes]:
    if isinstance(content, (bytes, bytearray)):
        yield bytes(content)
        return
    async for chunk in content:
        yield chunk


@dataclass
class BlobRecord:
    """A blob as seen at read time.

    Attributes:
        container: Container name
        blob_path: Slash-delimited path inside the container
        path: Physical content location
        size: Byte size
        last_modified: Last write time (UTC)
        etag: Unquoted ETag value
        metadata: Sidecar metadata
    """

    container: str
    blob_path: str
    path: Path
    size: int
    last_modified: datetime
    etag: str
    metadata: BlobMetadata = field(default_factory=BlobMetadata)

    @property
    def file_name(self) -> str:
        return self.path.name

    async def iter_content(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Stream content; the file handle is released on every exit path."""
        async with aiofiles.open(self.path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk

    async def read_all(self) -> bytes:
        async with aiofiles.open(self.path, "rb") as f:
            return await f.read()


class BlobRepository(ABC):
    """Abstract base class for content storage"""

    @abstractmethod
    async def write(self, blob_file: Path, content: Content) -> int:
        """Write content and return the number of bytes written"""

    @abstractmethod
    def stat(self, blob_file: Path) -> Optional[os.stat_result]:
        """Stat the content file, or None if it does not exist"""


class FileBlobRepository(BlobRepository):
    """File-based content storage with atomic publish"""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or create_logger(name="miniblob-storage")

    async def write(self, blob_file: Path, content: Content) -> int:
        tmp_path = blob_file.with_name(f"{TEMP_PREFIX}{secrets.token_hex(8)}")
        size = 0
        try:
            await aiofiles.os.makedirs(blob_file.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "xb") as f:
                async for chunk in _iter_content(content):
                    if chunk:
                        await f.write(chunk)
                        size += len(chunk)
            await aiofiles.os.replace(tmp_path, blob_file)
        except OSError as e:
            self._discard(tmp_path)
            self.logger.error("Failed to write blob content", path=str(blob_file), error=str(e))
            raise StorageIOError(
                "Failed to write blob content", details={"path": str(blob_file)}
            ) from e
        except BaseException:
            # Body stream errors and cancellation must not leave temp files behind
            self._discard(tmp_path)
            raise

        self.logger.debug("Blob content written", path=str(blob_file), size=size)
        return size

    def stat(self, blob_file: Path) -> Optional[os.stat_result]:
        try:
            st = blob_file.stat()
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            raise StorageIOError(
                "Failed to stat blob content", details={"path": str(blob_file)}
            ) from e
        if not S_ISREG(st.st_mode):
            return None
        return st

    def _discard(self, tmp_path: Path) -> None:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.warning("Failed to remove temporary file", path=str(tmp_path), error=str(e))


def record_from_stat(
    container: str,
    blob_path: str,
    blob_file: Path,
    st: os.stat_result,
    metadata: Optional[BlobMetadata] = None,
) -> BlobRecord:
    return BlobRecord(
        container=container,
        blob_path=blob_path,
        path=blob_file,
        size=st.st_size,
        last_modified=datetime.fromtimestamp(st.st_mtime_ns / 1e9, tz=timezone.utc),
        etag=compute_etag(st.st_size, st.st_mtime_ns),
        metadata=metadata if metadata is not None else BlobMetadata(),
    )
