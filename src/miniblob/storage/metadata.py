"""Metadata repository for blob storage

Blob metadata lives in a ``<blob>.prop`` sidecar: a flat UTF-8 JSON object of
string keys to string values. Keys compare case-insensitively but keep the
casing they were first written with so they echo back unchanged.
"""

from __future__ import annotations

import json
import os
import secrets
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Iterator, Mapping, MutableMapping, Optional, Tuple

import aiofiles
import aiofiles.os

from miniblob.exceptions import StorageIOError
from miniblob.logger import Logger, create_logger

from .paths import TEMP_PREFIX

METADATA_SUFFIX = ".prop"
META_HEADER_PREFIX = "x-ms-meta-"

# System fields written on every save
CREATED_BY_KEY = "createdBy"
CREATED_UTC_KEY = "createdUtc"
FILE_NAME_KEY = "fileName"


class BlobMetadata(MutableMapping[str, str]):
    """Case-insensitive string mapping that preserves original key casing.

    Example:
        meta = BlobMetadata({"Department": "HR"})
        meta["department"]        # "HR"
        list(meta)                # ["Department"]
        meta["DEPARTMENT"] = "IT"
        list(meta)                # ["Department"]
    """

    def __init__(self, data: Optional[Mapping[str, str] | Iterable[Tuple[str, str]]] = None):
        self._store: Dict[str, Tuple[str, str]] = {}
        if data is not None:
            self.update(data)

    def __setitem__(self, key: str, value: str) -> None:
        folded = key.casefold()
        existing = self._store.get(folded)
        original = existing[0] if existing is not None else key
        self._store[folded] = (original, str(value))

    def __getitem__(self, key: str) -> str:
        return self._store[key.casefold()][1]

    def __delitem__(self, key: str) -> None:
        del self._store[key.casefold()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"BlobMetadata({dict(self.items())!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        other_meta = other if isinstance(other, BlobMetadata) else BlobMetadata(other)
        return {k: v[1] for k, v in self._store.items()} == {
            k: v[1] for k, v in other_meta._store.items()
        }

    def copy(self) -> "BlobMetadata":
        return BlobMetadata(self.items())

    def merged(self, overrides: Mapping[str, str]) -> "BlobMetadata":
        """Return a copy with overrides applied; override keys win."""
        result = self.copy()
        for key, value in overrides.items():
            # Re-insert so the caller's casing replaces the stored one
            result.pop(key, None)
            result[key] = value
        return result

    def to_dict(self) -> Dict[str, str]:
        return dict(self.items())

    @classmethod
    def from_headers(cls, headers: Iterable[Tuple[str, str]]) -> "BlobMetadata":
        """Collect ``x-ms-meta-*`` headers with the prefix stripped.

        Repeated headers are joined with ",".

        Args:
            headers: (name, value) pairs, e.g. ``request.headers.items()``
        """
        meta = cls()
        for name, value in headers:
            if not name.lower().startswith(META_HEADER_PREFIX):
                continue
            key = name[len(META_HEADER_PREFIX):]
            if not key:
                continue
            if key in meta:
                meta[key] = f"{meta[key]},{value}"
            else:
                meta[key] = value
        return meta

    def to_headers(self) -> Dict[str, str]:
        return {f"{META_HEADER_PREFIX}{key}": value for key, value in self.items()}


def metadata_path(blob_file: Path) -> Path:
    return blob_file.with_name(blob_file.name + METADATA_SUFFIX)


class MetadataRepository(ABC):
    """Abstract base class for metadata storage"""

    @abstractmethod
    async def load(self, blob_file: Path) -> BlobMetadata:
        """Load metadata for a blob (empty if missing or unreadable)"""

    @abstractmethod
    async def save(self, blob_file: Path, metadata: Mapping[str, str]) -> None:
        """Replace metadata for a blob"""


class SidecarMetadataRepository(MetadataRepository):
    """JSON ``.prop`` sidecar metadata repository"""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or create_logger(name="miniblob-storage")

    async def load(self, blob_file: Path) -> BlobMetadata:
        path = metadata_path(blob_file)
        try:
            async with aiofiles.open(path, "rb") as f:
                raw = await f.read()
        except FileNotFoundError:
            return BlobMetadata()
        except OSError as e:
            self.logger.warning("Metadata sidecar unreadable", path=str(path), error=str(e))
            return BlobMetadata()

        try:
            data = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self.logger.warning("Metadata sidecar is not valid JSON", path=str(path), error=str(e))
            return BlobMetadata()

        if not isinstance(data, dict):
            self.logger.warning("Metadata sidecar is not a JSON object", path=str(path))
            return BlobMetadata()

        return BlobMetadata(
            (str(k), v if isinstance(v, str) else json.dumps(v)) for k, v in data.items()
        )

    async def save(self, blob_file: Path, metadata: Mapping[str, str]) -> None:
        path = metadata_path(blob_file)
        tmp_path = path.with_name(f"{TEMP_PREFIX}{secrets.token_hex(8)}{METADATA_SUFFIX}")
        payload = json.dumps(dict(metadata.items()), indent=2)
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            self.logger.error("Failed to write metadata sidecar", path=str(path), error=str(e))
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageIOError(
                "Failed to write blob metadata", details={"path": str(path)}
            ) from e
