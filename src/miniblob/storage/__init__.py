"""Blob storage module

Provides the container/blob filesystem layout with separate content and
metadata repositories.

Usage:
    from miniblob.storage import FileStorage

    storage = FileStorage("/var/miniblob/storage")
    record = await storage.save("c1", "docs/a.txt", b"hello", {}, "alice")
"""

from .base import StorageBase
from .blob import (
    DEFAULT_CHUNK_SIZE,
    BlobRecord,
    BlobRepository,
    FileBlobRepository,
    compute_etag,
)
from .file_storage import FileStorage
from .metadata import (
    META_HEADER_PREFIX,
    METADATA_SUFFIX,
    BlobMetadata,
    MetadataRepository,
    SidecarMetadataRepository,
    metadata_path,
)
from .paths import split_blob_path, validate_container_name

__all__ = [
    "StorageBase",
    "FileStorage",
    "BlobRecord",
    "BlobRepository",
    "FileBlobRepository",
    "BlobMetadata",
    "MetadataRepository",
    "SidecarMetadataRepository",
    "META_HEADER_PREFIX",
    "METADATA_SUFFIX",
    "DEFAULT_CHUNK_SIZE",
    "compute_etag",
    "metadata_path",
    "split_blob_path",
    "validate_container_name",
]
