"""Base storage interface

Defines the abstract interface the request orchestrator uses to reach blob
content and metadata laid out as containers of nested paths.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Optional

from .blob import BlobRecord, Content
from .metadata import BlobMetadata


class StorageBase(ABC):
    """Abstract base class for blob layout implementations"""

    @abstractmethod
    def container_dir(self, container: str) -> Path:
        """Physical root directory of a container

        Raises:
            InvalidPathError: If the container name is unsafe
        """

    @abstractmethod
    def physical_path(self, container: str, blob_path: str) -> Path:
        """Deterministic physical content path for a blob

        Raises:
            InvalidPathError: If the container or blob path is unsafe
        """

    @abstractmethod
    def container_exists(self, container: str) -> bool:
        """Check whether the container directory exists"""

    @abstractmethod
    def create_container_dir(self, container: str) -> Path:
        """Create the container directory exclusively

        Raises:
            ContainerExistsError: If the container already exists
        """

    @abstractmethod
    async def save(
        self,
        container: str,
        blob_path: str,
        content: Content,
        metadata: Mapping[str, str],
        created_by: str,
    ) -> BlobRecord:
        """
        Write content and its metadata sidecar

        Args:
            container: Container name
            blob_path: Slash-delimited blob path
            content: Bytes or an async iterable of byte chunks
            metadata: Caller metadata (wins over system fields)
            created_by: Caller identity recorded in the sidecar

        Returns:
            BlobRecord describing what was written

        Raises:
            InvalidPathError: If the path is unsafe
            StorageIOError: If the filesystem write fails
        """

    @abstractmethod
    async def get(self, container: str, blob_path: str) -> Optional[BlobRecord]:
        """Get a blob record, or None if the content does not exist"""

    @abstractmethod
    async def get_metadata(self, container: str, blob_path: str) -> Optional[BlobMetadata]:
        """Get blob metadata, or None if the content does not exist"""

    @abstractmethod
    async def update_metadata(
        self, container: str, blob_path: str, metadata: Mapping[str, str]
    ) -> BlobMetadata:
        """
        Merge metadata into the sidecar without touching content

        Raises:
            BlobNotFoundError: If the content does not exist
        """
