"""File-based storage implementation

Lays blobs out under ``<root>/<container>/<blob path>``, with the metadata
sidecar at ``<blob>.prop`` next to the content. Uses separate content and
metadata repositories.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

from miniblob.exceptions import BlobNotFoundError, ContainerExistsError, InvalidPathError, StorageIOError
from miniblob.logger import Logger, create_logger

from .base import StorageBase
from .blob import BlobRecord, BlobRepository, Content, FileBlobRepository, record_from_stat
from .metadata import (
    CREATED_BY_KEY,
    CREATED_UTC_KEY,
    FILE_NAME_KEY,
    BlobMetadata,
    MetadataRepository,
    SidecarMetadataRepository,
)
from .paths import split_blob_path, validate_container_name


class FileStorage(StorageBase):
    """
    Blob layout manager over a single filesystem root

    Example:
        storage = FileStorage("/var/miniblob/storage")
        record = await storage.save("c1", "docs/a.txt", b"hello", {"dept": "HR"}, "alice")
        record = await storage.get("c1", "docs/a.txt")
        async for chunk in record.iter_content():
            ...
    """

    def __init__(
        self,
        root_path: str | Path,
        blob_repo: Optional[BlobRepository] = None,
        metadata_repo: Optional[MetadataRepository] = None,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize file storage with separate repositories

        Args:
            root_path: Storage root holding one directory per container
            blob_repo: Content repository (default: FileBlobRepository)
            metadata_repo: Metadata repository (default: SidecarMetadataRepository)
            logger: Optional logger instance
        """
        self.root_path = Path(root_path)
        self.logger = logger or create_logger(name="miniblob-storage")
        self.blob_repo = blob_repo or FileBlobRepository(logger=self.logger)
        self.metadata_repo = metadata_repo or SidecarMetadataRepository(logger=self.logger)
        self.logger.info("FileStorage initialized", root=str(self.root_path))

    def container_dir(self, container: str) -> Path:
        return self.root_path / validate_container_name(container)

    def physical_path(self, container: str, blob_path: str) -> Path:
        segments = split_blob_path(blob_path)
        return self.container_dir(container).joinpath(*segments)

    def container_exists(self, container: str) -> bool:
        return self.container_dir(container).is_dir()

    def create_container_dir(self, container: str) -> Path:
        path = self.container_dir(container)
        try:
            path.mkdir()
        except FileExistsError:
            raise ContainerExistsError(
                f"Container '{container}' already exists", details={"container": container}
            )
        except OSError as e:
            raise StorageIOError(
                "Failed to create container directory", details={"container": container}
            ) from e
        self.logger.info("Container directory created", container=container)
        return path

    def _check_no_conflicts(self, container: str, blob_file: Path) -> None:
        """Reject paths where an existing file sits on a directory level or vice versa."""
        container_dir = self.container_dir(container)
        if blob_file.is_dir():
            raise InvalidPathError(
                "Blob path refers to a directory", details={"container": container}
            )
        for parent in blob_file.parents:
            if parent == container_dir:
                break
            if parent.is_file():
                raise InvalidPathError(
                    "Blob path passes through an existing blob", details={"container": container}
                )

    async def save(
        self,
        container: str,
        blob_path: str,
        content: Content,
        metadata: Mapping[str, str],
        created_by: str,
    ) -> BlobRecord:
        blob_file = self.physical_path(container, blob_path)
        self._check_no_conflicts(container, blob_file)

        system = BlobMetadata(
            {
                CREATED_BY_KEY: created_by,
                CREATED_UTC_KEY: datetime.now(timezone.utc).isoformat(),
                FILE_NAME_KEY: blob_file.name,
            }
        )
        merged = system.merged(metadata)

        size = await self.blob_repo.write(blob_file, content)
        await self.metadata_repo.save(blob_file, merged)

        st = self.blob_repo.stat(blob_file)
        if st is None:
            raise StorageIOError(
                "Blob content vanished after write", details={"container": container}
            )

        self.logger.info(
            "Blob saved",
            container=container,
            blob_path=blob_path,
            size=size,
            created_by=created_by,
        )
        return record_from_stat(container, blob_path, blob_file, st, merged)

    async def get(self, container: str, blob_path: str) -> Optional[BlobRecord]:
        blob_file = self.physical_path(container, blob_path)
        st = self.blob_repo.stat(blob_file)
        if st is None:
            return None
        metadata = await self.metadata_repo.load(blob_file)
        return record_from_stat(container, blob_path, blob_file, st, metadata)

    async def get_metadata(self, container: str, blob_path: str) -> Optional[BlobMetadata]:
        blob_file = self.physical_path(container, blob_path)
        if self.blob_repo.stat(blob_file) is None:
            return None
        return await self.metadata_repo.load(blob_file)

    async def update_metadata(
        self, container: str, blob_path: str, metadata: Mapping[str, str]
    ) -> BlobMetadata:
        blob_file = self.physical_path(container, blob_path)
        if self.blob_repo.stat(blob_file) is None:
            raise BlobNotFoundError(
                f"Blob '{container}/{blob_path}' not found",
                details={"container": container, "blob_path": blob_path},
            )

        existing = await self.metadata_repo.load(blob_file)
        merged = existing.merged(metadata)
        await self.metadata_repo.save(blob_file, merged)

        self.logger.info(
            "Blob metadata updated",
            container=container,
            blob_path=blob_path,
            keys=sorted(metadata.keys()),
        )
        return merged
