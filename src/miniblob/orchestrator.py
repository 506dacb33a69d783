"""Request orchestration for blob PUT, GET and HEAD.

Composes the authorization resolver, the blob layout and the search index:

PUT
    container gate (read) -> container must exist -> decide whether the blob
    needs its own descriptor -> blob write gate when a blob descriptor
    exists -> write content and metadata (or merge metadata only) -> create
    the blob descriptor if required -> best-effort index notification.

GET / HEAD
    container gate (read) -> container must exist -> blob gate (read,
    falling back to the container descriptor) -> not found if content is
    absent -> blob record.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from starlette.concurrency import run_in_threadpool

from miniblob.auth import (
    AccessTarget,
    AuthorizationResolver,
    CallerIdentity,
    derive_descriptor,
    has_access_control_keys,
)
from miniblob.exceptions import AuthorizationDeniedError, BlobNotFoundError, ContainerNotFoundError
from miniblob.index import IndexRecord, NoOpSearchIndex, SearchIndex
from miniblob.logger import Logger, create_logger
from miniblob.storage import BlobMetadata, BlobRecord, StorageBase
from miniblob.storage.blob import Content


@dataclass
class PutResult:
    """Outcome of a full content write."""

    record: BlobRecord
    descriptor_created: bool


class BlobRequestOrchestrator:
    """Authorization-aware blob operations.

    Example:
        orchestrator = BlobRequestOrchestrator(storage, resolver)
        result = await orchestrator.put("c1", "f.txt", caller, b"data", {"roles": "HR"})
        record = await orchestrator.get("c1", "f.txt", caller)
    """

    def __init__(
        self,
        storage: StorageBase,
        resolver: AuthorizationResolver,
        index: Optional[SearchIndex] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self.storage = storage
        self.resolver = resolver
        self.index = index or NoOpSearchIndex()
        self.logger = logger or create_logger(name="miniblob-orchestrator")

    def _targets(self, container: str, blob_path: str) -> tuple[AccessTarget, AccessTarget, Path]:
        container_dir = self.storage.container_dir(container)
        blob_file = self.storage.physical_path(container, blob_path)
        return (
            AccessTarget.for_container(container_dir),
            AccessTarget.for_blob(container_dir, blob_file),
            blob_file,
        )

    async def _require_read(self, target: AccessTarget, caller: CallerIdentity, scope: str) -> None:
        if not await run_in_threadpool(self.resolver.can_read, target, caller):
            self.logger.info("Read denied", scope=scope, caller=caller.name)
            raise AuthorizationDeniedError(f"Access to {scope} denied")

    async def _require_container(self, container: str) -> None:
        # Blob writes never create container directories
        if not await run_in_threadpool(self.storage.container_exists, container):
            raise ContainerNotFoundError(
                f"Container '{container}' not found", details={"container": container}
            )

    async def _write_gates(
        self,
        container: str,
        blob_path: str,
        caller: CallerIdentity,
        metadata: Mapping[str, str],
    ) -> tuple[Path, bool, bool]:
        """Run the PUT gates shared by content and metadata-only writes.

        Returns:
            (blob content path, whether a blob descriptor must be created,
            whether a blob descriptor already exists)
        """
        container_target, blob_target, blob_file = self._targets(container, blob_path)
        await self._require_read(container_target, caller, "container")
        await self._require_container(container)

        container_has_descriptor = await run_in_threadpool(
            self.resolver.container_descriptor_exists, container_target.container_dir
        )
        needs_descriptor = not container_has_descriptor or has_access_control_keys(metadata)

        blob_has_descriptor = await run_in_threadpool(self.resolver.blob_descriptor_exists, blob_file)
        if blob_has_descriptor:
            if not await run_in_threadpool(self.resolver.can_write, blob_target, caller):
                self.logger.info(
                    "Write denied",
                    container=container,
                    blob_path=blob_path,
                    caller=caller.name,
                )
                raise AuthorizationDeniedError("Write to blob denied")

        return blob_file, needs_descriptor, blob_has_descriptor

    async def put(
        self,
        container: str,
        blob_path: str,
        caller: CallerIdentity,
        content: Content,
        metadata: Mapping[str, str],
    ) -> PutResult:
        """Write blob content and metadata.

        The content stream is only consumed after every gate has passed.

        Raises:
            AuthorizationDeniedError: If the container or blob gate denies
            ContainerNotFoundError: If the container was never created
            InvalidPathError: If the container or blob path is unsafe
            StorageIOError: If the filesystem write fails
        """
        blob_file, needs_descriptor, blob_has_descriptor = await self._write_gates(
            container, blob_path, caller, metadata
        )

        record = await self.storage.save(container, blob_path, content, metadata, caller.name)

        descriptor_created = False
        if needs_descriptor and not blob_has_descriptor:
            descriptor = derive_descriptor(caller.name, metadata)
            descriptor_created = await run_in_threadpool(
                self.resolver.create_blob_descriptor, blob_file, descriptor
            )

        await self._notify_index(record, caller)
        return PutResult(record=record, descriptor_created=descriptor_created)

    async def put_metadata(
        self,
        container: str,
        blob_path: str,
        caller: CallerIdentity,
        metadata: Mapping[str, str],
    ) -> BlobMetadata:
        """Merge metadata into an existing blob without touching content.

        Never creates a descriptor.

        Raises:
            AuthorizationDeniedError: If the container or blob gate denies
            ContainerNotFoundError: If the container was never created
            BlobNotFoundError: If the blob does not exist
        """
        await self._write_gates(container, blob_path, caller, metadata)
        return await self.storage.update_metadata(container, blob_path, metadata)

    async def get(self, container: str, blob_path: str, caller: CallerIdentity) -> BlobRecord:
        """Authorize a read and return the blob record.

        Raises:
            AuthorizationDeniedError: If the container or blob gate denies
            ContainerNotFoundError: If the container does not exist
            BlobNotFoundError: If the content does not exist
        """
        container_target, blob_target, _ = self._targets(container, blob_path)
        await self._require_read(container_target, caller, "container")
        await self._require_container(container)
        await self._require_read(blob_target, caller, "blob")

        record = await self.storage.get(container, blob_path)
        if record is None:
            raise BlobNotFoundError(
                f"Blob '{container}/{blob_path}' not found",
                details={"container": container, "blob_path": blob_path},
            )
        return record

    async def head(self, container: str, blob_path: str, caller: CallerIdentity) -> BlobRecord:
        return await self.get(container, blob_path, caller)

    async def _notify_index(self, record: BlobRecord, caller: CallerIdentity) -> None:
        try:
            await self.index.add_or_update(
                IndexRecord(
                    container=record.container,
                    blob_path=record.blob_path,
                    file_name=record.file_name,
                    created_utc=record.last_modified,
                    created_by=caller.name,
                    size=record.size,
                )
            )
        except Exception as e:
            self.logger.warning(
                "Indexing failed",
                container=record.container,
                blob_path=record.blob_path,
                error=str(e),
            )
