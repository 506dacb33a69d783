"""Container creation and lookup.

Only admins create containers. Creation makes the container directory and
its ``.container.auth`` descriptor exactly once; an existing container is a
conflict.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from starlette.concurrency import run_in_threadpool

from miniblob.auth import (
    ADMIN_ROLE,
    AccessDescriptor,
    AccessTarget,
    AuthorizationResolver,
    CallerIdentity,
    is_admin,
)
from miniblob.exceptions import (
    AuthorizationDeniedError,
    ContainerExistsError,
    ContainerNotFoundError,
    MiniBlobError,
)
from miniblob.logger import Logger, create_logger
from miniblob.storage import StorageBase


@dataclass
class ContainerInfo:
    container: str
    exists: bool
    descriptor: Optional[AccessDescriptor]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "container": self.container,
            "exists": self.exists,
            "authInfo": self.descriptor.to_dict() if self.descriptor else None,
        }


def _with_admin(roles: Sequence[str]) -> List[str]:
    result = [r.strip() for r in roles if r and r.strip()]
    if not any(r.casefold() == ADMIN_ROLE for r in result):
        result.append(ADMIN_ROLE)
    return result


class ContainerService:
    """Admin-only container creation and permission-checked lookup.

    Example:
        service = ContainerService(storage, resolver)
        descriptor = await service.create("c1", admin, users_allowed=["alice"])
        info = await service.info("c1", alice)
    """

    def __init__(
        self,
        storage: StorageBase,
        resolver: AuthorizationResolver,
        logger: Optional[Logger] = None,
    ) -> None:
        self.storage = storage
        self.resolver = resolver
        self.logger = logger or create_logger(name="miniblob-containers")

    async def create(
        self,
        container: str,
        caller: CallerIdentity,
        users_allowed: Optional[Sequence[str]] = None,
        roles_allowed: Optional[Sequence[str]] = None,
    ) -> AccessDescriptor:
        """Create a container and its descriptor.

        Args:
            container: Container name
            caller: Must hold the admin role
            users_allowed: Readers (default: the caller)
            roles_allowed: Reader roles (default: admin; admin is always added)

        Raises:
            AuthorizationDeniedError: If the caller is not an admin
            ContainerExistsError: If the container already exists
            InvalidPathError: If the container name is unsafe
        """
        if not is_admin(caller):
            raise AuthorizationDeniedError("Admin role required to create containers")

        container_dir = await run_in_threadpool(self.storage.create_container_dir, container)

        descriptor = AccessDescriptor(
            owner=caller.name,
            users_allowed=list(users_allowed) if users_allowed is not None else [caller.name],
            roles_allowed=_with_admin(roles_allowed if roles_allowed is not None else [ADMIN_ROLE]),
            created_by=caller.name,
            created_utc=datetime.now(timezone.utc),
        )

        try:
            created = await run_in_threadpool(
                self.resolver.create_container_descriptor, container_dir, descriptor
            )
        except MiniBlobError:
            self.logger.error("Failed to create container descriptor", container=container)
            await self._discard_container_dir(container, container_dir)
            raise
        if not created:
            raise ContainerExistsError(
                f"Container '{container}' already exists", details={"container": container}
            )

        self.logger.info(
            "Container created",
            container=container,
            created_by=caller.name,
            users_allowed=descriptor.users_allowed,
            roles_allowed=descriptor.roles_allowed,
        )
        return descriptor

    async def _discard_container_dir(self, container: str, container_dir: Path) -> None:
        # rmdir only removes the directory while it is still empty
        try:
            await run_in_threadpool(container_dir.rmdir)
        except OSError as e:
            self.logger.error(
                "Failed to remove container directory",
                container=container,
                path=str(container_dir),
                error=str(e),
            )

    async def info(self, container: str, caller: CallerIdentity) -> ContainerInfo:
        """Describe a container the caller may read.

        Raises:
            ContainerNotFoundError: If the container does not exist
            AuthorizationDeniedError: If the caller may not read the container
        """
        if not self.storage.container_exists(container):
            raise ContainerNotFoundError(
                f"Container '{container}' not found", details={"container": container}
            )

        container_dir = self.storage.container_dir(container)
        target = AccessTarget.for_container(container_dir)
        if not await run_in_threadpool(self.resolver.can_read, target, caller):
            raise AuthorizationDeniedError("Access to container denied")

        descriptor = await run_in_threadpool(self.resolver.load_container_descriptor, container_dir)
        return ContainerInfo(container=container, exists=True, descriptor=descriptor)
