"""Authorization resolution for containers and blobs.

A target is either a container directory or a blob file inside one. The
authoritative descriptor for a blob is its own ``<blob>.auth`` sidecar when
present, otherwise the ``.container.auth`` file at the container root. With
no descriptor at all only admins are allowed. Descriptors that exist but do
not parse are treated the same way, and a warning is logged.

Read is granted by, in order: public access, membership in UsersAllowed,
any role in RolesAllowed, or being the owner. Write is owner-or-admin only.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from miniblob.exceptions import DescriptorCorruptError
from miniblob.logger import Logger, create_logger

from .backends import DescriptorStore, FileDescriptorStore
from .descriptor import AccessDescriptor
from .identity import CallerIdentity, is_admin

CONTAINER_DESCRIPTOR_NAME = ".container.auth"
BLOB_DESCRIPTOR_SUFFIX = ".auth"


def container_descriptor_path(container_dir: Path) -> Path:
    return container_dir / CONTAINER_DESCRIPTOR_NAME


def blob_descriptor_path(blob_file: Path) -> Path:
    return blob_file.with_name(blob_file.name + BLOB_DESCRIPTOR_SUFFIX)


@dataclass(frozen=True)
class AccessTarget:
    """What an authorization check is about.

    Attributes:
        container_dir: Physical container root directory
        blob_file: Physical blob content path, or None for the container itself
    """

    container_dir: Path
    blob_file: Optional[Path] = None

    @classmethod
    def for_container(cls, container_dir: Path) -> "AccessTarget":
        return cls(container_dir=container_dir)

    @classmethod
    def for_blob(cls, container_dir: Path, blob_file: Path) -> "AccessTarget":
        return cls(container_dir=container_dir, blob_file=blob_file)

    @property
    def container_descriptor(self) -> Path:
        return container_descriptor_path(self.container_dir)

    @property
    def blob_descriptor(self) -> Optional[Path]:
        if self.blob_file is None:
            return None
        return blob_descriptor_path(self.blob_file)

    def candidate_paths(self) -> Iterator[Path]:
        """Descriptor locations in precedence order."""
        if self.blob_descriptor is not None:
            yield self.blob_descriptor
        yield self.container_descriptor


class AuthorizationResolver:
    """Evaluates read and write permission for a caller against a target.

    Nothing is cached; each call re-reads the descriptor from the store.

    Example:
        resolver = AuthorizationResolver(FileDescriptorStore())
        target = AccessTarget.for_blob(root / "c1", root / "c1" / "f.txt")
        if not resolver.can_read(target, caller):
            raise AuthorizationDeniedError("Read denied")
    """

    def __init__(
        self,
        store: Optional[DescriptorStore] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self.logger = logger or create_logger(name="miniblob-auth")
        self.store = store or FileDescriptorStore(logger=self.logger)

    def resolve(self, target: AccessTarget) -> Optional[AccessDescriptor]:
        """Return the authoritative descriptor for target.

        Returns None when no descriptor exists or when the authoritative one
        is unreadable; both mean admin-only.
        """
        for path in target.candidate_paths():
            if not self.store.exists(path):
                continue
            try:
                descriptor = self.store.load(path)
            except DescriptorCorruptError as e:
                self.logger.warning(
                    "Access descriptor unreadable, falling back to admin-only",
                    path=str(path),
                    error=e.message,
                )
                return None
            if descriptor is not None:
                return descriptor
        return None

    def can_read(self, target: AccessTarget, caller: CallerIdentity) -> bool:
        descriptor = self.resolve(target)
        if descriptor is None:
            return is_admin(caller)

        if descriptor.is_public:
            return True
        if any(caller.is_named(user) for user in descriptor.users_allowed):
            return True
        if caller.has_any_role(descriptor.roles_allowed):
            return True
        return caller.is_named(descriptor.owner)

    def can_write(self, target: AccessTarget, caller: CallerIdentity) -> bool:
        if is_admin(caller):
            return True
        descriptor = self.resolve(target)
        if descriptor is None:
            return False
        return caller.is_named(descriptor.owner)

    def container_descriptor_exists(self, container_dir: Path) -> bool:
        return self.store.exists(container_descriptor_path(container_dir))

    def blob_descriptor_exists(self, blob_file: Path) -> bool:
        return self.store.exists(blob_descriptor_path(blob_file))

    def create_blob_descriptor(self, blob_file: Path, descriptor: AccessDescriptor) -> bool:
        """Persist a blob descriptor unless one already exists.

        Returns:
            True if created, False if another writer got there first
        """
        created = self.store.create_exclusive(blob_descriptor_path(blob_file), descriptor)
        if created:
            self.logger.info(
                "Blob access descriptor created",
                blob=str(blob_file),
                owner=descriptor.owner,
                access=descriptor.access.value,
            )
        return created

    def create_container_descriptor(self, container_dir: Path, descriptor: AccessDescriptor) -> bool:
        return self.store.create_exclusive(container_descriptor_path(container_dir), descriptor)

    def load_container_descriptor(self, container_dir: Path) -> Optional[AccessDescriptor]:
        """Load the container descriptor, or None if absent or unreadable."""
        return self.resolve(AccessTarget.for_container(container_dir))
