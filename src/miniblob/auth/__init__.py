"""MiniBlob authorization module.

Provides the two-tier, file-resident authorization model:
- AccessDescriptor: persisted authorization record (container or blob)
- AuthorizationResolver: read/write decisions for a caller
- DescriptorStore backends: file sidecars or in-memory
- TokenService: HS256 bearer tokens yielding a CallerIdentity
- FastAPI dependencies: get_caller, require_admin

Usage:
    from miniblob.auth import AccessTarget, AuthorizationResolver, CallerIdentity

    resolver = AuthorizationResolver()
    caller = CallerIdentity(name="alice", roles=("HR",))
    resolver.can_read(AccessTarget.for_container(root / "c1"), caller)
"""

from .backends import (
    DescriptorCorruptError,
    DescriptorStore,
    FileDescriptorStore,
    MemoryDescriptorStore,
)
from .descriptor import (
    ACCESS_CONTROL_KEYS,
    AccessDescriptor,
    AccessLevel,
    derive_descriptor,
    has_access_control_keys,
    parse_list,
)
from .identity import ADMIN_ROLE, CallerIdentity, is_admin
from .middleware import get_caller, get_token_service, require_admin, security
from .resolver import (
    BLOB_DESCRIPTOR_SUFFIX,
    CONTAINER_DESCRIPTOR_NAME,
    AccessTarget,
    AuthorizationResolver,
    blob_descriptor_path,
    container_descriptor_path,
)
from .tokens import TokenService

__all__ = [
    # Identity
    "ADMIN_ROLE",
    "CallerIdentity",
    "is_admin",
    # Descriptors
    "ACCESS_CONTROL_KEYS",
    "AccessDescriptor",
    "AccessLevel",
    "derive_descriptor",
    "has_access_control_keys",
    "parse_list",
    # Stores
    "DescriptorStore",
    "DescriptorCorruptError",
    "FileDescriptorStore",
    "MemoryDescriptorStore",
    # Resolver
    "AccessTarget",
    "AuthorizationResolver",
    "BLOB_DESCRIPTOR_SUFFIX",
    "CONTAINER_DESCRIPTOR_NAME",
    "blob_descriptor_path",
    "container_descriptor_path",
    # Tokens
    "TokenService",
    # FastAPI
    "security",
    "get_caller",
    "get_token_service",
    "require_admin",
]
