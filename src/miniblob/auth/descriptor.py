"""Access descriptor data model.

An access descriptor is the persisted authorization record for either a
container (``<container>/.container.auth``) or a single blob
(``<blob>.auth``). Both use the same structure; only the location differs.

Serialized form (UTF-8 JSON)::

    {
        "Owner": "alice",
        "RolesAllowed": ["HR", "Manager"],
        "UsersAllowed": ["alice", "bob"],
        "CreatedUtc": "2024-01-01T12:00:00.000000+00:00",
        "CreatedBy": "alice",
        "Access": "private"
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from miniblob.exceptions import DescriptorCorruptError

from .identity import ADMIN_ROLE

# Metadata keys (x-ms-meta- prefix stripped) that carry access-control intent
ACCESS_KEY = "access"
PUBLIC_KEY = "public"
ROLES_KEY = "roles"
USERS_KEY = "users"
ACCESS_CONTROL_KEYS = frozenset({ACCESS_KEY, PUBLIC_KEY, ROLES_KEY, USERS_KEY})


class AccessLevel(str, Enum):
    PRIVATE = "private"
    PUBLIC = "public"

    @classmethod
    def parse(cls, value: Optional[str]) -> "AccessLevel":
        """Anything other than ``public`` (case-insensitive) is private."""
        if value is not None and value.strip().lower() == cls.PUBLIC.value:
            return cls.PUBLIC
        return cls.PRIVATE


def _dedupe(values: Iterable[str]) -> List[str]:
    """Collapse case-insensitive duplicates, keeping the first spelling."""
    seen = set()
    result = []
    for value in values:
        key = value.casefold()
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result


def parse_list(value: Optional[str]) -> List[str]:
    """Parse a comma-separated header value into a trimmed list without empties."""
    if not value:
        return []
    return _dedupe(item.strip() for item in value.split(",") if item.strip())


@dataclass
class AccessDescriptor:
    """Authorization record for a container or a blob.

    Attributes:
        owner: Identity always authorized for read and write
        users_allowed: Identities granted read
        roles_allowed: Roles granted read
        access: PUBLIC grants read to any authenticated caller
        created_by: Provenance only
        created_utc: Provenance only
    """

    owner: str
    users_allowed: List[str] = field(default_factory=list)
    roles_allowed: List[str] = field(default_factory=list)
    access: AccessLevel = AccessLevel.PRIVATE
    created_by: Optional[str] = None
    created_utc: Optional[datetime] = None

    @property
    def is_public(self) -> bool:
        return self.access is AccessLevel.PUBLIC

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Owner": self.owner,
            "RolesAllowed": list(self.roles_allowed),
            "UsersAllowed": list(self.users_allowed),
            "CreatedUtc": self.created_utc.isoformat() if self.created_utc else None,
            "CreatedBy": self.created_by,
            "Access": self.access.value,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "AccessDescriptor":
        """Build a descriptor from its persisted form.

        Raises:
            DescriptorCorruptError: If the structure is not a valid descriptor
        """
        if not isinstance(data, Mapping):
            raise DescriptorCorruptError("Descriptor is not a JSON object")

        owner = data.get("Owner")
        if not isinstance(owner, str) or not owner:
            raise DescriptorCorruptError("Descriptor has no owner")

        users = data.get("UsersAllowed") or []
        roles = data.get("RolesAllowed") or []
        if not isinstance(users, list) or not all(isinstance(u, str) for u in users):
            raise DescriptorCorruptError("UsersAllowed must be a list of strings")
        if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
            raise DescriptorCorruptError("RolesAllowed must be a list of strings")

        access = data.get("Access")
        if access is not None and not isinstance(access, str):
            raise DescriptorCorruptError("Access must be a string")

        created_utc = None
        raw_created = data.get("CreatedUtc")
        if raw_created:
            try:
                created_utc = datetime.fromisoformat(str(raw_created).replace("Z", "+00:00"))
            except ValueError:
                raise DescriptorCorruptError(
                    "CreatedUtc is not an ISO-8601 timestamp",
                    details={"value": raw_created},
                )

        created_by = data.get("CreatedBy")
        return cls(
            owner=owner,
            users_allowed=list(users),
            roles_allowed=list(roles),
            access=AccessLevel.parse(access),
            created_by=created_by if isinstance(created_by, str) else None,
            created_utc=created_utc,
        )


def has_access_control_keys(metadata: Mapping[str, str]) -> bool:
    """True if metadata carries any key that forces a blob-level descriptor."""
    return any(key.lower() in ACCESS_CONTROL_KEYS for key in metadata.keys())


def _lookup(metadata: Mapping[str, str], key: str) -> Optional[str]:
    for k, v in metadata.items():
        if k.lower() == key:
            return v
    return None


def derive_descriptor(
    caller_name: str,
    metadata: Mapping[str, str],
    now: Optional[datetime] = None,
) -> AccessDescriptor:
    """Derive a blob-level descriptor from upload metadata.

    The caller becomes owner and is always listed in ``users_allowed``; an
    empty role list falls back to the admin role. ``access=public`` (or a
    ``public=true`` flag) grants public read on top of the explicit lists.

    Args:
        caller_name: Identity of the uploading caller
        metadata: Request metadata with the ``x-ms-meta-`` prefix stripped
        now: Creation timestamp (defaults to current UTC time)

    Returns:
        The derived AccessDescriptor
    """
    roles = parse_list(_lookup(metadata, ROLES_KEY))
    users = parse_list(_lookup(metadata, USERS_KEY))

    access = AccessLevel.parse(_lookup(metadata, ACCESS_KEY))
    public_flag = _lookup(metadata, PUBLIC_KEY)
    if public_flag is not None and public_flag.strip().lower() == "true":
        access = AccessLevel.PUBLIC

    users = _dedupe(users + [caller_name])
    if not roles:
        roles = [ADMIN_ROLE]

    return AccessDescriptor(
        owner=caller_name,
        users_allowed=users,
        roles_allowed=roles,
        access=access,
        created_by=caller_name,
        created_utc=now or datetime.now(timezone.utc),
    )
