"""Base protocol for access descriptor stores.

The resolver reads descriptors through this interface so the sidecar file
layout can be swapped for another backing store without touching the
decision logic. Uses Python's Protocol for structural subtyping.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from miniblob.exceptions import DescriptorCorruptError

from ..descriptor import AccessDescriptor


@runtime_checkable
class DescriptorStore(Protocol):
    """Protocol for descriptor persistence.

    Descriptors are keyed by the sidecar path they live at
    (``<container>/.container.auth`` or ``<blob>.auth``).

    Example:
        store: DescriptorStore = FileDescriptorStore()
        descriptor = store.load(Path("/data/c1/.container.auth"))
    """

    def exists(self, path: Path) -> bool:
        """Check whether a descriptor is stored at path (parseable or not)."""
        ...

    def load(self, path: Path) -> Optional[AccessDescriptor]:
        """Load the descriptor at path.

        Returns:
            AccessDescriptor if present, None if absent

        Raises:
            DescriptorCorruptError: If present but unparseable
        """
        ...

    def save(self, path: Path, descriptor: AccessDescriptor) -> None:
        """Write (or replace) the descriptor at path."""
        ...

    def create_exclusive(self, path: Path, descriptor: AccessDescriptor) -> bool:
        """Write the descriptor only if nothing exists at path yet.

        Returns:
            True if this call created it, False if one already existed
        """
        ...


__all__ = ["DescriptorStore", "DescriptorCorruptError"]
