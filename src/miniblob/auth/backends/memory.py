"""In-memory descriptor store for testing.

Keeps descriptors in a dict keyed by sidecar path. Raw values can be
injected with ``put_raw`` to simulate corrupt sidecars.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from ..descriptor import AccessDescriptor


class MemoryDescriptorStore:
    """Dict-backed descriptor storage.

    Example:
        store = MemoryDescriptorStore()
        store.save(Path("/data/c1/.container.auth"), descriptor)
        store.load(Path("/data/c1/.container.auth"))
    """

    def __init__(self) -> None:
        self._store: Dict[Path, Any] = {}

    def exists(self, path: Path) -> bool:
        return Path(path) in self._store

    def load(self, path: Path) -> Optional[AccessDescriptor]:
        raw = self._store.get(Path(path))
        if raw is None:
            return None
        return AccessDescriptor.from_dict(raw)

    def save(self, path: Path, descriptor: AccessDescriptor) -> None:
        self._store[Path(path)] = descriptor.to_dict()

    def create_exclusive(self, path: Path, descriptor: AccessDescriptor) -> bool:
        if Path(path) in self._store:
            return False
        self.save(path, descriptor)
        return True

    def put_raw(self, path: Path, data: Any) -> None:
        """Store an arbitrary persisted value (may be invalid)."""
        self._store[Path(path)] = data

    def clear(self) -> None:
        """Clear all descriptors. Useful for test cleanup."""
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
