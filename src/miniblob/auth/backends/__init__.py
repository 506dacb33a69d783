"""Storage backends for access descriptors.

- FileDescriptorStore - JSON sidecar files (production)
- MemoryDescriptorStore - dict storage for tests

Usage:
    from miniblob.auth.backends import DescriptorStore, FileDescriptorStore

    store: DescriptorStore = FileDescriptorStore()
"""

from .base import DescriptorCorruptError, DescriptorStore
from .file import FileDescriptorStore
from .memory import MemoryDescriptorStore

__all__ = [
    "DescriptorStore",
    "DescriptorCorruptError",
    "FileDescriptorStore",
    "MemoryDescriptorStore",
]
