"""File-based descriptor store.

Each descriptor is a UTF-8 JSON sidecar next to the resource it protects.
Nothing is cached: every load re-reads the file so a descriptor written by
one request is visible to the next.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from miniblob.exceptions import DescriptorCorruptError, StorageIOError
from miniblob.logger import Logger, create_logger

from ..descriptor import AccessDescriptor


class FileDescriptorStore:
    """JSON sidecar descriptor storage.

    Example:
        store = FileDescriptorStore()
        store.save(Path("/data/c1/.container.auth"), descriptor)
        created = store.create_exclusive(Path("/data/c1/f.txt.auth"), descriptor)
    """

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self.logger = logger or create_logger(name="miniblob-descriptors")

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def load(self, path: Path) -> Optional[AccessDescriptor]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DescriptorCorruptError(
                "Descriptor is not valid JSON",
                details={"path": str(path), "error": str(e)},
            )
        except OSError as e:
            raise DescriptorCorruptError(
                "Descriptor could not be read",
                details={"path": str(path), "error": str(e)},
            )
        return AccessDescriptor.from_dict(data)

    def save(self, path: Path, descriptor: AccessDescriptor) -> None:
        """Replace the descriptor atomically via a temp file in the same directory."""
        payload = json.dumps(descriptor.to_dict(), indent=2)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".auth")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            self.logger.error("Failed to save descriptor", path=str(path), error=str(e))
            raise StorageIOError(
                "Failed to write access descriptor", details={"path": str(path)}
            ) from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
        self.logger.debug("Descriptor saved", path=str(path))

    def create_exclusive(self, path: Path, descriptor: AccessDescriptor) -> bool:
        payload = json.dumps(descriptor.to_dict(), indent=2)
        opened = False
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "x", encoding="utf-8") as f:
                opened = True
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
        except FileExistsError:
            self.logger.info("Descriptor already created by another writer", path=str(path))
            return False
        except OSError as e:
            self.logger.error("Failed to create descriptor", path=str(path), error=str(e))
            if opened and path.exists():
                path.unlink()
            raise StorageIOError(
                "Failed to create access descriptor", details={"path": str(path)}
            ) from e
        self.logger.debug("Descriptor created", path=str(path), owner=descriptor.owner)
        return True
