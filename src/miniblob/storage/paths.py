"""Container name and blob path validation.

Blob paths are slash-delimited and map one segment per directory level under
the container root. Segments that could escape the container or collide with
sidecar files are rejected before any filesystem access.
"""

from typing import List

from miniblob.exceptions import InvalidPathError

SIDECAR_SUFFIXES = (".auth", ".prop")
TEMP_PREFIX = ".miniblob-tmp-"

# Container names that would be shadowed by fixed routes
RESERVED_CONTAINER_NAMES = frozenset({"containers"})


def _check_segment(segment: str, what: str) -> None:
    if segment in ("", ".", ".."):
        raise InvalidPathError(f"{what} contains an empty or relative segment")
    if "\\" in segment or "\x00" in segment:
        raise InvalidPathError(f"{what} contains an illegal character")


def validate_container_name(container: str) -> str:
    """Validate a container name and return it unchanged.

    Raises:
        InvalidPathError: If the name is not a single safe segment
    """
    if "/" in container:
        raise InvalidPathError("Container name must be a single path segment")
    _check_segment(container, "Container name")
    if container.startswith((".", "_")) or container.lower() in RESERVED_CONTAINER_NAMES:
        raise InvalidPathError(
            "Container name is reserved", details={"container": container}
        )
    return container


def split_blob_path(blob_path: str) -> List[str]:
    """Split a blob path into validated segments.

    Raises:
        InvalidPathError: If any segment is empty, relative, contains a
            backslash or NUL, or collides with the sidecar namespace
    """
    if not blob_path:
        raise InvalidPathError("Blob path is empty")
    segments = blob_path.split("/")
    for segment in segments:
        _check_segment(segment, "Blob path")
        if segment.lower().endswith(SIDECAR_SUFFIXES) or segment.startswith(TEMP_PREFIX):
            raise InvalidPathError(
                "Blob path collides with a reserved sidecar name",
                details={"segment": segment},
            )
    return segments
