"""MiniBlob - hierarchical blob store with file-resident access control.

Containers hold nested blob paths on a single filesystem root. Each container
and, optionally, each blob carries a JSON access descriptor sidecar that
decides who may read and write.

Modules:
    auth: Access descriptors, authorization resolver, bearer tokens
    storage: Container/blob layout with metadata sidecars
    index: Optional search index sink
    config: Environment-driven settings
    logger: Structured logging
    exceptions: Error taxonomy with HTTP status codes
    web: FastAPI application factory
"""

__version__ = "1.0.0"

from miniblob.exceptions import MiniBlobError

__all__ = [
    "__version__",
    "MiniBlobError",
]
