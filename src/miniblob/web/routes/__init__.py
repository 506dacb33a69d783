"""HTTP routers. Fixed-path routers must be included before the blob router."""

from .blobs import router as blobs_router
from .containers import router as containers_router
from .search import router as search_router

__all__ = ["blobs_router", "containers_router", "search_router"]
