"""FastAPI dependencies resolving components attached to ``app.state``."""

from fastapi import Request

from miniblob.containers import ContainerService
from miniblob.index import SearchIndex
from miniblob.orchestrator import BlobRequestOrchestrator


def get_orchestrator(request: Request) -> BlobRequestOrchestrator:
    return request.app.state.orchestrator


def get_container_service(request: Request) -> ContainerService:
    return request.app.state.container_service


def get_search_index(request: Request) -> SearchIndex:
    return request.app.state.search_index
