"""Health check routes for the MiniBlob server."""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse


def create_ping_response(service: str, status: str = "ok") -> Dict[str, Any]:
    """Create a standard ping response.

    Example:
        >>> create_ping_response("miniblob")
        {"status": "ok", "timestamp": "2025-01-01T12:00:00+00:00", "service": "miniblob"}
    """
    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": service,
    }


def create_health_response(
    service: str,
    healthy: bool = True,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    response: Dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "service": service,
    }
    if extra:
        response.update(extra)
    return response


def create_health_router(
    service: str,
    health_check: Optional[Callable[[], bool]] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> APIRouter:
    """Create /ping and /health routes.

    Args:
        service: Service name for responses
        health_check: Optional callable that returns True if healthy
        extra: Static fields added to the health response

    Example:
        app.include_router(create_health_router("miniblob", storage_ready))
    """
    router = APIRouter(tags=["health"])

    @router.get("/ping")
    async def ping() -> JSONResponse:
        return JSONResponse(create_ping_response(service))

    @router.get("/health")
    async def health() -> JSONResponse:
        healthy = True
        if health_check is not None:
            try:
                healthy = health_check()
            except OSError:
                healthy = False
        response = create_health_response(service=service, healthy=healthy, extra=extra)
        return JSONResponse(response, status_code=200 if healthy else 503)

    return router
