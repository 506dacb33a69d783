"""Web layer for MiniBlob.

Provides the FastAPI application factory, routers, CORS configuration,
health routes and request logging middleware.
"""

from miniblob.web.app import create_app
from miniblob.web.cors import CORSConfig, add_cors_middleware, get_cors_origins
from miniblob.web.health import (
    create_health_response,
    create_health_router,
    create_ping_response,
)
from miniblob.web.middleware import RequestLoggingMiddleware

__all__ = [
    "create_app",
    # CORS
    "CORSConfig",
    "add_cors_middleware",
    "get_cors_origins",
    # Middleware
    "RequestLoggingMiddleware",
    # Health checks
    "create_health_router",
    "create_ping_response",
    "create_health_response",
]
