"""FastAPI application factory for MiniBlob.

Wires settings into the storage layout, authorization resolver, search index
and token service, attaches them to ``app.state`` and installs the routers,
CORS, request logging and the JSON error handlers.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from miniblob import __version__
from miniblob.auth import AuthorizationResolver, DescriptorStore, FileDescriptorStore, TokenService
from miniblob.config import Settings
from miniblob.containers import ContainerService
from miniblob.exceptions import MiniBlobError
from miniblob.index import SearchIndex, create_search_index
from miniblob.logger import Logger, create_logger
from miniblob.orchestrator import BlobRequestOrchestrator
from miniblob.storage import FileStorage

from .cors import CORSConfig, add_cors_middleware
from .health import create_health_router
from .middleware import RequestLoggingMiddleware
from .routes import blobs_router, containers_router, search_router

SERVICE_NAME = "miniblob"


def _error_response(exc: MiniBlobError, logger: Logger, request: Request) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            path=request.url.path,
            code=exc.code,
            error=exc.message,
            details=exc.details,
        )
        # Server-side details (physical paths) stay in the log
        body = {"code": exc.code, "message": exc.message, "details": {}}
    else:
        body = exc.to_dict()
    return JSONResponse(status_code=exc.status_code, content=body)


def create_app(
    settings: Settings,
    token_service: Optional[TokenService] = None,
    search_index: Optional[SearchIndex] = None,
    descriptor_store: Optional[DescriptorStore] = None,
    cors_config: Optional[CORSConfig] = None,
    logger: Optional[Logger] = None,
) -> FastAPI:
    """Create the MiniBlob FastAPI application.

    Args:
        settings: Validated application settings
        token_service: Bearer token verifier (default: built from settings.auth)
        search_index: Index sink (default: selected by settings.index)
        descriptor_store: Access descriptor backend (default: sidecar files)
        cors_config: CORS configuration (default: from MINIBLOB_CORS_* env vars)
        logger: Logger shared by the components

    Returns:
        FastAPI application

    Raises:
        ConfigurationError: If the storage root is invalid

    Example:
        settings = Settings.from_env()
        app = create_app(settings)
        uvicorn.run(app, host=settings.server.host, port=settings.server.port)
    """
    settings.validate()
    logger = logger or create_logger(
        name=SERVICE_NAME,
        level=getattr(logging, settings.log.level, logging.INFO),
        json_format=settings.log.json_format,
    )

    storage = FileStorage(settings.storage.root_path, logger=logger)
    resolver = AuthorizationResolver(
        store=descriptor_store or FileDescriptorStore(logger=logger),
        logger=logger,
    )
    index = search_index or create_search_index(settings, logger=logger)
    tokens = token_service or TokenService(
        secret_key=settings.auth.jwt_secret,
        issuer=settings.auth.issuer,
        audience=settings.auth.audience,
        logger=logger,
    )

    app = FastAPI(title="MiniBlob", version=__version__)
    app.state.settings = settings
    app.state.logger = logger
    app.state.storage = storage
    app.state.resolver = resolver
    app.state.search_index = index
    app.state.token_service = tokens
    app.state.orchestrator = BlobRequestOrchestrator(storage, resolver, index, logger=logger)
    app.state.container_service = ContainerService(storage, resolver, logger=logger)

    @app.exception_handler(MiniBlobError)
    async def handle_miniblob_error(request: Request, exc: MiniBlobError) -> JSONResponse:
        return _error_response(exc, logger, request)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        error = MiniBlobError(
            "Internal server error",
            code="INTERNAL_ERROR",
            details={"error_type": type(exc).__name__, "error": str(exc)},
        )
        return _error_response(error, logger, request)

    app.include_router(
        create_health_router(
            SERVICE_NAME,
            health_check=lambda: settings.storage.root_path.is_dir(),
            extra={"version": __version__, "index_enabled": settings.index.enabled},
        )
    )
    app.include_router(search_router)
    app.include_router(containers_router)
    app.include_router(blobs_router)

    app.add_middleware(RequestLoggingMiddleware, logger=logger)
    add_cors_middleware(app, cors_config or CORSConfig.from_env(settings.prefix))

    logger.info(
        "MiniBlob application created",
        root=str(settings.storage.root_path),
        index=type(index).__name__,
        secret_fingerprint=tokens.secret_fingerprint,
    )
    return app
