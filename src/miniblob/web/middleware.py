"""Request logging middleware."""

import time
from typing import Any

from miniblob.logger import Logger


class RequestLoggingMiddleware:
    """ASGI middleware logging method, path, status and timing per request.

    Example:
        app.add_middleware(RequestLoggingMiddleware, logger=get_logger("miniblob-http"))
    """

    def __init__(self, app: Any, logger: Logger) -> None:
        self.app = app
        self.logger = logger

    async def __call__(self, scope: dict, receive: Any, send: Any) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "/")
        start_time = time.perf_counter()
        response_status = 0

        async def send_wrapper(message: dict) -> None:
            nonlocal response_status
            if message["type"] == "http.response.start":
                response_status = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.logger.info(
                f"{method} {path}",
                status=response_status,
                duration_ms=round(duration_ms, 2),
            )
