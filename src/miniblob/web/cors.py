"""CORS configuration for the MiniBlob API."""

import os
from dataclasses import dataclass, field
from typing import Any, List, Optional

# Response headers browsers may read cross-origin
BLOB_EXPOSE_HEADERS = [
    "ETag",
    "Last-Modified",
    "Content-Length",
    "Content-Disposition",
    "Location",
]


@dataclass
class CORSConfig:
    """Configuration for CORS middleware.

    Attributes:
        allow_origins: List of allowed origins or ["*"] for all
        allow_methods: List of allowed HTTP methods
        allow_headers: List of allowed headers or ["*"] for all
        allow_credentials: Whether to allow credentials (cookies, auth headers)
        expose_headers: Headers to expose to the client
        max_age: Max age for preflight cache (seconds)
    """

    allow_origins: List[str] = field(default_factory=lambda: ["*"])
    allow_methods: List[str] = field(
        default_factory=lambda: ["GET", "HEAD", "PUT", "POST", "OPTIONS"]
    )
    allow_headers: List[str] = field(default_factory=lambda: ["*"])
    allow_credentials: bool = False
    expose_headers: List[str] = field(default_factory=lambda: list(BLOB_EXPOSE_HEADERS))
    max_age: int = 600

    @classmethod
    def from_env(cls, env_prefix: str = "MINIBLOB", default_origins: str = "*") -> "CORSConfig":
        """Create CORSConfig from environment variables.

        Looks for:
        - {env_prefix}_CORS_ORIGINS: Comma-separated origins or "*"
        - {env_prefix}_CORS_CREDENTIALS: "true" or "false"

        Example:
            # With MINIBLOB_CORS_ORIGINS="https://a.example.com,https://b.example.com"
            config = CORSConfig.from_env("MINIBLOB")
            # config.allow_origins == ["https://a.example.com", "https://b.example.com"]
        """
        origins = get_cors_origins(os.getenv(f"{env_prefix}_CORS_ORIGINS", default_origins))
        credentials = os.getenv(f"{env_prefix}_CORS_CREDENTIALS", "false").lower() == "true"
        return cls(allow_origins=origins, allow_credentials=credentials)

    @classmethod
    def permissive(cls) -> "CORSConfig":
        """Allow all origins. Useful for development or internal APIs."""
        return cls(allow_origins=["*"])


def get_cors_origins(origins_str: str) -> List[str]:
    """Parse CORS origins from a string.

    Example:
        >>> get_cors_origins("*")
        ["*"]
        >>> get_cors_origins("https://example.com, https://app.example.com")
        ["https://example.com", "https://app.example.com"]
    """
    if origins_str.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


def add_cors_middleware(app: Any, config: Optional[CORSConfig] = None) -> None:
    """Install Starlette's CORSMiddleware on a FastAPI/Starlette app."""
    from starlette.middleware.cors import CORSMiddleware

    if config is None:
        config = CORSConfig.permissive()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allow_origins,
        allow_credentials=config.allow_credentials,
        allow_methods=config.allow_methods,
        allow_headers=config.allow_headers,
        expose_headers=config.expose_headers,
        max_age=config.max_age,
    )
