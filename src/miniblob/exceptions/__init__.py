"""Common exceptions for MiniBlob.

All exceptions include structured error information (code, message, details)
and the HTTP status code the web layer maps them to.

Usage:
    from miniblob.exceptions import (
        MiniBlobError,
        AuthorizationDeniedError,
        BlobNotFoundError,
    )
"""

from miniblob.exceptions.base import (
    AuthenticationError,
    AuthorizationDeniedError,
    BlobNotFoundError,
    ConfigurationError,
    ConflictError,
    ContainerExistsError,
    ContainerNotFoundError,
    DescriptorCorruptError,
    InvalidPathError,
    MiniBlobError,
    ResourceNotFoundError,
    SecurityError,
    StorageIOError,
    TokenExpiredError,
    TokenValidationError,
    ValidationError,
)

__all__ = [
    # Base
    "MiniBlobError",
    # 400
    "ValidationError",
    "InvalidPathError",
    # 401 / 403
    "SecurityError",
    "AuthenticationError",
    "TokenValidationError",
    "TokenExpiredError",
    "AuthorizationDeniedError",
    # 404
    "ResourceNotFoundError",
    "ContainerNotFoundError",
    "BlobNotFoundError",
    # 409
    "ConflictError",
    "ContainerExistsError",
    # 500
    "StorageIOError",
    "ConfigurationError",
    # Recovered internally
    "DescriptorCorruptError",
]
