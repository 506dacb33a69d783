"""Base exception classes for MiniBlob.

All MiniBlob exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery

Each class also carries the HTTP status code the web layer responds with.
"""

from typing import Any, Dict, Optional


class MiniBlobError(Exception):
    """Base exception for all MiniBlob errors.

    Attributes:
        code: Machine-readable error code (e.g., "BLOB_NOT_FOUND")
        message: Human-readable error message
        details: Optional additional context for debugging/recovery
        status_code: HTTP status used when the error reaches the web layer
    """

    status_code: int = 500
    default_code: str = "MINIBLOB_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize error with structured information.

        Args:
            message: Human-readable error message
            code: Error code, defaults to the class default_code
            details: Optional additional context
        """
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization.

        Returns:
            Dictionary with code, message, and details keys.
        """
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(MiniBlobError):
    """Base for input validation errors (bad container names, bad paths)."""

    status_code = 400
    default_code = "VALIDATION_ERROR"


class InvalidPathError(ValidationError):
    """Raised when a container name or blob path cannot be mapped safely."""

    default_code = "INVALID_PATH"


class ResourceNotFoundError(MiniBlobError):
    """Base for resource not found errors."""

    status_code = 404
    default_code = "NOT_FOUND"


class ContainerNotFoundError(ResourceNotFoundError):
    default_code = "CONTAINER_NOT_FOUND"


class BlobNotFoundError(ResourceNotFoundError):
    default_code = "BLOB_NOT_FOUND"


class ConflictError(MiniBlobError):
    """Base for errors where the target already exists."""

    status_code = 409
    default_code = "CONFLICT"


class ContainerExistsError(ConflictError):
    default_code = "CONTAINER_EXISTS"


class SecurityError(MiniBlobError):
    """Base for authentication and authorization errors."""

    status_code = 403
    default_code = "SECURITY_ERROR"


class AuthorizationDeniedError(SecurityError):
    """Raised when a container or blob check denies the caller.

    The message never carries descriptor contents.
    """

    default_code = "AUTHORIZATION_DENIED"


class AuthenticationError(SecurityError):
    """Raised when no valid caller identity could be established."""

    status_code = 401
    default_code = "AUTHENTICATION_FAILED"


class StorageIOError(MiniBlobError):
    """Raised when the filesystem fails (disk full, permission denied, path too long)."""

    status_code = 500
    default_code = "STORAGE_IO_ERROR"


class ConfigurationError(MiniBlobError):
    """Raised when system configuration is invalid or incomplete."""

    status_code = 500
    default_code = "CONFIGURATION_ERROR"


class TokenValidationError(AuthenticationError):
    """Raised when a bearer token fails signature, claim or expiry checks."""

    default_code = "TOKEN_INVALID"


class TokenExpiredError(TokenValidationError):
    default_code = "TOKEN_EXPIRED"


class DescriptorCorruptError(MiniBlobError):
    """Raised by descriptor stores when a sidecar exists but cannot be parsed.

    The authorization resolver recovers from it locally, so it never reaches
    a caller.
    """

    default_code = "DESCRIPTOR_CORRUPT"
