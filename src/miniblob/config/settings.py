"""Dataclass-based Settings for MiniBlob

Provides typed configuration read from environment-style mappings.
Every settings class takes the variable prefix (default ``MINIBLOB``) so a
test or an embedding application can run several isolated configurations.

Environment variables:
    {prefix}_HOST, {prefix}_PORT
    {prefix}_JWT_SECRET, {prefix}_JWT_ISSUER, {prefix}_JWT_AUDIENCE
    {prefix}_ROOT_PATH
    {prefix}_INDEX_ENABLED, {prefix}_INDEX_DB_PATH
    {prefix}_LOG_LEVEL, {prefix}_LOG_FORMAT
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from miniblob.exceptions import ConfigurationError

from .env_loader import DEFAULT_PREFIX, EnvLoader


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServerSettings:
    """Network server configuration

    Attributes:
        host: Server bind address (default: 0.0.0.0)
        port: HTTP port
    """

    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_env(cls, env: Mapping[str, str], prefix: str = DEFAULT_PREFIX) -> "ServerSettings":
        port_str = env.get(f"{prefix}_PORT", "8080")
        try:
            port = int(port_str)
        except ValueError:
            raise ConfigurationError(
                f"{prefix}_PORT must be an integer",
                details={"value": port_str},
            )
        return cls(host=env.get(f"{prefix}_HOST", "0.0.0.0"), port=port)


@dataclass
class AuthSettings:
    """Bearer token configuration

    Attributes:
        jwt_secret: HS256 signing secret. When absent the token service
            generates a random one and warns, so issued tokens do not survive
            a restart.
        issuer: Expected ``iss`` claim
        audience: Expected ``aud`` claim
    """

    jwt_secret: Optional[str] = None
    issuer: str = "miniblob"
    audience: str = "miniblob-audience"

    @classmethod
    def from_env(cls, env: Mapping[str, str], prefix: str = DEFAULT_PREFIX) -> "AuthSettings":
        return cls(
            jwt_secret=env.get(f"{prefix}_JWT_SECRET") or None,
            issuer=env.get(f"{prefix}_JWT_ISSUER", "miniblob"),
            audience=env.get(f"{prefix}_JWT_AUDIENCE", "miniblob-audience"),
        )

    def get_secret_fingerprint(self) -> str:
        """Get SHA256 fingerprint of JWT secret for logging (first 12 chars)"""
        if not self.jwt_secret:
            return "none"
        import hashlib

        return f"sha256:{hashlib.sha256(self.jwt_secret.encode()).hexdigest()[:12]}"


@dataclass
class StorageSettings:
    """Blob storage root configuration

    Attributes:
        root_path: Directory holding one sub-directory per container
    """

    root_path: Path

    def __post_init__(self):
        if isinstance(self.root_path, str):
            self.root_path = Path(self.root_path)

    @classmethod
    def from_env(cls, env: Mapping[str, str], prefix: str = DEFAULT_PREFIX) -> "StorageSettings":
        root = env.get(f"{prefix}_ROOT_PATH")
        if not root:
            raise ConfigurationError(
                f"{prefix}_ROOT_PATH is required and must be an absolute path"
            )
        return cls(root_path=Path(root))

    def validate(self) -> None:
        """Reject relative or missing storage roots.

        Raises:
            ConfigurationError: If the root is relative or does not exist
        """
        if not self.root_path.is_absolute():
            raise ConfigurationError(
                f"Relative storage path '{self.root_path}' is not allowed",
                details={"hint": "use an absolute path such as /var/miniblob/storage"},
            )
        if not self.root_path.is_dir():
            raise ConfigurationError(
                f"Storage path '{self.root_path}' does not exist",
                details={"hint": "create the directory before starting the server"},
            )


@dataclass
class IndexSettings:
    """Search index configuration

    Attributes:
        enabled: Use the SQLite index instead of the no-op sink
        db_path: SQLite database file (defaults next to the storage root)
    """

    enabled: bool = False
    db_path: Optional[Path] = None

    @classmethod
    def from_env(cls, env: Mapping[str, str], prefix: str = DEFAULT_PREFIX) -> "IndexSettings":
        db_path = env.get(f"{prefix}_INDEX_DB_PATH")
        return cls(
            enabled=_parse_bool(env.get(f"{prefix}_INDEX_ENABLED")),
            db_path=Path(db_path) if db_path else None,
        )

    def resolve_db_path(self, root_path: Path) -> Path:
        if self.db_path is not None:
            return self.db_path
        return root_path.parent / "miniblob_index.db"


@dataclass
class LogSettings:
    """Logging configuration

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (console or json)
    """

    level: str = "INFO"
    format: str = "console"

    @classmethod
    def from_env(cls, env: Mapping[str, str], prefix: str = DEFAULT_PREFIX) -> "LogSettings":
        return cls(
            level=env.get(f"{prefix}_LOG_LEVEL", "INFO").upper(),
            format=env.get(f"{prefix}_LOG_FORMAT", "console").lower(),
        )

    @property
    def json_format(self) -> bool:
        return self.format == "json"


@dataclass
class Settings:
    """Complete application settings

    Attributes:
        storage: Blob storage root
        server: Network server settings
        auth: Bearer token settings
        index: Search index settings
        log: Logging settings
        prefix: Environment variable prefix used
    """

    storage: StorageSettings
    server: ServerSettings = field(default_factory=ServerSettings)
    auth: AuthSettings = field(default_factory=AuthSettings)
    index: IndexSettings = field(default_factory=IndexSettings)
    log: LogSettings = field(default_factory=LogSettings)
    prefix: str = DEFAULT_PREFIX

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_PREFIX,
        env_file: Optional[Path | str] = None,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Load complete settings from .env, the OS environment and overrides.

        Args:
            prefix: Environment variable prefix (default: MINIBLOB)
            env_file: Optional .env file (defaults to ./.env when present)
            overrides: Explicit values with the highest precedence

        Returns:
            Settings object populated from the merged environment
        """
        env = EnvLoader(env_file, prefix).load(overrides)
        return cls(
            storage=StorageSettings.from_env(env, prefix),
            server=ServerSettings.from_env(env, prefix),
            auth=AuthSettings.from_env(env, prefix),
            index=IndexSettings.from_env(env, prefix),
            log=LogSettings.from_env(env, prefix),
            prefix=prefix,
        )

    def validate(self) -> None:
        """Validate settings that must hold before the server starts.

        Raises:
            ConfigurationError: If settings are invalid
        """
        self.storage.validate()

    @property
    def index_db_path(self) -> Path:
        return self.index.resolve_db_path(self.storage.root_path)


# Global settings storage per prefix
_global_settings: dict[str, Settings] = {}


def get_settings(
    prefix: str = DEFAULT_PREFIX,
    reload: bool = False,
    env_file: Optional[Path | str] = None,
) -> Settings:
    """Get or create the validated settings instance for a given prefix

    Args:
        prefix: Environment variable prefix
        reload: If True, reload settings from the environment
        env_file: Optional .env file

    Returns:
        Settings instance for the given prefix
    """
    if prefix not in _global_settings or reload:
        settings = Settings.from_env(prefix=prefix, env_file=env_file)
        settings.validate()
        _global_settings[prefix] = settings

    return _global_settings[prefix]


def reset_settings(prefix: Optional[str] = None) -> None:
    """Reset settings (primarily for testing)

    Args:
        prefix: Specific prefix to reset, or None to reset all
    """
    if prefix:
        _global_settings.pop(prefix, None)
    else:
        _global_settings.clear()
