"""Shared fixtures for the MiniBlob test suite."""

from pathlib import Path
from typing import Callable, Dict, Iterable
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from miniblob.auth import CallerIdentity, TokenService
from miniblob.config import AuthSettings, Settings, StorageSettings
from miniblob.logger import Logger
from miniblob.web import CORSConfig, create_app

TEST_SECRET = "test-secret-key-for-miniblob"


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double recording every structured call."""
    return MagicMock(spec=Logger)


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    root = tmp_path / "storage"
    root.mkdir()
    return root


@pytest.fixture
def settings(storage_root: Path) -> Settings:
    return Settings(
        storage=StorageSettings(root_path=storage_root),
        auth=AuthSettings(jwt_secret=TEST_SECRET),
    )


@pytest.fixture
def token_service(mock_logger) -> TokenService:
    return TokenService(secret_key=TEST_SECRET, logger=mock_logger)


@pytest.fixture
def app(settings, token_service, mock_logger):
    return create_app(
        settings,
        token_service=token_service,
        cors_config=CORSConfig.permissive(),
        logger=mock_logger,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(token_service) -> Callable[..., Dict[str, str]]:
    """Factory producing an Authorization header for a name and roles."""

    def _headers(name: str, roles: Iterable[str] = ()) -> Dict[str, str]:
        token = token_service.create(name=name, roles=list(roles))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin() -> CallerIdentity:
    return CallerIdentity(name="root", roles=("admin",))


@pytest.fixture
def alice() -> CallerIdentity:
    return CallerIdentity(name="alice", roles=("staff",))


@pytest.fixture
def bob() -> CallerIdentity:
    return CallerIdentity(name="bob", roles=())
