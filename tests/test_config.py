"""Tests for miniblob.config."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from miniblob.config import (
    AuthSettings,
    EnvLoader,
    IndexSettings,
    LogSettings,
    ServerSettings,
    Settings,
    StorageSettings,
    get_settings,
    reset_settings,
)
from miniblob.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clean_settings():
    reset_settings()
    yield
    reset_settings()


class TestEnvLoader:
    """Tests for .env, OS environment and override precedence."""

    def test_env_file_values(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MBTEST_A=from-file\n")

        with patch.dict(os.environ, {}, clear=True):
            data = EnvLoader(env_file, prefix="MBTEST").load()

        assert data["MBTEST_A"] == "from-file"

    def test_precedence(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MBTEST_A=file\nMBTEST_B=file\nMBTEST_C=file\n")

        with patch.dict(os.environ, {"MBTEST_B": "os", "MBTEST_C": "os"}, clear=True):
            data = EnvLoader(env_file, prefix="MBTEST").load(overrides={"MBTEST_C": "override"})

        assert data["MBTEST_A"] == "file"
        assert data["MBTEST_B"] == "os"
        assert data["MBTEST_C"] == "override"

    def test_missing_env_file_is_ignored(self, tmp_path):
        with patch.dict(os.environ, {"MBTEST_A": "os"}, clear=True):
            data = EnvLoader(tmp_path / "missing.env", prefix="MBTEST").load()

        assert data == {"MBTEST_A": "os"}

    def test_only_prefixed_keys_are_collected(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MBTEST_A=file\nOTHER_A=file\nMBTESTX=file\n")
        env = {"MBTEST_B": "os", "PATH": "/usr/bin", "HOME": "/root"}

        with patch.dict(os.environ, env, clear=True):
            data = EnvLoader(env_file, prefix="MBTEST").load(overrides={"UNRELATED": "x"})

        assert data == {"MBTEST_A": "file", "MBTEST_B": "os"}

    def test_empty_value_replaces_earlier_layer(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MINIBLOB_JWT_SECRET=from-file\n")

        with patch.dict(os.environ, {"MINIBLOB_JWT_SECRET": ""}, clear=True):
            data = EnvLoader(env_file).load()

        assert data["MINIBLOB_JWT_SECRET"] == ""

    def test_default_env_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert EnvLoader().env_path == tmp_path / ".env"


class TestSettingsSections:
    def test_server_defaults(self):
        server = ServerSettings.from_env({})

        assert server.host == "0.0.0.0"
        assert server.port == 8080

    def test_server_bad_port(self):
        with pytest.raises(ConfigurationError):
            ServerSettings.from_env({"MINIBLOB_PORT": "eighty"})

    def test_auth(self):
        auth = AuthSettings.from_env(
            {"MINIBLOB_JWT_SECRET": "s", "MINIBLOB_JWT_ISSUER": "iss", "MINIBLOB_JWT_AUDIENCE": "aud"}
        )

        assert auth.jwt_secret == "s"
        assert auth.issuer == "iss"
        assert auth.audience == "aud"
        assert auth.get_secret_fingerprint().startswith("sha256:")
        assert AuthSettings().get_secret_fingerprint() == "none"

    def test_storage_root_required(self):
        with pytest.raises(ConfigurationError):
            StorageSettings.from_env({})

    def test_storage_relative_root_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            StorageSettings(root_path="relative/path").validate()

        assert "hint" in exc_info.value.details

    def test_storage_missing_root_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError):
            StorageSettings(root_path=tmp_path / "missing").validate()

    def test_storage_valid_root(self, tmp_path):
        settings = StorageSettings(root_path=str(tmp_path))

        assert settings.root_path == tmp_path
        settings.validate()

    def test_index(self, tmp_path):
        index = IndexSettings.from_env({"MINIBLOB_INDEX_ENABLED": "true"})

        assert index.enabled
        assert index.resolve_db_path(tmp_path / "storage") == tmp_path / "miniblob_index.db"
        explicit = IndexSettings(db_path=Path("/srv/idx.db"))
        assert explicit.resolve_db_path(tmp_path) == Path("/srv/idx.db")

    def test_log(self):
        log = LogSettings.from_env({"MINIBLOB_LOG_LEVEL": "debug", "MINIBLOB_LOG_FORMAT": "JSON"})

        assert log.level == "DEBUG"
        assert log.json_format


class TestSettings:
    """Tests for the combined Settings object."""

    def test_from_env_with_prefix(self, tmp_path):
        env = {
            "MBTEST_ROOT_PATH": str(tmp_path),
            "MBTEST_PORT": "9000",
            "MBTEST_INDEX_ENABLED": "1",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env(prefix="MBTEST", env_file=tmp_path / "none.env")

        assert settings.prefix == "MBTEST"
        assert settings.storage.root_path == tmp_path
        assert settings.server.port == 9000
        assert settings.index.enabled
        assert settings.index_db_path == tmp_path.parent / "miniblob_index.db"

    def test_overrides(self, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env(
                env_file=tmp_path / "none.env",
                overrides={"MINIBLOB_ROOT_PATH": str(tmp_path), "MINIBLOB_HOST": "127.0.0.1"},
            )

        assert settings.server.host == "127.0.0.1"

    def test_get_settings_is_cached_per_prefix(self, tmp_path):
        with patch.dict(os.environ, {"MBTEST_ROOT_PATH": str(tmp_path)}, clear=True):
            first = get_settings(prefix="MBTEST", env_file=tmp_path / "none.env")
            second = get_settings(prefix="MBTEST")
            reloaded = get_settings(prefix="MBTEST", reload=True, env_file=tmp_path / "none.env")

        assert first is second
        assert reloaded is not first

    def test_get_settings_validates(self, tmp_path):
        with patch.dict(os.environ, {"MBTEST_ROOT_PATH": "relative"}, clear=True):
            with pytest.raises(ConfigurationError):
                get_settings(prefix="MBTEST", env_file=tmp_path / "none.env")
