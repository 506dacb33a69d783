"""Tests for the miniblob command line."""

import os
from unittest.mock import patch

import pytest

from miniblob.auth import TokenService
from miniblob.cli import build_parser, main

SECRET = "cli-test-secret"


@pytest.fixture
def env(tmp_path):
    values = {"MINIBLOB_JWT_SECRET": SECRET, "MINIBLOB_ROOT_PATH": str(tmp_path)}
    with patch.dict(os.environ, values, clear=True):
        yield values


@pytest.fixture
def no_env_file(tmp_path):
    return ["--env-file", str(tmp_path / "none.env")]


class TestParser:
    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_token_create_defaults(self):
        args = build_parser().parse_args(["token", "create", "--name", "alice"])

        assert args.name == "alice"
        assert args.roles == ""
        assert args.expires == 3600


class TestTokenCommands:
    """Tests for token create and inspect."""

    def test_create_prints_verifiable_token(self, env, no_env_file, capsys):
        assert main(no_env_file + ["token", "create", "--name", "alice", "--roles", "HR, admin"]) == 0

        token = capsys.readouterr().out.strip()
        caller = TokenService(secret_key=SECRET).verify(token)
        assert caller.name == "alice"
        assert caller.roles == ("HR", "admin")

    def test_create_requires_secret(self, no_env_file, capsys):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(SystemExit) as exc_info:
                main(no_env_file + ["token", "create", "--name", "alice"])

        assert exc_info.value.code == 1
        assert "MINIBLOB_JWT_SECRET" in capsys.readouterr().err

    def test_inspect_valid(self, env, no_env_file, capsys):
        token = TokenService(secret_key=SECRET).create(name="alice", roles=["HR"])

        assert main(no_env_file + ["token", "inspect", token]) == 0

        out = capsys.readouterr().out
        assert "Status: VALID" in out
        assert "Name: alice" in out

    def test_inspect_invalid_signature(self, env, no_env_file, capsys):
        token = TokenService(secret_key="other").create(name="alice")

        assert main(no_env_file + ["token", "inspect", token]) == 1
        assert "INVALID" in capsys.readouterr().out

    def test_inspect_malformed(self, env, no_env_file, capsys):
        assert main(no_env_file + ["token", "inspect", "garbage"]) == 1
        assert "Invalid token format" in capsys.readouterr().err


class TestServeCommand:
    def test_serve_runs_uvicorn(self, env, no_env_file):
        with patch("uvicorn.run") as run:
            assert main(no_env_file + ["serve", "--host", "127.0.0.1", "--port", "9123"]) == 0

        run.assert_called_once()
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["port"] == 9123

    def test_serve_reports_configuration_errors(self, no_env_file, capsys):
        with patch.dict(os.environ, {"MINIBLOB_ROOT_PATH": "relative/root"}, clear=True):
            with patch("uvicorn.run") as run:
                assert main(no_env_file + ["serve"]) == 1

        run.assert_not_called()
        err = capsys.readouterr().err
        assert "not allowed" in err
        assert "Hint:" in err
