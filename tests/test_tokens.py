"""Tests for miniblob.auth.tokens and the FastAPI auth dependencies."""

import jwt
import pytest
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from miniblob.auth import CallerIdentity, TokenService, get_caller, require_admin
from miniblob.exceptions import MiniBlobError, TokenExpiredError, TokenValidationError

SECRET = "unit-test-secret"


@pytest.fixture
def tokens(mock_logger) -> TokenService:
    return TokenService(secret_key=SECRET, logger=mock_logger)


class TestTokenService:
    """Tests for token creation and verification."""

    def test_round_trip(self, tokens):
        token = tokens.create(name="alice", roles=["HR", "Manager"])

        caller = tokens.verify(token)

        assert caller == CallerIdentity(name="alice", roles=("HR", "Manager"))

    def test_claims(self, tokens):
        token = tokens.create(name="alice", roles=["HR"], expires_in_seconds=120)

        payload = jwt.decode(token, SECRET, algorithms=["HS256"], audience="miniblob-audience")

        assert payload["sub"] == "alice"
        assert payload["name"] == "alice"
        assert payload["roles"] == ["HR"]
        assert payload["iss"] == "miniblob"
        assert payload["exp"] - payload["iat"] == 120

    def test_expired(self, tokens):
        token = tokens.create(name="alice", expires_in_seconds=-10)

        with pytest.raises(TokenExpiredError):
            tokens.verify(token)

    def test_wrong_secret(self, tokens, mock_logger):
        other = TokenService(secret_key="another-secret", logger=mock_logger)

        with pytest.raises(TokenValidationError):
            tokens.verify(other.create(name="alice"))

    def test_wrong_audience(self, tokens, mock_logger):
        other = TokenService(secret_key=SECRET, audience="someone-else", logger=mock_logger)

        with pytest.raises(TokenValidationError):
            tokens.verify(other.create(name="alice"))

    def test_wrong_issuer(self, tokens, mock_logger):
        other = TokenService(secret_key=SECRET, issuer="elsewhere", logger=mock_logger)

        with pytest.raises(TokenValidationError):
            tokens.verify(other.create(name="alice"))

    def test_garbage(self, tokens):
        with pytest.raises(TokenValidationError):
            tokens.verify("not.a.token")

    def test_sub_used_when_name_missing(self, tokens):
        token = jwt.encode(
            {"sub": "svc", "iss": "miniblob", "aud": "miniblob-audience", "iat": 0, "exp": 4102444800},
            SECRET,
            algorithm="HS256",
        )

        assert tokens.verify(token).name == "svc"

    def test_single_role_string(self, tokens):
        token = tokens.create(name="alice", extra_claims={"roles": "admin"})

        assert tokens.verify(token).is_admin

    def test_bad_roles_claim(self, tokens):
        token = tokens.create(name="alice", extra_claims={"roles": [1, 2]})

        with pytest.raises(TokenValidationError):
            tokens.verify(token)

    def test_random_secret_when_missing(self, mock_logger):
        service = TokenService(logger=mock_logger)

        assert len(service.secret_key) == 64
        mock_logger.warning.assert_called_once()

    def test_secret_fingerprint(self, tokens):
        assert tokens.secret_fingerprint.startswith("sha256:")
        assert SECRET not in tokens.secret_fingerprint


class TestAuthDependencies:
    """Tests for get_caller and require_admin."""

    @pytest.fixture
    def client(self, tokens):
        app = FastAPI()
        app.state.token_service = tokens

        @app.exception_handler(MiniBlobError)
        async def handle(request, exc: MiniBlobError):
            return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

        @app.get("/me")
        def me(caller: CallerIdentity = Depends(get_caller)):
            return {"name": caller.name, "roles": list(caller.roles)}

        @app.get("/admin")
        def admin_only(caller: CallerIdentity = Depends(require_admin)):
            return {"name": caller.name}

        return TestClient(app)

    def test_valid_token(self, client, tokens):
        token = tokens.create(name="alice", roles=["HR"])

        response = client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == {"name": "alice", "roles": ["HR"]}

    def test_missing_token_is_401(self, client):
        response = client.get("/me")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_non_bearer_scheme_is_401(self, client):
        response = client.get("/me", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401

    def test_require_admin(self, client, tokens):
        user = tokens.create(name="alice")
        admin = tokens.create(name="root", roles=["admin"])

        assert client.get("/admin", headers={"Authorization": f"Bearer {user}"}).status_code == 403
        assert client.get("/admin", headers={"Authorization": f"Bearer {admin}"}).status_code == 200

    def test_missing_token_service(self):
        app = FastAPI()

        @app.get("/me")
        def me(caller: CallerIdentity = Depends(get_caller)):
            return {}

        response = TestClient(app).get("/me", headers={"Authorization": "Bearer x"})

        assert response.status_code == 500
