"""Bearer token service.

Issues and verifies HS256 JWTs carrying the caller's name and role claims.
Verification checks signature, expiry, not-before, issuer and audience, and
yields a CallerIdentity for the authorization layer.
"""

from __future__ import annotations

import hashlib
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

import jwt

from miniblob.exceptions import TokenExpiredError, TokenValidationError
from miniblob.logger import Logger, create_logger

from .identity import CallerIdentity

DEFAULT_ISSUER = "miniblob"
DEFAULT_AUDIENCE = "miniblob-audience"
DEFAULT_EXPIRY_SECONDS = 3600


class TokenService:
    """Service for JWT token operations.

    Example:
        tokens = TokenService(secret_key="my-secret")
        token = tokens.create(name="alice", roles=["HR"])
        caller = tokens.verify(token)
        print(caller.name, caller.roles)  # alice ('HR',)
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        issuer: str = DEFAULT_ISSUER,
        audience: str = DEFAULT_AUDIENCE,
        logger: Optional[Logger] = None,
    ) -> None:
        """Initialize the token service.

        Args:
            secret_key: Secret key for JWT signing. A random one is generated
                (and a warning logged) when not provided
            issuer: ``iss`` claim written and required
            audience: ``aud`` claim written and required
            logger: Optional logger instance
        """
        self._logger = logger or create_logger(name="miniblob-tokens")
        self._issuer = issuer
        self._audience = audience

        if not secret_key:
            self._logger.warning(
                "No JWT secret provided, generating random secret",
                hint="Set MINIBLOB_JWT_SECRET for tokens that survive a restart",
            )
            secret_key = os.urandom(32).hex()
        self._secret_key = secret_key

        self._logger.debug(
            "TokenService initialized",
            issuer=issuer,
            audience=audience,
            secret_fingerprint=self.secret_fingerprint,
        )

    @property
    def secret_key(self) -> str:
        return self._secret_key

    @property
    def secret_fingerprint(self) -> str:
        """Get a fingerprint of the secret for logging (doesn't expose secret)."""
        digest = hashlib.sha256(self._secret_key.encode()).hexdigest()
        return f"sha256:{digest[:12]}"

    @property
    def issuer(self) -> str:
        return self._issuer

    @property
    def audience(self) -> str:
        return self._audience

    def create(
        self,
        name: str,
        roles: Iterable[str] = (),
        expires_in_seconds: int = DEFAULT_EXPIRY_SECONDS,
        extra_claims: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Create a signed JWT for a caller.

        Args:
            name: Caller identity (``name`` and ``sub`` claims)
            roles: Role claims
            expires_in_seconds: Token lifetime (default: 1 hour)
            extra_claims: Optional additional JWT claims

        Returns:
            JWT token string
        """
        now = datetime.now(timezone.utc)
        role_list: List[str] = list(roles)
        payload: Dict[str, Any] = {
            "sub": name,
            "name": name,
            "roles": role_list,
            "iss": self._issuer,
            "aud": self._audience,
            "iat": int(now.timestamp()),
            "nbf": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=expires_in_seconds)).timestamp()),
        }
        if extra_claims:
            payload.update(extra_claims)

        token = jwt.encode(payload, self._secret_key, algorithm="HS256")
        self._logger.info(
            "Token created",
            name=name,
            roles=role_list,
            expires_in_seconds=expires_in_seconds,
        )
        return token

    def verify(self, token: str) -> CallerIdentity:
        """Verify a JWT and extract the caller.

        Args:
            token: JWT token string

        Returns:
            CallerIdentity built from the ``name`` (or ``sub``) and ``roles`` claims

        Raises:
            TokenExpiredError: If the token has expired
            TokenValidationError: If the token is otherwise invalid
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=["HS256"],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.ImmatureSignatureError:
            raise TokenValidationError("Token not yet valid")
        except jwt.InvalidTokenError as e:
            raise TokenValidationError(f"Invalid token: {e}")

        name = payload.get("name") or payload.get("sub")
        if not isinstance(name, str) or not name:
            raise TokenValidationError("Token missing name claim")

        roles = payload.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
            raise TokenValidationError("Token roles claim must be a list of strings")

        return CallerIdentity(name=name, roles=tuple(roles))
