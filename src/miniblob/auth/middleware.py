"""Authentication dependencies for FastAPI.

Routes declare ``caller: CallerIdentity = Depends(get_caller)`` to require a
valid bearer token. The token service is read from ``app.state`` so several
applications can coexist in one process (tests do this).
"""

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from miniblob.exceptions import AuthorizationDeniedError, TokenValidationError

from .identity import CallerIdentity, is_admin
from .tokens import TokenService

# auto_error=False so a missing header yields 401 rather than HTTPBearer's 403
security = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    """Get the token service attached to the application.

    Raises:
        HTTPException: If the application was built without one
    """
    service = getattr(request.app.state, "token_service", None)
    if service is None:
        raise HTTPException(status_code=500, detail="Token service not initialized")
    return service


def get_caller(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> CallerIdentity:
    """Verify the bearer token and return the caller.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return get_token_service(request).verify(credentials.credentials)
    except TokenValidationError as e:
        raise HTTPException(
            status_code=401,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_admin(caller: CallerIdentity = Depends(get_caller)) -> CallerIdentity:
    """Dependency that only lets admins through.

    Raises:
        AuthorizationDeniedError: If the caller lacks the admin role
    """
    if not is_admin(caller):
        raise AuthorizationDeniedError("Admin role required")
    return caller
