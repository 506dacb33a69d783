"""Container routes: admin creation and permission-checked info."""

from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field

from miniblob.auth import CallerIdentity, get_caller, require_admin
from miniblob.containers import ContainerService

from ..dependencies import get_container_service

router = APIRouter(prefix="/containers", tags=["containers"])


class CreateContainerRequest(BaseModel):
    """Optional body for container creation."""

    users_allowed: Optional[List[str]] = Field(
        default=None,
        validation_alias=AliasChoices("usersAllowed", "UsersAllowed", "users_allowed"),
    )
    roles_allowed: Optional[List[str]] = Field(
        default=None,
        validation_alias=AliasChoices("rolesAllowed", "RolesAllowed", "roles_allowed"),
    )


@router.post("/{container}")
async def create_container(
    container: str,
    request: Request,
    body: Optional[CreateContainerRequest] = Body(default=None),
    caller: CallerIdentity = Depends(require_admin),
    service: ContainerService = Depends(get_container_service),
) -> JSONResponse:
    descriptor = await service.create(
        container,
        caller,
        users_allowed=body.users_allowed if body else None,
        roles_allowed=body.roles_allowed if body else None,
    )
    location = f"{str(request.base_url).rstrip('/')}/containers/{quote(container)}"
    return JSONResponse(
        status_code=201,
        headers={"Location": location},
        content={
            "container": container,
            "createdBy": descriptor.created_by,
            "createdUtc": descriptor.created_utc.isoformat() if descriptor.created_utc else None,
            "usersAllowed": descriptor.users_allowed,
            "rolesAllowed": descriptor.roles_allowed,
        },
    )


@router.get("/{container}")
async def get_container_info(
    container: str,
    caller: CallerIdentity = Depends(get_caller),
    service: ContainerService = Depends(get_container_service),
) -> JSONResponse:
    info = await service.info(container, caller)
    return JSONResponse(info.to_dict())
