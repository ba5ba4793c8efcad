"""Role management endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from rbac_service.api.dependencies import get_role_service
from rbac_service.auth.dependencies import RequirePermissions
from rbac_service.auth.permissions import Permission
from rbac_service.database.models import RoleData
from rbac_service.schemas.role import RoleCreate, RoleResponse, RoleUpdate
from rbac_service.services.role import RoleService


router = APIRouter(prefix="/role", tags=["roles"])

Roles = Annotated[RoleService, Depends(get_role_service)]


def _to_response(role: RoleData) -> RoleResponse:
    return RoleResponse.model_validate(role.model_dump())


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a role",
    dependencies=[Depends(RequirePermissions(Permission.ROLE_CREATE))],
)
async def create_role(body: RoleCreate, roles: Roles) -> RoleResponse:
    return _to_response(await roles.create(body))


@router.get(
    "",
    response_model=list[RoleResponse],
    summary="List active roles",
    dependencies=[Depends(RequirePermissions(Permission.ROLE_READ))],
)
async def list_roles(roles: Roles) -> list[RoleResponse]:
    return [_to_response(role) for role in await roles.find_all()]


@router.get(
    "/{role_id}",
    response_model=RoleResponse,
    summary="Get a role",
    dependencies=[Depends(RequirePermissions(Permission.ROLE_READ))],
)
async def get_role(role_id: str, roles: Roles) -> RoleResponse:
    return _to_response(await roles.find_one(role_id))


@router.patch(
    "/{role_id}",
    response_model=RoleResponse,
    summary="Update a role",
    description="permissionIds, when present, replaces the role's whole permission set.",
    dependencies=[Depends(RequirePermissions(Permission.ROLE_UPDATE))],
)
async def update_role(role_id: str, body: RoleUpdate, roles: Roles) -> RoleResponse:
    return _to_response(await roles.update(role_id, body))


@router.delete(
    "/{role_id}",
    response_model=RoleResponse,
    summary="Deactivate a role",
    dependencies=[Depends(RequirePermissions(Permission.ROLE_DELETE))],
)
async def delete_role(role_id: str, roles: Roles) -> RoleResponse:
    return _to_response(await roles.remove(role_id))


@router.post(
    "/{role_id}/permissions/{permission_id}",
    response_model=RoleResponse,
    summary="Grant a permission",
    dependencies=[Depends(RequirePermissions(Permission.ROLE_UPDATE))],
)
async def add_permission(role_id: str, permission_id: str, roles: Roles) -> RoleResponse:
    return _to_response(await roles.add_permission(role_id, permission_id))


@router.delete(
    "/{role_id}/permissions/{permission_id}",
    response_model=RoleResponse,
    summary="Revoke a permission",
    description="Tokens issued before the change keep the permission until they expire.",
    dependencies=[Depends(RequirePermissions(Permission.ROLE_UPDATE))],
)
async def remove_permission(role_id: str, permission_id: str, roles: Roles) -> RoleResponse:
    return _to_response(await roles.remove_permission(role_id, permission_id))
