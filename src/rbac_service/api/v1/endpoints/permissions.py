"""Permission management endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from rbac_service.api.dependencies import get_permission_service
from rbac_service.auth.dependencies import RequirePermissions
from rbac_service.auth.permissions import Permission
from rbac_service.database.models import PermissionData
from rbac_service.schemas.permission import (
    PermissionCreate,
    PermissionResponse,
    PermissionUpdate,
)
from rbac_service.services.permission import PermissionService


router = APIRouter(prefix="/permission", tags=["permissions"])

Permissions = Annotated[PermissionService, Depends(get_permission_service)]


def _to_response(permission: PermissionData) -> PermissionResponse:
    return PermissionResponse.model_validate(permission.model_dump())


@router.post(
    "",
    response_model=PermissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a permission",
    dependencies=[Depends(RequirePermissions(Permission.PERMISSION_CREATE))],
)
async def create_permission(
    body: PermissionCreate, permissions: Permissions
) -> PermissionResponse:
    return _to_response(await permissions.create(body))


@router.post(
    "/seed",
    response_model=list[PermissionResponse],
    summary="Seed default permissions",
    description="Create any default permission that does not exist yet; returns the created ones.",
    dependencies=[Depends(RequirePermissions(Permission.PERMISSION_CREATE))],
)
async def seed_permissions(permissions: Permissions) -> list[PermissionResponse]:
    return [_to_response(p) for p in await permissions.seed_defaults()]


@router.get(
    "",
    response_model=list[PermissionResponse],
    summary="List active permissions",
    dependencies=[Depends(RequirePermissions(Permission.PERMISSION_READ))],
)
async def list_permissions(permissions: Permissions) -> list[PermissionResponse]:
    return [_to_response(p) for p in await permissions.find_all()]


@router.get(
    "/{permission_id}",
    response_model=PermissionResponse,
    summary="Get a permission",
    dependencies=[Depends(RequirePermissions(Permission.PERMISSION_READ))],
)
async def get_permission(permission_id: str, permissions: Permissions) -> PermissionResponse:
    return _to_response(await permissions.find_one(permission_id))


@router.patch(
    "/{permission_id}",
    response_model=PermissionResponse,
    summary="Update a permission",
    dependencies=[Depends(RequirePermissions(Permission.PERMISSION_UPDATE))],
)
async def update_permission(
    permission_id: str, body: PermissionUpdate, permissions: Permissions
) -> PermissionResponse:
    return _to_response(await permissions.update(permission_id, body))


@router.delete(
    "/{permission_id}",
    response_model=PermissionResponse,
    summary="Deactivate a permission",
    dependencies=[Depends(RequirePermissions(Permission.PERMISSION_DELETE))],
)
async def delete_permission(permission_id: str, permissions: Permissions) -> PermissionResponse:
    return _to_response(await permissions.remove(permission_id))
