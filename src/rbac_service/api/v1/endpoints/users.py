"""User management endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from rbac_service.api.dependencies import get_user_service
from rbac_service.auth.dependencies import CurrentClaims, RequirePermissions
from rbac_service.auth.permissions import Permission
from rbac_service.database.models import UserData
from rbac_service.schemas.user import UserCreate, UserResponse, UserUpdate
from rbac_service.services.user import UserService


router = APIRouter(prefix="/user", tags=["users"])

Users = Annotated[UserService, Depends(get_user_service)]


def _to_response(user: UserData) -> UserResponse:
    return UserResponse.model_validate(user.model_dump())


@router.post(
    "/create",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    dependencies=[Depends(RequirePermissions(Permission.USER_CREATE))],
)
async def create_user(body: UserCreate, users: Users) -> UserResponse:
    return _to_response(await users.create(body))


@router.get(
    "/all",
    response_model=list[UserResponse],
    summary="List users",
    dependencies=[Depends(RequirePermissions(Permission.USER_READ))],
)
async def list_users(users: Users) -> list[UserResponse]:
    return [_to_response(user) for user in await users.find_all()]


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Own profile",
    description="The caller's account, with current roles (not the token's).",
)
async def get_profile(claims: CurrentClaims, users: Users) -> UserResponse:
    return _to_response(await users.find_by_email_with_roles(claims.email))


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
    dependencies=[Depends(RequirePermissions(Permission.USER_READ))],
)
async def get_user(user_id: str, users: Users) -> UserResponse:
    return _to_response(await users.find_by_id(user_id))


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    description="Setting isActive to false also refuses the user's existing tokens.",
    dependencies=[Depends(RequirePermissions(Permission.USER_UPDATE))],
)
async def update_user(user_id: str, body: UserUpdate, users: Users) -> UserResponse:
    return _to_response(await users.update(user_id, body))


@router.delete(
    "/{user_id}",
    response_model=UserResponse,
    summary="Delete a user",
    dependencies=[Depends(RequirePermissions(Permission.USER_DELETE))],
)
async def delete_user(user_id: str, users: Users) -> UserResponse:
    return _to_response(await users.delete(user_id))


@router.post(
    "/{user_id}/roles/{role_id}",
    response_model=UserResponse,
    summary="Assign a role",
    description="Takes effect in tokens issued after the change.",
    dependencies=[Depends(RequirePermissions(Permission.USER_UPDATE))],
)
async def assign_role(user_id: str, role_id: str, users: Users) -> UserResponse:
    return _to_response(await users.assign_role(user_id, role_id))


@router.delete(
    "/{user_id}/roles/{role_id}",
    response_model=UserResponse,
    summary="Remove a role",
    description="Tokens issued before the change keep the role until they expire.",
    dependencies=[Depends(RequirePermissions(Permission.USER_UPDATE))],
)
async def remove_role(user_id: str, role_id: str, users: Users) -> UserResponse:
    return _to_response(await users.remove_role(user_id, role_id))
