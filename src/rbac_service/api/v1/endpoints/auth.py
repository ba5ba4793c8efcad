"""Authentication endpoints.

Provides:
- POST /auth/login exchanging credentials for an access token
- GET /auth/me returning the claims of the caller's token
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from rbac_service.api.dependencies import get_services
from rbac_service.auth.dependencies import get_current_claims
from rbac_service.auth.jwt import TokenClaims
from rbac_service.core.container import ServiceContainer
from rbac_service.schemas.auth import ClaimsResponse, LoginRequest, TokenResponse


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    description="Verify email and password and issue a signed access token.",
    responses={
        400: {"description": "Email or password missing or malformed"},
        401: {"description": "Invalid credentials"},
    },
)
async def login(
    body: LoginRequest,
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> TokenResponse:
    """Exchange credentials for an access token.

    Unknown email, wrong password and inactive account are indistinguishable
    to the caller.
    """
    user = await services.credentials.validate(body.email, body.password)
    issued = await services.issuer.issue(user.email)
    return TokenResponse(access_token=issued.access_token, expires_in=issued.expires_in)


@router.get(
    "/me",
    response_model=ClaimsResponse,
    summary="Current claims",
    description="Return the roles and permissions embedded in the caller's token.",
)
async def me(claims: Annotated[TokenClaims, Depends(get_current_claims)]) -> ClaimsResponse:
    return ClaimsResponse(
        email=claims.email,
        user_id=claims.user_id,
        roles=claims.roles,
        permissions=claims.permissions,
        is_active=claims.is_active,
        issued_at=claims.issued_at,
        expires_at=claims.expires_at,
    )
