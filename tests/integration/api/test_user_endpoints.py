"""Integration tests for the user management endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest


if TYPE_CHECKING:
    from httpx import AsyncClient


pytestmark = pytest.mark.integration

USERS = "/api/v1/user"

NEW_USER = {
    "email": "carol@example.com",
    "password": "Sup3r!Secret",
    "firstName": "Carol",
    "lastName": "Jones",
}


class TestCreateUser:
    """Tests for POST /user/create."""

    async def test_admin_creates_user(self, client: AsyncClient, admin_headers) -> None:
        """Should create the user and never return the password hash."""
        response = await client.post(f"{USERS}/create", json=NEW_USER, headers=admin_headers)

        body = response.json()
        assert response.status_code == 201
        assert body["email"] == "carol@example.com"
        assert body["firstName"] == "Carol"
        assert body["isActive"] is True
        assert body["roles"] == []
        assert "password" not in body
        assert "passwordHash" not in body

    async def test_duplicate_email(self, client: AsyncClient, admin_headers) -> None:
        """Should return 409 for an email already in use."""
        await client.post(f"{USERS}/create", json=NEW_USER, headers=admin_headers)

        response = await client.post(f"{USERS}/create", json=NEW_USER, headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "CONFLICT"

    async def test_validation_error(self, client: AsyncClient, admin_headers) -> None:
        """Should return 422 for a body failing validation."""
        response = await client.post(
            f"{USERS}/create", json={"email": "bad"}, headers=admin_headers
        )

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    async def test_plain_user_is_forbidden(self, client: AsyncClient, user_headers) -> None:
        """Should return 403 naming the missing permission."""
        response = await client.post(f"{USERS}/create", json=NEW_USER, headers=user_headers)

        body = response.json()
        assert response.status_code == 403
        assert body["error"] == "FORBIDDEN"
        assert "user:create" in body["message"]

    async def test_requires_token(self, client: AsyncClient) -> None:
        """Should return 401 without a token."""
        response = await client.post(f"{USERS}/create", json=NEW_USER)

        assert response.status_code == 401


class TestReadUsers:
    """Tests for the user read endpoints."""

    async def test_list(self, client: AsyncClient, admin_headers, make_user) -> None:
        """Should list every user."""
        await make_user("dave@example.com", "user")

        response = await client.get(f"{USERS}/all", headers=admin_headers)

        emails = {u["email"] for u in response.json()}
        assert response.status_code == 200
        assert {"admin@example.com", "dave@example.com"} <= emails

    async def test_get_by_id(self, client: AsyncClient, admin_headers, make_user) -> None:
        """Should return the user with its roles."""
        user = await make_user("dave@example.com", "user")

        response = await client.get(f"{USERS}/{user.id}", headers=admin_headers)

        body = response.json()
        assert response.status_code == 200
        assert [r["name"] for r in body["roles"]] == ["user"]

    async def test_unknown_id(self, client: AsyncClient, admin_headers) -> None:
        """Should return 404 for an unknown id."""
        response = await client.get(f"{USERS}/missing", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    async def test_profile(self, client: AsyncClient, user_headers) -> None:
        """Should return the caller's own account."""
        response = await client.get(f"{USERS}/profile", headers=user_headers)

        assert response.status_code == 200
        assert response.json()["email"] == "user@example.com"


class TestModifyUsers:
    """Tests for update, delete and role assignment."""

    async def test_update(self, client: AsyncClient, admin_headers, make_user) -> None:
        """Should apply a partial update."""
        user = await make_user("dave@example.com")

        response = await client.patch(
            f"{USERS}/{user.id}", json={"firstName": "David"}, headers=admin_headers
        )

        body = response.json()
        assert response.status_code == 200
        assert body["firstName"] == "David"
        assert body["lastName"] == "User"

    async def test_delete(self, client: AsyncClient, admin_headers, make_user) -> None:
        """Should delete the user."""
        user = await make_user("dave@example.com")

        response = await client.delete(f"{USERS}/{user.id}", headers=admin_headers)
        follow_up = await client.get(f"{USERS}/{user.id}", headers=admin_headers)

        assert response.status_code == 200
        assert follow_up.status_code == 404

    async def test_assign_and_remove_role(
        self, client: AsyncClient, admin_headers, make_user, seeded_container
    ) -> None:
        """Should add and remove a role on the user."""
        user = await make_user("dave@example.com")
        role = await seeded_container.roles.find_by_name("user_manager")

        assigned = await client.post(
            f"{USERS}/{user.id}/roles/{role.id}", headers=admin_headers
        )
        removed = await client.delete(
            f"{USERS}/{user.id}/roles/{role.id}", headers=admin_headers
        )

        assert [r["name"] for r in assigned.json()["roles"]] == ["user_manager"]
        assert removed.json()["roles"] == []

    async def test_assign_unknown_role(
        self, client: AsyncClient, admin_headers, make_user
    ) -> None:
        """Should return 404 for an unknown role."""
        user = await make_user("dave@example.com")

        response = await client.post(f"{USERS}/{user.id}/roles/missing", headers=admin_headers)

        assert response.status_code == 404
