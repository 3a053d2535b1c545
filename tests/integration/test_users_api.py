# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Integration tests for auth, user and permission catalogue endpoints."""

from src.rbac.permissions import CATALOGUE_VERSION


class TestAuthEndpoints:
    def test_login_and_me(self, client, test_user):
        response = client.post(
            "/api/v1/auth/login",
            json={"username": "testuser", "password": "testpassword123"},
        )
        assert response.status_code == 200
        assert "session" in response.cookies

        me = client.get("/api/v1/auth/me")
        assert me.status_code == 200
        assert me.json()["user"]["username"] == "testuser"
        assert "hashed_password" not in me.text

    def test_login_wrong_password(self, client, test_user):
        response = client.post(
            "/api/v1/auth/login",
            json={"username": "testuser", "password": "nope-nope"},
        )
        assert response.status_code == 401

    def test_logout_ends_session(self, authenticated_client):
        assert authenticated_client.post("/api/v1/auth/logout").status_code == 204
        assert authenticated_client.get("/api/v1/auth/me").status_code == 401


class TestUserEndpoints:
    def test_plain_user_lists_only_self(self, authenticated_client, other_user):
        data = authenticated_client.get("/api/v1/users").json()
        assert [u["username"] for u in data] == ["testuser"]

    def test_create_requires_super_admin(self, admin_client):
        response = admin_client.post(
            "/api/v1/users",
            json={
                "username": "newbie",
                "email": "newbie@example.com",
                "password": "longenough",
            },
        )
        assert response.status_code == 403

    def test_super_admin_creates_user(self, super_admin_client):
        response = super_admin_client.post(
            "/api/v1/users",
            json={
                "username": "newbie",
                "email": "newbie@example.com",
                "password": "longenough",
                "permissions": ["financial.invoices"],
            },
        )
        assert response.status_code == 201
        assert response.json()["permissions"] == ["financial.invoices"]

    def test_duplicate_username_409(self, super_admin_client, test_user):
        response = super_admin_client.post(
            "/api/v1/users",
            json={
                "username": "testuser",
                "email": "other@example.com",
                "password": "longenough",
            },
        )
        assert response.status_code == 409

    def test_role_change_keeps_shape(self, super_admin_client, test_user):
        response = super_admin_client.put(
            f"/api/v1/users/{test_user.id}/role",
            json={"role": "admin", "permissions": ["tools.credentials"]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "admin"
        assert data["admin_sub_role"] == "admin"
        assert data["permissions"] == []

    def test_role_change_by_admin_403(self, admin_client, test_user):
        response = admin_client.put(
            f"/api/v1/users/{test_user.id}/role", json={"role": "admin"}
        )
        assert response.status_code == 403

    def test_unknown_token_400(self, super_admin_client, test_user):
        response = super_admin_client.put(
            f"/api/v1/users/{test_user.id}/permissions",
            json={"permissions": ["tools.warp_drive"]},
        )
        assert response.status_code == 400

    def test_stale_version_409(self, super_admin_client, test_user):
        url = f"/api/v1/users/{test_user.id}/permissions"
        assert (
            super_admin_client.put(
                url, json={"permissions": ["general.dashboard"], "version": 1}
            ).status_code
            == 200
        )
        response = super_admin_client.put(
            url, json={"permissions": ["general.settings"], "version": 1}
        )
        assert response.status_code == 409

    def test_deactivate(self, super_admin_client, other_user):
        response = super_admin_client.delete(f"/api/v1/users/{other_user.id}")
        assert response.status_code == 200
        assert response.json()["is_active"] is False

    def test_last_super_admin_cannot_demote_self(
        self, super_admin_client, super_admin_user
    ):
        response = super_admin_client.put(
            f"/api/v1/users/{super_admin_user.id}/role",
            json={"role": "accountant"},
        )
        assert response.status_code == 400


class TestPermissionCatalogue:
    def test_catalogue(self, authenticated_client):
        response = authenticated_client.get("/api/v1/permissions")
        assert response.status_code == 200
        data = response.json()
        assert data["version"] == CATALOGUE_VERSION
        assert set(data["roles"]) == {"admin", "accountant", "user"}
        codes = {p["code"] for p in data["permissions"]}
        assert "tools.credentials" in codes
        assert "financial.invoices" in codes


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
