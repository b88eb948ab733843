"""Tests for the /api/auth routes."""

import pytest
from fastapi.testclient import TestClient

from crm_api.config import AppSettings, Environment, set_app_settings
from crm_api.conftest import TEST_PASSWORD
from crm_api.main import create_app


class TestRegisterAndLogin:
    def test_register_returns_token_user_and_organization(self, client):
        response = client.post(
            "/api/auth/register",
            json={
                "firstName": "Ada",
                "lastName": "Lovelace",
                "email": "ADA@Example.com",
                "password": TEST_PASSWORD,
                "organizationName": "Acme Inc",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Registration successful"
        data = body["data"]
        assert data["token"]
        assert data["user"]["email"] == "ada@example.com"
        assert data["user"]["role"] == "admin"
        assert "password" not in data["user"]
        assert data["organization"]["slug"] == "acme-inc"
        assert data["organization"]["settings"]["currency"] == "USD"
        assert data["user"]["createdAt"].endswith("Z")

    def test_register_validation_error_is_400(self, client):
        response = client.post(
            "/api/auth/register",
            json={
                "firstName": "A",
                "lastName": "Lovelace",
                "email": "not-an-email",
                "password": "short",
                "organizationName": "Acme",
            },
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert "email" in body["message"]

    def test_register_duplicate_email_is_409(self, client, register):
        register()
        response = client.post(
            "/api/auth/register",
            json={
                "firstName": "Ada",
                "lastName": "Again",
                "email": "admin@acme.com",
                "password": TEST_PASSWORD,
                "organizationName": "Another Org",
            },
        )

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "User with this email already exists",
        }

    def test_login(self, client, register):
        register()
        response = client.post(
            "/api/auth/login",
            json={"email": "Admin@Acme.com", "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"]
        assert data["user"]["lastLoginAt"] is not None

    def test_login_wrong_password_is_401(self, client, register):
        register()
        response = client.post(
            "/api/auth/login",
            json={"email": "admin@acme.com", "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"


class TestSession:
    def test_verify(self, client, admin):
        headers, data = admin
        response = client.get("/api/auth/verify", headers=headers)

        assert response.status_code == 200
        body = response.json()["data"]
        assert body["user"]["id"] == data["user"]["id"]
        assert body["organization"]["id"] == data["organization"]["id"]

    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Bearer garbage"}, {"Authorization": "Basic abc"}],
    )
    def test_protected_route_rejects_bad_credentials(self, client, headers):
        response = client.get("/api/contacts", headers=headers)

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_profile_update(self, client, admin_headers):
        response = client.put(
            "/api/auth/profile",
            headers=admin_headers,
            json={"firstName": "Grace", "email": "grace@acme.com"},
        )

        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["firstName"] == "Grace"
        assert user["email"] == "grace@acme.com"

        profile = client.get("/api/auth/profile", headers=admin_headers).json()["data"]
        assert profile["user"]["firstName"] == "Grace"
        assert profile["organization"]["name"] == "Acme Corp"

    def test_profile_email_taken_is_409(self, client, admin_headers, other_tenant):
        response = client.put(
            "/api/auth/profile",
            headers=admin_headers,
            json={"email": "admin@globex.com"},
        )

        assert response.status_code == 409

    def test_change_password(self, client, admin_headers):
        wrong = client.post(
            "/api/auth/change-password",
            headers=admin_headers,
            json={"currentPassword": "nope-nope", "newPassword": "N3wPassword!"},
        )
        assert wrong.status_code == 400

        ok = client.post(
            "/api/auth/change-password",
            headers=admin_headers,
            json={"currentPassword": TEST_PASSWORD, "newPassword": "N3wPassword!"},
        )
        assert ok.status_code == 200

        login = client.post(
            "/api/auth/login",
            json={"email": "admin@acme.com", "password": "N3wPassword!"},
        )
        assert login.status_code == 200

    def test_deactivated_user_is_locked_out_immediately(self, client, admin_headers, add_member):
        member_headers, member = add_member("sales_rep")
        assert client.get("/api/contacts", headers=member_headers).status_code == 200

        response = client.patch(
            f"/api/users/{member['user']['id']}",
            headers=admin_headers,
            json={"isActive": False},
        )
        assert response.status_code == 200

        assert client.get("/api/contacts", headers=member_headers).status_code == 401


class TestRateLimit:
    def test_login_attempts_are_limited(self, auth_settings, database):
        settings = AppSettings(
            environment=Environment.TEST, rate_limit_enabled=True, rate_limit_auth="3/minute"
        )
        set_app_settings(settings)
        app = create_app(app_settings=settings, auth_settings=auth_settings, database=database)

        with TestClient(app) as client:
            statuses = [
                client.post(
                    "/api/auth/login",
                    json={"email": "nobody@acme.com", "password": "whatever-pass"},
                ).status_code
                for _ in range(4)
            ]

        assert statuses == [401, 401, 401, 429]

    def test_health_is_exempt(self, auth_settings, database):
        settings = AppSettings(
            environment=Environment.TEST, rate_limit_enabled=True, rate_limit_default="2/minute"
        )
        set_app_settings(settings)
        app = create_app(app_settings=settings, auth_settings=auth_settings, database=database)

        with TestClient(app) as client:
            statuses = {client.get("/api/health").status_code for _ in range(5)}

        assert statuses == {200}
