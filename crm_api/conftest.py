"""Shared fixtures: an in-memory MongoDB, the app and authenticated clients."""

import uuid

import mongomock
import pytest
from fastapi.testclient import TestClient

from crm_api.auth.config import AuthSettings
from crm_api.auth.schemas import CurrentUser
from crm_api.config import AppSettings, Environment, set_app_settings
from crm_api.db.config import DatabaseSettings
from crm_api.db.database import MongoDatabase
from crm_api.main import create_app
from crm_api.middleware import limiter

TEST_PASSWORD = "Sup3rSecret!"


@pytest.fixture
def app_settings():
    settings = AppSettings(environment=Environment.TEST, rate_limit_enabled=False)
    set_app_settings(settings)
    return settings


@pytest.fixture
def auth_settings():
    # Minimum bcrypt cost keeps hashing fast
    return AuthSettings(jwt_secret="test-secret-key-for-unit-tests", bcrypt_rounds=4)


@pytest.fixture
def database():
    """MongoDatabase backed by mongomock, with indexes created."""
    db = MongoDatabase(
        DatabaseSettings(url="mongodb://localhost:27017", name=f"crm_test_{uuid.uuid4().hex}"),
        client=mongomock.MongoClient(),
    )
    db.create_indexes()
    return db


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def app(app_settings, auth_settings, database):
    return create_app(
        app_settings=app_settings, auth_settings=auth_settings, database=database
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register an organization and return ``(headers, data)`` for its admin."""

    def _register(
        organization_name="Acme Corp",
        email="admin@acme.com",
        first_name="Ada",
        last_name="Admin",
    ):
        response = client.post(
            "/api/auth/register",
            json={
                "firstName": first_name,
                "lastName": last_name,
                "email": email,
                "password": TEST_PASSWORD,
                "organizationName": organization_name,
            },
        )
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {"Authorization": f"Bearer {data['token']}"}, data

    return _register


@pytest.fixture
def admin(register):
    """Headers and session data for the admin of "Acme Corp"."""
    return register()


@pytest.fixture
def admin_headers(admin):
    return admin[0]


@pytest.fixture
def other_tenant(register):
    """Headers and session data for the admin of a second organization."""
    return register(organization_name="Globex", email="admin@globex.com")


@pytest.fixture
def add_member(client, admin_headers):
    """Create a team member in the admin's organization and sign them in."""

    def _add_member(role, email=None):
        email = email or f"{role}@acme.com"
        response = client.post(
            "/api/users",
            headers=admin_headers,
            json={
                "firstName": "Team",
                "lastName": "Member",
                "email": email,
                "password": TEST_PASSWORD,
                "role": role,
            },
        )
        assert response.status_code == 201, response.text
        login = client.post(
            "/api/auth/login", json={"email": email, "password": TEST_PASSWORD}
        )
        assert login.status_code == 200, login.text
        data = login.json()["data"]
        return {"Authorization": f"Bearer {data['token']}"}, data

    return _add_member


def make_current_user(organization_id, user_id="0123456789abcdef01234567", role="admin"):
    """CurrentUser for calling services directly."""
    return CurrentUser(
        id=user_id,
        email="caller@example.com",
        first_name="Test",
        last_name="Caller",
        role=role,
        organization_id=organization_id,
    )
