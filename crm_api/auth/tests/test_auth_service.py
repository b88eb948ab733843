"""Tests for AuthService against an in-memory MongoDB."""

import pytest

from crm_api.auth.schemas import ChangePasswordRequest, RegisterRequest
from crm_api.auth.service import AuthService
from crm_api.conftest import make_current_user
from crm_api.db.database import CollectionName
from crm_api.exceptions import AuthError, ConflictError, ValidationError

PASSWORD = "Sup3rSecret!"


@pytest.fixture
def service(database, auth_settings):
    return AuthService(database, auth_settings)


def register_request(**overrides):
    fields = {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "Ada@Example.com",
        "password": PASSWORD,
        "organizationName": "Acme Inc",
    }
    fields.update(overrides)
    return RegisterRequest.model_validate(fields)


class TestRegister:
    def test_creates_organization_and_admin(self, service, database):
        data = service.register(register_request())

        assert data.token
        assert data.user.email == "ada@example.com"
        assert data.user.role == "admin"
        assert data.organization.slug == "acme-inc"
        assert data.organization.plan == "starter"
        assert data.organization.status == "active"
        assert data.user.organization_id == data.organization.id

        stored = database.collection(CollectionName.USERS).find_one({})
        assert stored["password"] != PASSWORD

    def test_duplicate_email_conflicts(self, service):
        service.register(register_request())
        with pytest.raises(ConflictError, match="email"):
            service.register(register_request(organizationName="Other Org"))

    def test_duplicate_slug_conflicts(self, service):
        service.register(register_request())
        with pytest.raises(ConflictError, match="Organization"):
            service.register(register_request(email="b@example.com", organizationName="ACME inc!"))

    def test_unsluggable_name_is_rejected(self, service):
        with pytest.raises(ValidationError):
            service.register(register_request(organizationName="!!!"))

    def test_failed_user_insert_removes_organization(self, service, database, monkeypatch):
        def fail(document):
            raise RuntimeError("write failed")

        monkeypatch.setattr(service.users, "create", fail)

        with pytest.raises(RuntimeError):
            service.register(register_request())
        assert database.collection(CollectionName.ORGANIZATIONS).count_documents({}) == 0
        assert database.collection(CollectionName.USERS).count_documents({}) == 0


class TestLogin:
    def test_login_with_correct_password(self, service):
        service.register(register_request())
        data = service.login("ada@example.com", PASSWORD)

        assert data.token
        assert data.user.last_login_at is not None

    @pytest.mark.parametrize(
        "email,password",
        [("ada@example.com", "wrong-password"), ("nobody@example.com", PASSWORD)],
    )
    def test_bad_credentials_fail_identically(self, service, email, password):
        service.register(register_request())
        with pytest.raises(AuthError, match="Invalid credentials"):
            service.login(email, password)

    def test_inactive_user_cannot_login(self, service, database):
        service.register(register_request())
        database.collection(CollectionName.USERS).update_one({}, {"$set": {"isActive": False}})
        with pytest.raises(AuthError, match="Invalid credentials"):
            service.login("ada@example.com", PASSWORD)


class TestVerify:
    def test_verify_returns_fresh_state(self, service, database):
        data = service.register(register_request())
        database.collection(CollectionName.USERS).update_one(
            {}, {"$set": {"firstName": "Augusta"}}
        )

        session = service.verify_token(data.token)
        assert session.user.first_name == "Augusta"
        assert session.organization.id == data.organization.id

    def test_deactivated_user_token_is_rejected(self, service, database):
        data = service.register(register_request())
        database.collection(CollectionName.USERS).update_one({}, {"$set": {"isActive": False}})
        with pytest.raises(AuthError):
            service.verify_token(data.token)

    def test_deleted_user_token_is_rejected(self, service, database):
        data = service.register(register_request())
        database.collection(CollectionName.USERS).delete_many({})
        with pytest.raises(AuthError):
            service.authenticate(data.token)


class TestChangePassword:
    def test_wrong_current_password(self, service):
        data = service.register(register_request())
        caller = make_current_user(data.organization.id, user_id=data.user.id)
        request = ChangePasswordRequest.model_validate(
            {"currentPassword": "not-it-at-all", "newPassword": "N3wPassword!"}
        )
        with pytest.raises(ValidationError, match="Current password is incorrect"):
            service.change_password(caller, request)

    def test_new_password_takes_effect(self, service):
        data = service.register(register_request())
        caller = make_current_user(data.organization.id, user_id=data.user.id)
        service.change_password(
            caller,
            ChangePasswordRequest.model_validate(
                {"currentPassword": PASSWORD, "newPassword": "N3wPassword!"}
            ),
        )

        with pytest.raises(AuthError):
            service.login("ada@example.com", PASSWORD)
        assert service.login("ada@example.com", "N3wPassword!").token
