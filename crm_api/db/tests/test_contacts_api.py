"""Tests for the /api/contacts routes."""

import pytest

MISSING_ID = "0123456789abcdef01234567"


@pytest.fixture
def create_contact(client, admin_headers):
    def _create(headers=None, **fields):
        body = {"firstName": "John", "lastName": "Doe", **fields}
        response = client.post("/api/contacts", headers=headers or admin_headers, json=body)
        assert response.status_code == 201, response.text
        return response.json()["data"]["contact"]

    return _create


class TestCreateContact:
    def test_defaults(self, client, admin, create_contact):
        _, session = admin
        contact = create_contact(email="John@Example.com", tags=["vip"])

        assert contact["name"] == "John Doe"
        assert contact["email"] == "john@example.com"
        assert contact["status"] == "lead"
        assert contact["tags"] == ["vip"]
        assert contact["assignedTo"] == session["user"]["id"]
        assert contact["createdAt"].endswith("Z")

    def test_company_name_is_resolved(self, client, admin_headers, create_contact):
        company = client.post(
            "/api/companies", headers=admin_headers, json={"name": "Initech"}
        ).json()["data"]["company"]

        contact = create_contact(companyId=company["id"])

        assert contact["companyId"] == company["id"]
        assert contact["companyName"] == "Initech"

    def test_unknown_company_is_404(self, client, admin_headers):
        response = client.post(
            "/api/contacts",
            headers=admin_headers,
            json={"firstName": "John", "lastName": "Doe", "companyId": MISSING_ID},
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Company not found"

    def test_missing_name_is_400(self, client, admin_headers):
        response = client.post("/api/contacts", headers=admin_headers, json={"lastName": "Doe"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_markup_is_stripped(self, create_contact):
        contact = create_contact(notes="<b>met at expo</b>")
        assert contact["notes"] == "bmet at expo/b"

    def test_duplicate_email_within_tenant_is_409(self, client, admin_headers, create_contact):
        create_contact(email="john@example.com")
        response = client.post(
            "/api/contacts",
            headers=admin_headers,
            json={"firstName": "Johnny", "lastName": "Doe", "email": "JOHN@example.com"},
        )
        assert response.status_code == 409

    def test_same_email_in_another_tenant_is_allowed(self, create_contact, other_tenant):
        other_headers, _ = other_tenant
        create_contact(email="john@example.com")
        contact = create_contact(headers=other_headers, email="john@example.com")
        assert contact["email"] == "john@example.com"


class TestListContacts:
    def test_pagination_and_ordering(self, client, admin_headers, create_contact):
        for index in range(5):
            create_contact(firstName=f"Person{index}")

        response = client.get("/api/contacts?page=2&limit=2", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}
        assert len(data["contacts"]) == 2

    def test_invalid_pagination_falls_back(self, client, admin_headers, create_contact):
        create_contact()
        response = client.get("/api/contacts?page=abc&limit=1000", headers=admin_headers)

        pagination = response.json()["data"]["pagination"]
        assert pagination["page"] == 1
        assert pagination["limit"] == 100

    def test_huge_page_is_capped(self, client, admin_headers, create_contact):
        create_contact()
        response = client.get(
            "/api/contacts?page=99999999999999999999", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["contacts"] == []
        assert response.json()["data"]["pagination"]["page"] == 10_000

    def test_search_and_status_filters(self, client, admin_headers, create_contact):
        create_contact(firstName="Alice", jobTitle="CTO", status="customer")
        create_contact(firstName="Bob", jobTitle="Engineer")

        by_search = client.get("/api/contacts?search=cto", headers=admin_headers).json()
        assert [c["firstName"] for c in by_search["data"]["contacts"]] == ["Alice"]

        by_status = client.get("/api/contacts?status=lead", headers=admin_headers).json()
        assert [c["firstName"] for c in by_status["data"]["contacts"]] == ["Bob"]

    def test_search_with_regex_characters_is_literal(self, client, admin_headers, create_contact):
        create_contact(firstName="Alice")
        response = client.get("/api/contacts?search=.*", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["contacts"] == []

    def test_company_filter(self, client, admin_headers, create_contact):
        company = client.post(
            "/api/companies", headers=admin_headers, json={"name": "Initech"}
        ).json()["data"]["company"]
        create_contact(firstName="Peter", companyId=company["id"])
        create_contact(firstName="Bill")

        response = client.get(f"/api/contacts?companyId={company['id']}", headers=admin_headers)
        assert [c["firstName"] for c in response.json()["data"]["contacts"]] == ["Peter"]


class TestContactById:
    def test_get(self, client, admin_headers, create_contact):
        contact = create_contact()
        response = client.get(f"/api/contacts/{contact['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["contact"]["id"] == contact["id"]

    def test_invalid_id_is_400(self, client, admin_headers):
        response = client.get("/api/contacts/not-an-id", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid contact ID"

    def test_id_with_trailing_newline_is_400(self, client, admin_headers):
        response = client.get(f"/api/contacts/{MISSING_ID}%0A", headers=admin_headers)
        assert response.status_code == 400

    def test_company_reference_with_trailing_newline_is_400(self, client, admin_headers):
        response = client.post(
            "/api/contacts",
            headers=admin_headers,
            json={"firstName": "John", "lastName": "Doe", "companyId": MISSING_ID + "\n"},
        )
        assert response.status_code == 400

    def test_missing_is_404(self, client, admin_headers):
        response = client.get(f"/api/contacts/{MISSING_ID}", headers=admin_headers)
        assert response.status_code == 404

    def test_partial_update(self, client, admin_headers, create_contact):
        contact = create_contact(phone="555-0100", jobTitle="CTO")
        response = client.put(
            f"/api/contacts/{contact['id']}",
            headers=admin_headers,
            json={"jobTitle": "CEO", "phone": None, "firstName": None},
        )

        assert response.status_code == 200
        updated = response.json()["data"]["contact"]
        assert updated["jobTitle"] == "CEO"
        assert updated["phone"] is None
        assert updated["firstName"] == "John"
        assert updated["lastName"] == "Doe"

    def test_update_to_taken_email_is_409(self, client, admin_headers, create_contact):
        create_contact(email="taken@example.com")
        contact = create_contact(firstName="Jane", email="jane@example.com")

        response = client.put(
            f"/api/contacts/{contact['id']}",
            headers=admin_headers,
            json={"email": "taken@example.com"},
        )
        assert response.status_code == 409

    def test_delete(self, client, admin_headers, create_contact):
        contact = create_contact()

        response = client.delete(f"/api/contacts/{contact['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Contact deleted successfully"

        again = client.delete(f"/api/contacts/{contact['id']}", headers=admin_headers)
        assert again.status_code == 404


class TestContactPermissions:
    def test_viewer_can_read_but_not_write(self, client, add_member, create_contact):
        viewer_headers, _ = add_member("viewer")
        contact = create_contact()

        assert client.get("/api/contacts", headers=viewer_headers).status_code == 200
        create = client.post(
            "/api/contacts",
            headers=viewer_headers,
            json={"firstName": "No", "lastName": "Access"},
        )
        assert create.status_code == 403
        delete = client.delete(f"/api/contacts/{contact['id']}", headers=viewer_headers)
        assert delete.status_code == 403

    def test_sales_rep_can_write(self, add_member, create_contact):
        rep_headers, rep = add_member("sales_rep")
        contact = create_contact(headers=rep_headers)
        assert contact["assignedTo"] == rep["user"]["id"]
