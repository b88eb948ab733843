"""
Unit tests for TenantRepository.

Uses the contacts collection through ContactRepository; the scoping rules
are shared by every tenant-owned collection.
"""

import pytest
from bson import ObjectId

from crm_api.db.contacts.repository import ContactRepository
from crm_api.db.organizations.repository import OrganizationRepository
from crm_api.exceptions import ConflictError, ForbiddenError, NotFoundError
from crm_api.utils.sanitizer import sanitize_pagination

ORG_A = str(ObjectId())
ORG_B = str(ObjectId())


@pytest.fixture
def repository(database):
    return ContactRepository(database)


@pytest.fixture
def seeded(repository):
    """Three contacts in ORG_A and one in ORG_B."""
    a = [
        repository.create(ORG_A, {"firstName": name, "lastName": "Smith", "status": "lead"})
        for name in ("Alice", "Bob", "Carol")
    ]
    b = repository.create(ORG_B, {"firstName": "Mallory", "lastName": "Smith", "status": "lead"})
    return a, b


class TestScoping:
    def test_create_stamps_tenant_and_timestamps(self, repository):
        contact = repository.create(ORG_A, {"firstName": "Alice", "lastName": "Smith"})

        assert contact["organizationId"] == ORG_A
        assert contact["createdAt"] == contact["updatedAt"]

    def test_create_ignores_caller_supplied_tenant(self, repository):
        contact = repository.create(
            ORG_A, {"firstName": "Eve", "lastName": "Smith", "organizationId": ORG_B}
        )
        assert contact["organizationId"] == ORG_A

    def test_empty_organization_is_forbidden(self, repository):
        with pytest.raises(ForbiddenError):
            repository.find("")
        with pytest.raises(ForbiddenError):
            repository.count(None)

    def test_find_and_count_stay_in_tenant(self, repository, seeded):
        assert repository.count(ORG_A) == 3
        assert repository.count(ORG_B) == 1
        names = {doc["firstName"] for doc in repository.find(ORG_A, {"lastName": "Smith"})}
        assert names == {"Alice", "Bob", "Carol"}

    def test_query_cannot_widen_scope(self, repository, seeded):
        assert repository.count(ORG_A, {"organizationId": ORG_B}) == 3

    def test_other_tenant_document_is_invisible(self, repository, seeded):
        _, mallory = seeded
        mallory_id = str(mallory["_id"])

        assert repository.find_by_id(ORG_A, mallory_id) is None
        with pytest.raises(NotFoundError, match="Contact not found"):
            repository.get(ORG_A, mallory_id)
        assert repository.update_by_id(ORG_A, mallory_id, {"firstName": "Hacked"}) is None
        assert repository.delete_by_id(ORG_A, mallory_id) is False
        assert repository.get(ORG_B, mallory_id)["firstName"] == "Mallory"

    def test_update_cannot_move_document_between_tenants(self, repository, seeded):
        alice = seeded[0][0]
        updated = repository.update_by_id(
            ORG_A, str(alice["_id"]), {"organizationId": ORG_B, "firstName": "Alicia"}
        )

        assert updated["organizationId"] == ORG_A
        assert updated["firstName"] == "Alicia"
        assert updated["updatedAt"] >= updated["createdAt"]

    def test_malformed_ids_behave_as_missing(self, repository):
        assert repository.find_by_id(ORG_A, "not-an-id") is None
        assert repository.delete_by_id(ORG_A, "not-an-id") is False


class TestPaginate:
    def test_last_partial_page(self, repository, seeded):
        documents, total = repository.paginate(
            ORG_A, {}, sanitize_pagination(2, 2), sort=[("firstName", 1)]
        )

        assert total == 3
        assert [doc["firstName"] for doc in documents] == ["Carol"]

    def test_page_past_the_end_is_empty(self, repository, seeded):
        documents, total = repository.paginate(ORG_A, {}, sanitize_pagination(5, 2))
        assert documents == []
        assert total == 3

    def test_search_filter_is_case_insensitive(self, repository, seeded):
        documents, total = repository.paginate(
            ORG_A, repository.search_filter("ali"), sanitize_pagination()
        )
        assert total == 1
        assert documents[0]["firstName"] == "Alice"


class TestHelpers:
    def test_find_by_ids_skips_foreign_and_malformed(self, repository, seeded):
        (alice, bob, _), mallory = seeded
        found = repository.find_by_ids(
            ORG_A,
            {str(alice["_id"]), str(bob["_id"]), str(mallory["_id"]), "junk"},
            ("firstName",),
        )
        assert set(found) == {str(alice["_id"]), str(bob["_id"])}

    def test_count_by_field(self, repository, seeded):
        repository.update_by_id(ORG_A, str(seeded[0][0]["_id"]), {"status": "customer"})
        counts = repository.count_by_field(ORG_A, "status", ["lead", "customer", "inactive"])
        assert counts == {"lead": 2, "customer": 1}


class TestUniqueIndexes:
    def test_duplicate_slug_raises_conflict(self, database):
        organizations = OrganizationRepository(database)
        organizations.create({"name": "Acme", "slug": "acme"})
        with pytest.raises(ConflictError):
            organizations.create({"name": "ACME", "slug": "acme"})
