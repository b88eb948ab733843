"""
Generic repositories over MongoDB collections.

``BaseRepository`` serves global collections (organizations, users).
``TenantRepository`` serves tenant-owned collections: every public method
takes the caller's organization id and applies it as a mandatory filter.
"""

from typing import Any

from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from crm_api.db.database import CollectionName, MongoDatabase
from crm_api.exceptions import ConflictError, ForbiddenError, NotFoundError
from crm_api.utils.dates import utc_now
from crm_api.utils.sanitizer import Pagination, to_object_id

Document = dict[str, Any]
Sort = list[tuple[str, int]]


class _MongoRepository:
    collection_name: CollectionName
    duplicate_message: str = "Resource already exists"

    def __init__(self, database: MongoDatabase):
        """
        Initialize the repository.

        Args:
            database: Shared MongoDB adapter
        """
        self.database = database

    @property
    def collection(self) -> Collection:
        return self.database.collection(self.collection_name)

    def _insert(self, document: Document) -> Document:
        now = utc_now()
        document = {**document, "createdAt": now, "updatedAt": now}
        try:
            self.collection.insert_one(document)
        except DuplicateKeyError as e:
            raise ConflictError(self.duplicate_message) from e
        return document

    def _find(
        self,
        query: Document,
        sort: Sort | None = None,
        skip: int = 0,
        limit: int = 0,
        projection: Document | None = None,
    ) -> list[Document]:
        cursor = self.collection.find(query, projection)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def _update_one(self, query: Document, changes: Document) -> Document | None:
        try:
            return self.collection.find_one_and_update(
                query,
                {"$set": {**changes, "updatedAt": utc_now()}},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise ConflictError(self.duplicate_message) from e


class BaseRepository(_MongoRepository):
    """CRUD over a collection that is not owned by a single tenant."""

    def create(self, document: Document) -> Document:
        """
        Insert a document, stamping createdAt/updatedAt.

        Args:
            document: Fields to store; may already carry an ``_id``

        Returns:
            Document: The stored document including ``_id``

        Raises:
            ConflictError: If a unique index rejects the document
        """
        return self._insert(document)

    def find(
        self,
        query: Document | None = None,
        sort: Sort | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Document]:
        return self._find(query or {}, sort=sort, skip=skip, limit=limit)

    def find_one(self, query: Document) -> Document | None:
        return self.collection.find_one(query)

    def find_by_id(self, document_id: str) -> Document | None:
        object_id = to_object_id(document_id)
        if object_id is None:
            return None
        return self.collection.find_one({"_id": object_id})

    def update_by_id(self, document_id: str, changes: Document) -> Document | None:
        """
        Merge ``changes`` into a document and refresh updatedAt.

        Returns:
            Document | None: The updated document, or None if it does not exist
        """
        object_id = to_object_id(document_id)
        if object_id is None:
            return None
        return self._update_one({"_id": object_id}, changes)

    def delete_by_id(self, document_id: str) -> bool:
        object_id = to_object_id(document_id)
        if object_id is None:
            return False
        return self.collection.delete_one({"_id": object_id}).deleted_count == 1

    def count(self, query: Document | None = None) -> int:
        return self.collection.count_documents(query or {})

    def exists(self, query: Document) -> bool:
        return self.collection.find_one(query, {"_id": 1}) is not None


class TenantRepository(_MongoRepository):
    """CRUD over a collection whose documents belong to one organization."""

    entity_label: str = "Resource"
    search_fields: tuple[str, ...] = ()

    def scoped(self, organization_id: str, query: Document | None = None) -> Document:
        """
        Attach the tenant filter to ``query``.

        The organization id is applied last so a caller supplied
        ``organizationId`` can never widen the scope.

        Raises:
            ForbiddenError: If no organization id is given
        """
        if not organization_id:
            raise ForbiddenError("Organization context required")
        return {**(query or {}), "organizationId": organization_id}

    def _scoped_id(self, organization_id: str, document_id: str) -> Document | None:
        object_id = to_object_id(document_id)
        if object_id is None:
            return None
        return self.scoped(organization_id, {"_id": object_id})

    def search_filter(self, pattern: str | None) -> Document:
        """
        Case-insensitive substring match over ``search_fields``.

        Args:
            pattern: Already sanitized and regex-escaped search term
        """
        if not pattern or not self.search_fields:
            return {}
        return {
            "$or": [
                {field: {"$regex": pattern, "$options": "i"}}
                for field in self.search_fields
            ]
        }

    def create(self, organization_id: str, document: Document) -> Document:
        return self._insert(self.scoped(organization_id, document))

    def find(
        self,
        organization_id: str,
        query: Document | None = None,
        sort: Sort | None = None,
        skip: int = 0,
        limit: int = 0,
        projection: Document | None = None,
    ) -> list[Document]:
        return self._find(
            self.scoped(organization_id, query),
            sort=sort,
            skip=skip,
            limit=limit,
            projection=projection,
        )

    def find_one(self, organization_id: str, query: Document) -> Document | None:
        return self.collection.find_one(self.scoped(organization_id, query))

    def find_by_id(self, organization_id: str, document_id: str) -> Document | None:
        query = self._scoped_id(organization_id, document_id)
        if query is None:
            return None
        return self.collection.find_one(query)

    def get(self, organization_id: str, document_id: str) -> Document:
        """
        Fetch a document that must exist inside the tenant.

        Raises:
            NotFoundError: If absent, or owned by another organization
        """
        document = self.find_by_id(organization_id, document_id)
        if document is None:
            raise NotFoundError(f"{self.entity_label} not found")
        return document

    def update_by_id(
        self, organization_id: str, document_id: str, changes: Document
    ) -> Document | None:
        query = self._scoped_id(organization_id, document_id)
        if query is None:
            return None
        changes = {key: value for key, value in changes.items() if key != "organizationId"}
        return self._update_one(query, changes)

    def delete_by_id(self, organization_id: str, document_id: str) -> bool:
        query = self._scoped_id(organization_id, document_id)
        if query is None:
            return False
        return self.collection.delete_one(query).deleted_count == 1

    def count(self, organization_id: str, query: Document | None = None) -> int:
        return self.collection.count_documents(self.scoped(organization_id, query))

    def exists(self, organization_id: str, query: Document) -> bool:
        return (
            self.collection.find_one(self.scoped(organization_id, query), {"_id": 1})
            is not None
        )

    def paginate(
        self,
        organization_id: str,
        query: Document | None,
        pagination: Pagination,
        sort: Sort | None = None,
    ) -> tuple[list[Document], int]:
        """
        Fetch one page of matching documents.

        Returns:
            tuple: (documents on the page, total matching documents)
        """
        documents = self.find(
            organization_id,
            query,
            sort=sort,
            skip=pagination.skip,
            limit=pagination.limit,
        )
        return documents, self.count(organization_id, query)

    def find_by_ids(
        self, organization_id: str, document_ids: set[str], fields: tuple[str, ...]
    ) -> dict[str, Document]:
        """
        Look up several documents of this tenant at once.

        Args:
            organization_id: Caller's organization
            document_ids: Hex ids; malformed ones are ignored
            fields: Fields to project

        Returns:
            dict: Document id to projected document
        """
        object_ids = [oid for oid in map(to_object_id, document_ids) if oid is not None]
        if not object_ids:
            return {}
        documents = self.find(
            organization_id,
            {"_id": {"$in": object_ids}},
            projection={field: 1 for field in fields},
        )
        return {str(document["_id"]): document for document in documents}

    def count_by_field(
        self, organization_id: str, field: str, values: list[str]
    ) -> dict[str, int]:
        """
        Count tenant documents grouped by ``field`` for the given values.

        Returns:
            dict: value to number of documents referencing it
        """
        if not values:
            return {}
        pipeline = [
            {"$match": self.scoped(organization_id, {field: {"$in": values}})},
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
        ]
        return {row["_id"]: row["count"] for row in self.collection.aggregate(pipeline)}
