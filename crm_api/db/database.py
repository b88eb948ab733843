"""
MongoDB connection management.

Provides the MongoDatabase adapter, which owns a single lazily created
MongoClient per process, exposes collection accessors and creates indexes,
plus the FastAPI dependency that hands it to repositories.
"""

import threading
from enum import Enum

from fastapi import Request
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from crm_api.db.config import DatabaseSettings
from crm_api.utils.logger import logger


class CollectionName(str, Enum):
    """MongoDB collections used by the service."""

    ORGANIZATIONS = "organizations"
    USERS = "users"
    CONTACTS = "contacts"
    COMPANIES = "companies"
    DEALS = "deals"
    ACTIVITIES = "activities"


# Single-field indexes per collection, as (field, create_index options)
INDEXES: dict[CollectionName, list[tuple[str, dict]]] = {
    CollectionName.ORGANIZATIONS: [("slug", {"unique": True}), ("status", {})],
    CollectionName.USERS: [
        ("email", {"unique": True}),
        ("organizationId", {}),
        ("role", {}),
    ],
    CollectionName.CONTACTS: [
        ("organizationId", {}),
        ("email", {}),
        ("companyId", {}),
        ("assignedTo", {}),
        ("status", {}),
        ("tags", {}),
    ],
    CollectionName.COMPANIES: [
        ("organizationId", {}),
        ("name", {}),
        ("assignedTo", {}),
        ("status", {}),
        ("industry", {}),
    ],
    CollectionName.DEALS: [
        ("organizationId", {}),
        ("assignedTo", {}),
        ("stage", {}),
        ("contactId", {}),
        ("companyId", {}),
        ("expectedCloseDate", {}),
    ],
    CollectionName.ACTIVITIES: [
        ("organizationId", {}),
        ("assignedTo", {}),
        ("type", {}),
        ("status", {}),
        ("dueDate", {}),
        ("contactId", {}),
        ("companyId", {}),
        ("dealId", {}),
    ],
}


class MongoDatabase:
    """Process-wide handle on the CRM database."""

    def __init__(self, settings: DatabaseSettings, client: MongoClient | None = None):
        """
        Initialize the adapter.

        Args:
            settings: Connection settings
            client: Pre-built client (tests pass a mongomock client); when
                omitted one is created on first use
        """
        self.settings = settings
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> MongoClient:
        """Get or create the MongoClient."""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = MongoClient(
                        self.settings.url,
                        maxPoolSize=self.settings.max_pool_size,
                        serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
                        socketTimeoutMS=self.settings.socket_timeout_ms,
                        appname="crm-api",
                    )
                    logger.info(
                        "MongoDB client created",
                        url=self.settings.get_redacted_url(),
                        database=self.settings.name,
                    )
        return self._client

    @property
    def db(self) -> Database:
        return self.client[self.settings.name]

    def collection(self, name: CollectionName) -> Collection:
        return self.db[name.value]

    def create_indexes(self) -> None:
        """Create every index declared in ``INDEXES``; existing ones are left alone."""
        for name, indexes in INDEXES.items():
            collection = self.collection(name)
            for field, options in indexes:
                collection.create_index([(field, ASCENDING)], **options)
        logger.info("MongoDB indexes ensured", collections=len(INDEXES))

    def ping(self) -> bool:
        """
        Check connectivity.

        Returns:
            bool: True when the server answered the ping command
        """
        try:
            self.client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB ping failed", error=str(e))
            return False
        return True

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("MongoDB client closed")


def get_database(request: Request) -> MongoDatabase:
    """
    FastAPI dependency returning the application's MongoDatabase.

    Args:
        request: Incoming request; the adapter lives on ``app.state``

    Returns:
        MongoDatabase: The shared adapter
    """
    return request.app.state.database
