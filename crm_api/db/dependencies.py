"""
FastAPI dependencies for database services.

Provides dependency injection for the per-entity services.
"""

from fastapi import Depends

from crm_api.auth.config import AuthSettings
from crm_api.auth.dependencies import get_auth_settings_dependency
from crm_api.db.activities.service import ActivityService
from crm_api.db.companies.service import CompanyService
from crm_api.db.contacts.service import ContactService
from crm_api.db.database import MongoDatabase, get_database
from crm_api.db.deals.service import DealService
from crm_api.db.organizations.service import OrganizationService
from crm_api.db.users.service import UserService


def get_organization_service(
    database: MongoDatabase = Depends(get_database),
) -> OrganizationService:
    return OrganizationService(database)


def get_user_service(
    database: MongoDatabase = Depends(get_database),
    auth_settings: AuthSettings = Depends(get_auth_settings_dependency),
) -> UserService:
    """
    FastAPI dependency for getting the user service.

    Args:
        database: Shared MongoDB adapter
        auth_settings: Password hashing configuration

    Returns:
        UserService: Service instance with injected dependencies
    """
    return UserService(database, auth_settings)


def get_contact_service(database: MongoDatabase = Depends(get_database)) -> ContactService:
    return ContactService(database)


def get_company_service(database: MongoDatabase = Depends(get_database)) -> CompanyService:
    return CompanyService(database)


def get_deal_service(database: MongoDatabase = Depends(get_database)) -> DealService:
    return DealService(database)


def get_activity_service(
    database: MongoDatabase = Depends(get_database),
) -> ActivityService:
    return ActivityService(database)
