from enum import Enum


class Role(str, Enum):
    """User roles within an organization."""

    ADMIN = "admin"
    MANAGER = "manager"
    SALES_REP = "sales_rep"
    VIEWER = "viewer"


# Roles allowed to create, update and delete CRM records
WRITE_ROLES = (Role.ADMIN, Role.MANAGER, Role.SALES_REP)
MANAGEMENT_ROLES = (Role.ADMIN, Role.MANAGER)

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
MAX_ORGANIZATION_NAME_LENGTH = 100

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"
