"""
Shared Pydantic building blocks.

Every endpoint answers with the ``ApiResponse`` envelope and every resource
model serializes with camelCase keys, matching how documents are stored.
"""

from datetime import datetime
from typing import Annotated, Any, ClassVar, Generic, TypeVar

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
    StringConstraints,
)
from pydantic.alias_generators import to_camel

from crm_api.utils.dates import to_iso_utc, to_naive_utc
from crm_api.utils.sanitizer import is_valid_object_id, sanitize_email, sanitize_text

T = TypeVar("T")


def blank_to_none(value: Any) -> Any:
    """Treat empty form fields as absent."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _strip_markup(value: str) -> str:
    return sanitize_text(value, max_length=None)


def _check_object_id(value: str) -> str:
    if not is_valid_object_id(value):
        raise ValueError("must be a 24 character hex id")
    return value


UTCDateTime = Annotated[
    datetime,
    AfterValidator(to_naive_utc),
    PlainSerializer(to_iso_utc, return_type=str, when_used="json"),
]
Email = Annotated[EmailStr, AfterValidator(sanitize_email)]
ObjectIdStr = Annotated[str, AfterValidator(_check_object_id)]
ShortText = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=100),
    AfterValidator(_strip_markup),
]
Text = Annotated[
    str,
    StringConstraints(strip_whitespace=True, max_length=255),
    AfterValidator(_strip_markup),
]
LongText = Annotated[
    str,
    StringConstraints(strip_whitespace=True, max_length=2000),
    AfterValidator(_strip_markup),
]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]

OptionalEmail = Annotated[Email | None, BeforeValidator(blank_to_none)]
OptionalObjectId = Annotated[ObjectIdStr | None, BeforeValidator(blank_to_none)]
OptionalText = Annotated[Text | None, BeforeValidator(blank_to_none)]
OptionalLongText = Annotated[LongText | None, BeforeValidator(blank_to_none)]
OptionalDateTime = Annotated[UTCDateTime | None, BeforeValidator(blank_to_none)]


class CamelModel(BaseModel):
    """Base model whose JSON keys are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    """Base for request bodies; enum fields hold their stored string values."""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    def to_document(self) -> dict[str, Any]:
        """Fields as they are stored in MongoDB (camelCase keys)."""
        return self.model_dump(by_alias=True)


class UpdateRequest(RequestModel):
    """Base for partial updates: only fields present in the body are applied."""

    # camelCase fields that may be omitted but never cleared
    required_fields: ClassVar[frozenset[str]] = frozenset()

    def to_changes(self) -> dict[str, Any]:
        """
        Changes to ``$set``.

        An explicit ``null`` clears an optional field and is ignored for a
        required one.
        """
        data = self.model_dump(by_alias=True, exclude_unset=True)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key not in self.required_fields
        }


class DocumentModel(CamelModel):
    """Response model built from a stored MongoDB document."""

    id: str = Field(..., description="Document ID")
    created_at: UTCDateTime | None = Field(default=None, description="Creation time")
    updated_at: UTCDateTime | None = Field(default=None, description="Last update time")

    @classmethod
    def from_document(cls, document: dict[str, Any], **extra: Any):
        """Build the response model, exposing ``_id`` as ``id``."""
        return cls.model_validate({**document, "id": str(document["_id"]), **extra})


class PaginationResponse(CamelModel):
    """Pagination metadata attached to every list response."""

    page: int = Field(..., description="Current page (1-based)")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Total matching documents")
    pages: int = Field(..., description="Total number of pages")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by all JSON responses."""

    success: bool = Field(default=True, description="Whether the request succeeded")
    message: str | None = Field(default=None, description="Human readable outcome")
    data: T | None = Field(default=None, description="Response payload")
