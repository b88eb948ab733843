"""
Input sanitization shared by every route.

Search terms end up inside MongoDB ``$regex`` filters and pagination values
come straight from the query string, so both are normalized here and nowhere
else.
"""

import math
import re
from dataclasses import dataclass

from bson import ObjectId

from crm_api.exceptions import ValidationError

SEARCH_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
TEXT_MAX_LENGTH = 255

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_PAGE = 10_000

_REGEX_SPECIAL_CHARS = re.compile(r"[.*+?^${}()|\[\]\\]")
_SEARCH_FORBIDDEN_CHARS = re.compile(r"[<>'\";&\\]")
_ANGLE_BRACKETS = re.compile(r"[<>]")
_WHITESPACE = re.compile(r"\s+")
_OBJECT_ID = re.compile(r"[0-9a-fA-F]{24}")


def escape_regex(value: str) -> str:
    """Escape regex metacharacters so ``value`` matches literally."""
    return _REGEX_SPECIAL_CHARS.sub(lambda match: "\\" + match.group(0), value)


def sanitize_search_query(value: str | None) -> str | None:
    """
    Turn raw user input into a literal, bounded regex fragment.

    Args:
        value: Raw ``search`` query parameter

    Returns:
        str | None: Escaped pattern, or None when nothing searchable remains
    """
    if not value:
        return None

    cleaned = _SEARCH_FORBIDDEN_CHARS.sub("", value.strip()[:SEARCH_MAX_LENGTH])
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    if not cleaned:
        return None
    return escape_regex(cleaned)


def sanitize_email(value: str) -> str:
    return value.strip().lower()[:EMAIL_MAX_LENGTH]


def sanitize_text(value: str, max_length: int | None = TEXT_MAX_LENGTH) -> str:
    """Trim, cap at ``max_length`` (None for no cap) and drop angle brackets."""
    value = value.strip()
    if max_length is not None:
        value = value[:max_length]
    return _ANGLE_BRACKETS.sub("", value)


def is_valid_object_id(value: str | None) -> bool:
    return bool(value) and _OBJECT_ID.fullmatch(value) is not None


def to_object_id(value: str | None) -> ObjectId | None:
    """Convert a hex string to an ObjectId, returning None when malformed."""
    if not is_valid_object_id(value):
        return None
    return ObjectId(value)


def require_object_id(value: str, label: str) -> str:
    """
    Validate an id taken from the request.

    Raises:
        ValidationError: If ``value`` is not a 24 character hex string
    """
    if not is_valid_object_id(value):
        raise ValidationError(f"Invalid {label} ID")
    return value


@dataclass(frozen=True)
class Pagination:
    """Sanitized page window."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def pages(self, total: int) -> int:
        return math.ceil(total / self.limit) if total else 0

    def to_dict(self, total: int) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "pages": self.pages(total),
        }


def _to_int(value: str | int | None, default: int) -> int:
    # Zero and unparsable input both fall back to the default
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed or default


def sanitize_pagination(
    page: str | int | None = None, limit: str | int | None = None
) -> Pagination:
    """
    Clamp raw ``page``/``limit`` query values.

    Args:
        page: Requested page, 1 to 10000 (default 1)
        limit: Requested page size, 1 to 100 (default 20)

    Returns:
        Pagination: The sanitized window
    """
    return Pagination(
        page=min(MAX_PAGE, max(1, _to_int(page, DEFAULT_PAGE))),
        limit=min(MAX_LIMIT, max(1, _to_int(limit, DEFAULT_LIMIT))),
    )
