"""
Xync Backend — Bookmark Schemas
===============================

What:  Request/response bodies for /bookmarks and /bookmarks/preview.

Design Decision:
    `tag_ids` on create sets the initial tags; on update it REPLACES the whole
    set (send [] to detach every tag, omit the field to leave tags alone).
    Duplicate ids are collapsed. Every id must name one of the caller's own
    tags, otherwise the request fails with 400 and nothing is written.

    The cached preview columns are never written by clients directly. They
    are filled from the preview fetch when `fetch_preview` is true on create.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from xync.schemas.common import reject_explicit_nulls
from xync.schemas.tag import TagSummary

_http_url = TypeAdapter(HttpUrl)


def _validate_url(value: Optional[str]) -> Optional[str]:
    """Checks the value parses as an http(s) URL; the original text is stored."""
    if value is None:
        return value
    value = value.strip()
    # Stored and fetched verbatim, so control characters never get through
    if not value.isprintable():
        raise ValueError("Invalid URL format")
    try:
        _http_url.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Invalid URL format") from None
    return value


def _dedupe(ids: Optional[List[uuid.UUID]]) -> Optional[List[uuid.UUID]]:
    if ids is None:
        return ids
    return list(dict.fromkeys(ids))


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BookmarkCreate(BaseModel):
    url: str = Field(max_length=2048, description="http(s) URL")
    title: str = Field(min_length=1, max_length=500)
    description: Optional[str] = None
    category_id: Optional[uuid.UUID] = None
    tag_ids: List[uuid.UUID] = Field(default_factory=list)
    fetch_preview: bool = Field(
        default=False,
        description="Fetch title/description/image/favicon from the page and cache them",
    )

    check_url = field_validator("url")(_validate_url)
    dedupe_tags = field_validator("tag_ids")(_dedupe)


class BookmarkUpdate(BaseModel):
    """
    Partial update.

    `description: null` clears the description and `category_id: null`
    uncategorizes the bookmark. `url`, `title` and `tag_ids` cannot be null.
    """
    url: Optional[str] = Field(default=None, max_length=2048)
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    category_id: Optional[uuid.UUID] = None
    tag_ids: Optional[List[uuid.UUID]] = None

    check_url = field_validator("url")(_validate_url)
    dedupe_tags = field_validator("tag_ids")(_dedupe)

    @model_validator(mode="after")
    def check_nulls(self) -> "BookmarkUpdate":
        reject_explicit_nulls(self, ("url", "title", "tag_ids"))
        return self


class PreviewRequest(BaseModel):
    url: str = Field(max_length=2048)

    check_url = field_validator("url")(_validate_url)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BookmarkPreview(BaseModel):
    """
    What:  Metadata scraped from a page. Every field is optional: a failed or
           partial fetch yields nulls, never an error.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    favicon: Optional[str] = None


class BookmarkResponse(BaseModel):
    id: uuid.UUID
    url: str
    title: str
    description: Optional[str] = None
    category_id: Optional[uuid.UUID] = None
    preview_image: Optional[str] = None
    preview_description: Optional[str] = None
    favicon: Optional[str] = None
    tags: List[TagSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
