"""
Xync Backend — Category Schemas
===============================

What:  Request/response bodies for /categories.

Reparenting:
    `parent_id` absent   → parent unchanged
    `parent_id: null`    → category becomes a root category
    `parent_id: <uuid>`  → must be one of the caller's categories and must not
                           create a cycle (checked by CategoryService → 400)
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from xync.schemas.common import reject_explicit_nulls


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255, description="Unique per user")
    description: Optional[str] = Field(default=None, max_length=10_000)
    parent_id: Optional[uuid.UUID] = Field(default=None, description="Parent category id")

    model_config = {"str_strip_whitespace": True}


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=10_000)
    parent_id: Optional[uuid.UUID] = None

    model_config = {"str_strip_whitespace": True}

    @model_validator(mode="after")
    def check_nulls(self) -> "CategoryUpdate":
        reject_explicit_nulls(self, ("name",))
        return self


class CategoryResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    parent_id: Optional[uuid.UUID] = None
    created_at: datetime

    model_config = {"from_attributes": True}
