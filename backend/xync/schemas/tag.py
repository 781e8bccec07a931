"""
Xync Backend — Tag Schemas
==========================
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from xync.schemas.common import reject_explicit_nulls

COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100, description="Unique per user")
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN, description="#rrggbb")

    model_config = {"str_strip_whitespace": True}


class TagUpdate(BaseModel):
    """Partial update. Send `color: null` to remove the color."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)

    model_config = {"str_strip_whitespace": True}

    @model_validator(mode="after")
    def check_nulls(self) -> "TagUpdate":
        reject_explicit_nulls(self, ("name",))
        return self


class TagResponse(BaseModel):
    id: uuid.UUID
    name: str
    color: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class TagSummary(BaseModel):
    """Compact tag embedded in bookmark responses."""
    id: uuid.UUID
    name: str
    color: Optional[str] = None

    model_config = {"from_attributes": True}
