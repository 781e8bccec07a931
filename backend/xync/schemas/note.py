"""
Xync Backend — Note Schemas
===========================
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from xync.schemas.common import reject_explicit_nulls


class NoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    content: str = Field(default="", description="Free-form note body")


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    content: Optional[str] = None

    @model_validator(mode="after")
    def check_nulls(self) -> "NoteUpdate":
        reject_explicit_nulls(self, ("title", "content"))
        return self


class NoteResponse(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
