"""Tag schemas for request/response validation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from evidence_engine.schemas.evidence import RowId


class TagCreate(BaseModel):
    """Schema for creating a tag. Field names follow the collaborator payload."""

    tag_name: str = Field(..., min_length=1, max_length=50)
    tag_color: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")
    description: Optional[str] = None


class TagRead(BaseModel):
    """Schema for reading a tag (response)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    description: Optional[str] = None
    created_by: Optional[int] = None
    is_active: bool = True
    created_at: datetime


class TagList(BaseModel):
    items: list[TagRead]


class TagAssignRequest(BaseModel):
    """Body for PUT /api/evidence/{entry_id}/tags."""

    tag_ids: list[RowId] = Field(..., min_length=1)
