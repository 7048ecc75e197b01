"""Search filter, actor scope and paginated response schemas."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict

from evidence_engine.schemas.evidence import (
    ApprovalStatus,
    Dimension,
    EvidenceEntryRead,
    EvidenceSource,
)


class SearchFilter(BaseModel):
    """Typed search request. Every field is optional; None means no constraint.

    Built by the filter compiler from raw request parameters. Cross-field
    checks (min <= max, start <= end) happen at compile time.
    """

    model_config = ConfigDict(frozen=True)

    text: Optional[str] = None
    employee_id: Optional[int] = None
    manager_id: Optional[int] = None
    dimension: Optional[Dimension] = None
    min_rating: Optional[int] = None
    max_rating: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    content_length_min: Optional[int] = None
    content_length_max: Optional[int] = None
    has_attachments: Optional[bool] = None
    approval_status: Optional[ApprovalStatus] = None
    evidence_source: Optional[EvidenceSource] = None
    tag_ids: tuple[int, ...] = ()
    include_archived: bool = False
    page: int = 1
    limit: Optional[int] = None


class ActorScope(BaseModel):
    """Visibility window computed by the auth layer and passed in explicitly.

    employee_ids=None means unrestricted by employee; an empty list sees nothing.
    """

    model_config = ConfigDict(frozen=True)

    employee_ids: Optional[tuple[int, ...]] = None
    manager_id: Optional[int] = None


class PaginationMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int
    has_more: bool


class SearchResponse(BaseModel):
    """Response for GET /api/evidence/search."""

    results: list[EvidenceEntryRead]
    pagination: PaginationMeta
