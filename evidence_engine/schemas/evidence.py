"""Evidence entry schemas and the fixed enumerations of the domain."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

# Integer columns are 32-bit signed
DB_INT_MIN = -(2**31)
DB_INT_MAX = 2**31 - 1

DbInt = Annotated[int, Field(ge=DB_INT_MIN, le=DB_INT_MAX)]
RowId = Annotated[int, Field(ge=1, le=DB_INT_MAX)]


class Dimension(str, Enum):
    """Performance dimension an entry is filed under."""

    responsibilities = "responsibilities"
    kpis = "kpis"
    competencies = "competencies"
    values = "values"


class EntryStatus(str, Enum):
    active = "active"
    archived = "archived"


class ApprovalStatus(str, Enum):
    none = "none"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class EvidenceSource(str, Enum):
    """Where the observation came from."""

    manager_feedback = "manager_feedback"
    self_assessment = "self_assessment"
    peer_feedback = "peer_feedback"
    customer_feedback = "customer_feedback"


class ArchiveReason(str, Enum):
    manual = "manual"
    retention_policy = "retention_policy"
    employee_departure = "employee_departure"
    data_cleanup = "data_cleanup"


class EvidenceEntryCreate(BaseModel):
    """Schema for recording a new evidence entry (submission flow)."""

    employee_id: RowId
    manager_id: RowId
    dimension: Dimension
    star_rating: int = Field(..., ge=1, le=5)
    content: str = Field(..., min_length=1)
    entry_date: date
    attachment_count: int = Field(0, ge=0)
    approval_status: ApprovalStatus = ApprovalStatus.none
    evidence_source: Optional[EvidenceSource] = None


class EvidenceEntryRead(BaseModel):
    """Schema for reading an evidence entry (response)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    manager_id: int
    dimension: Dimension
    star_rating: int
    content: str
    entry_date: date
    status: EntryStatus
    archive_reason: Optional[ArchiveReason] = None
    archived_at: Optional[datetime] = None
    attachment_count: int = 0
    approval_status: ApprovalStatus = ApprovalStatus.none
    evidence_source: Optional[EvidenceSource] = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None


class ArchiveRequest(BaseModel):
    """Body for POST /api/evidence/{entry_id}/archive."""

    reason: ArchiveReason = ArchiveReason.manual


class ArchiveRecordRead(BaseModel):
    """One row of an entry's archive history."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_id: int
    archived_by: Optional[int] = None
    archive_reason: ArchiveReason
    archived_at: datetime
    restored_at: Optional[datetime] = None
    is_restored: bool
    original_data: dict


class ApprovalDecisionRequest(BaseModel):
    """Body for POST /api/evidence/{entry_id}/approval."""

    decision: ApprovalStatus
    comments: Optional[str] = Field(None, max_length=2000)


class ApprovalRecordRead(BaseModel):
    """One approve/reject decision recorded against an entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    entry_id: int
    approver_id: Optional[int] = None
    status: ApprovalStatus
    comments: Optional[str] = None
    approved_at: datetime


class SuccessResponse(BaseModel):
    success: bool = True
