"""Pydantic schemas for request/response validation."""

from evidence_engine.schemas.bulk import (
    AddTagsOperation,
    ArchiveOperation,
    BulkOperation,
    BulkOperationRequest,
    BulkOperationResult,
    DeleteOperation,
    UpdateDimensionOperation,
)
from evidence_engine.schemas.evidence import (
    ApprovalDecisionRequest,
    ApprovalStatus,
    ArchiveReason,
    ArchiveRecordRead,
    ArchiveRequest,
    Dimension,
    EntryStatus,
    EvidenceEntryCreate,
    EvidenceEntryRead,
    EvidenceSource,
    SuccessResponse,
)
from evidence_engine.schemas.search import (
    ActorScope,
    PaginationMeta,
    SearchFilter,
    SearchResponse,
)
from evidence_engine.schemas.statistics import EvidenceStatistics
from evidence_engine.schemas.tag import TagAssignRequest, TagCreate, TagList, TagRead

__all__ = [
    # Evidence
    "ApprovalDecisionRequest",
    "ApprovalStatus",
    "ArchiveReason",
    "ArchiveRecordRead",
    "ArchiveRequest",
    "Dimension",
    "EntryStatus",
    "EvidenceEntryCreate",
    "EvidenceEntryRead",
    "EvidenceSource",
    "SuccessResponse",
    # Search
    "ActorScope",
    "PaginationMeta",
    "SearchFilter",
    "SearchResponse",
    # Statistics
    "EvidenceStatistics",
    # Tags
    "TagAssignRequest",
    "TagCreate",
    "TagList",
    "TagRead",
    # Bulk
    "AddTagsOperation",
    "ArchiveOperation",
    "BulkOperation",
    "BulkOperationRequest",
    "BulkOperationResult",
    "DeleteOperation",
    "UpdateDimensionOperation",
]
