"""SQLAlchemy models."""

from evidence_engine.models.evidence_approval import EvidenceApprovalRecord
from evidence_engine.models.evidence_archive import EvidenceArchiveRecord
from evidence_engine.models.evidence_entry import EvidenceEntry
from evidence_engine.models.evidence_tag_assignment import EvidenceTagAssignment
from evidence_engine.models.tag import Tag

__all__ = [
    "EvidenceApprovalRecord",
    "EvidenceArchiveRecord",
    "EvidenceEntry",
    "EvidenceTagAssignment",
    "Tag",
]
