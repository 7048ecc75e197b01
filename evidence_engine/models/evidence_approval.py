"""EvidenceApprovalRecord: one approve/reject decision on an entry."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from evidence_engine.db.session import Base


class EvidenceApprovalRecord(Base):
    __tablename__ = "evidence_approvals"

    __table_args__ = (Index("ix_evidence_approvals_entry_id", "entry_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("evidence_entries.id", ondelete="CASCADE"), nullable=False
    )
    approver_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # approved or rejected
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    entry: Mapped["EvidenceEntry"] = relationship("EvidenceEntry", back_populates="approval_records")
