"""EvidenceArchiveRecord: history of archive/restore actions on an entry."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from evidence_engine.db.session import Base


class EvidenceArchiveRecord(Base):
    """One archive action. Open until the entry is restored."""

    __tablename__ = "evidence_archive"

    __table_args__ = (Index("ix_evidence_archive_entry_id", "entry_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("evidence_entries.id", ondelete="CASCADE"), nullable=False
    )
    archived_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    archive_reason: Mapped[str] = mapped_column(String(32), nullable=False)
    archived_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    restored_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_restored: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Snapshot of the entry's fields at archive time
    original_data: Mapped[dict] = mapped_column(JSON, nullable=False)

    entry: Mapped["EvidenceEntry"] = relationship("EvidenceEntry", back_populates="archive_records")
