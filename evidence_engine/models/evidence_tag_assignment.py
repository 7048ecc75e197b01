"""EvidenceTagAssignment: join row between an entry and a tag."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from evidence_engine.db.session import Base


class EvidenceTagAssignment(Base):
    """(entry_id, tag_id) pair; created or removed, never updated."""

    __tablename__ = "evidence_entry_tags"

    __table_args__ = (Index("ix_evidence_entry_tags_tag_id", "tag_id"),)

    entry_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("evidence_entries.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("evidence_tags.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    entry: Mapped["EvidenceEntry"] = relationship("EvidenceEntry", back_populates="tag_assignments")
    tag: Mapped["Tag"] = relationship("Tag", back_populates="assignments")
