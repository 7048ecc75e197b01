"""EvidenceEntry model: a dated, rated observation about an employee."""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import CheckConstraint, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from evidence_engine.db.session import Base


class EvidenceEntry(Base):
    """One evidence record. Status is either active or archived, never both."""

    __tablename__ = "evidence_entries"

    __table_args__ = (
        CheckConstraint("star_rating BETWEEN 1 AND 5", name="ck_evidence_entries_star_rating"),
        CheckConstraint(
            "dimension IN ('responsibilities', 'kpis', 'competencies', 'values')",
            name="ck_evidence_entries_dimension",
        ),
        CheckConstraint(
            "(status = 'active' AND archive_reason IS NULL)"
            " OR (status = 'archived' AND archive_reason IS NOT NULL)",
            name="ck_evidence_entries_archive_reason",
        ),
        CheckConstraint("attachment_count >= 0", name="ck_evidence_entries_attachment_count"),
        Index("ix_evidence_entries_entry_date_id", "entry_date", "id"),
        Index("ix_evidence_entries_employee_id", "employee_id"),
        Index("ix_evidence_entries_manager_id", "manager_id"),
        Index("ix_evidence_entries_status", "status"),
        Index("ix_evidence_entries_approval_status", "approval_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(Integer, nullable=False)
    manager_id: Mapped[int] = mapped_column(Integer, nullable=False)
    dimension: Mapped[str] = mapped_column(String(32), nullable=False)
    star_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="active", nullable=False)
    archive_reason: Mapped[str | None] = mapped_column(String(32), nullable=True)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    attachment_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    approval_status: Mapped[str] = mapped_column(String(16), default="none", nullable=False)
    evidence_source: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    tag_assignments: Mapped[list["EvidenceTagAssignment"]] = relationship(
        "EvidenceTagAssignment",
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    archive_records: Mapped[list["EvidenceArchiveRecord"]] = relationship(
        "EvidenceArchiveRecord",
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="EvidenceArchiveRecord.id",
    )
    approval_records: Mapped[list["EvidenceApprovalRecord"]] = relationship(
        "EvidenceApprovalRecord",
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="EvidenceApprovalRecord.id",
    )

    @property
    def is_archived(self) -> bool:
        return self.status == "archived"
