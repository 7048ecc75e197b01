"""Tag model: a named label attachable to many evidence entries."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from evidence_engine.db.session import Base

TAG_NAME_MAX_LENGTH = 50


def tag_name_key(name: str) -> str:
    """Comparison key for tag names: trimmed and Unicode case-folded."""
    return name.strip().casefold()


class Tag(Base):
    """Evidence tag. Names are unique case-insensitively via name_key."""

    __tablename__ = "evidence_tags"

    __table_args__ = (Index("uq_evidence_tags_name_key", "name_key", unique=True),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(TAG_NAME_MAX_LENGTH), nullable=False)
    # casefold() can lengthen a name (e.g. "ß" -> "ss")
    name_key: Mapped[str] = mapped_column(String(TAG_NAME_MAX_LENGTH * 3), nullable=False)
    color: Mapped[str] = mapped_column(String(7), default="#007bff", nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    assignments: Mapped[list["EvidenceTagAssignment"]] = relationship(
        "EvidenceTagAssignment",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("name")
    def _sync_name_key(self, key: str, value: str) -> str:
        self.name_key = tag_name_key(value)
        return value
