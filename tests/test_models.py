"""SQLAlchemy model tests."""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from evidence_engine.models import (
    EvidenceApprovalRecord,
    EvidenceArchiveRecord,
    EvidenceEntry,
    EvidenceTagAssignment,
    Tag,
)


def test_entry_model_creation() -> None:
    """EvidenceEntry can be instantiated with expected attributes."""
    entry = EvidenceEntry(
        employee_id=1,
        manager_id=2,
        dimension="kpis",
        star_rating=4,
        content="Closed 12 deals",
        entry_date=date(2026, 3, 1),
    )
    assert entry.employee_id == 1
    assert entry.dimension == "kpis"
    assert entry.archive_reason is None


def test_entry_defaults(db: Session) -> None:
    """Status, attachment_count and approval_status get defaults on insert."""
    entry = EvidenceEntry(
        employee_id=1,
        manager_id=2,
        dimension="values",
        star_rating=5,
        content="Mentored two new hires",
        entry_date=date(2026, 3, 1),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    assert entry.status == "active"
    assert entry.is_archived is False
    assert entry.attachment_count == 0
    assert entry.approval_status == "none"
    assert entry.created_at is not None


def test_entry_rating_out_of_range_rejected(db: Session) -> None:
    """The database refuses star ratings outside 1..5."""
    db.add(
        EvidenceEntry(
            employee_id=1,
            manager_id=2,
            dimension="kpis",
            star_rating=6,
            content="x",
            entry_date=date(2026, 3, 1),
        )
    )
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_archived_entry_requires_reason(db: Session) -> None:
    """status=archived without archive_reason violates the check constraint."""
    db.add(
        EvidenceEntry(
            employee_id=1,
            manager_id=2,
            dimension="kpis",
            star_rating=3,
            content="x",
            entry_date=date(2026, 3, 1),
            status="archived",
        )
    )
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_tag_name_unique_ignoring_case(db: Session, make_tag) -> None:
    """Two tags whose names differ only in case cannot coexist."""
    make_tag("Collaboration")
    db.add(Tag(name="collaboration", color="#007bff"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_tag_name_unique_ignoring_non_ascii_case(db: Session, make_tag) -> None:
    """Case folding covers non-ASCII letters, not just A-Z."""
    make_tag("Über")
    db.add(Tag(name="über", color="#007bff"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_tag_name_key_follows_name() -> None:
    """name_key is the trimmed, case-folded name and tracks renames."""
    tag = Tag(name=" Straße ", color="#007bff")
    assert tag.name_key == "strasse"
    tag.name = "Über"
    assert tag.name_key == "über"


def test_deleting_entry_removes_assignments_and_history(
    db: Session, make_entry, make_tag
) -> None:
    """Hard delete cascades to tag assignments, archive and approval records."""
    entry = make_entry()
    tag = make_tag("Leadership")
    db.add(EvidenceTagAssignment(entry_id=entry.id, tag_id=tag.id))
    db.add(
        EvidenceArchiveRecord(
            entry_id=entry.id, archive_reason="manual", original_data={"id": entry.id}
        )
    )
    db.add(EvidenceApprovalRecord(entry_id=entry.id, approver_id=7, status="approved"))
    db.commit()

    db.delete(entry)
    db.commit()

    assert db.query(EvidenceTagAssignment).count() == 0
    assert db.query(EvidenceArchiveRecord).count() == 0
    assert db.query(EvidenceApprovalRecord).count() == 0
    assert db.query(Tag).count() == 1
