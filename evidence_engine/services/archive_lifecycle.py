"""Archive Lifecycle: active <-> archived transitions for a single entry.

    active --archive--> archived --restore--> active

Re-archiving an archived entry or restoring an active one raises
InvalidStateError. Each transition is one transaction and leaves an
EvidenceArchiveRecord trail.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from evidence_engine.db.session import atomic
from evidence_engine.errors import InvalidStateError, StorageError, ValidationError
from evidence_engine.models import EvidenceArchiveRecord, EvidenceEntry
from evidence_engine.schemas.evidence import ArchiveReason
from evidence_engine.services.entry_store import get_entry_row

logger = logging.getLogger(__name__)


def _parse_reason(reason: ArchiveReason | str | None) -> ArchiveReason:
    if reason is None:
        return ArchiveReason.manual
    try:
        return ArchiveReason(reason)
    except ValueError:
        allowed = ", ".join(r.value for r in ArchiveReason)
        raise ValidationError(f"reason must be one of: {allowed}", field="reason") from None


def _snapshot(entry: EvidenceEntry) -> dict:
    """JSON-safe copy of the entry's fields before archiving."""
    return {
        "id": entry.id,
        "employee_id": entry.employee_id,
        "manager_id": entry.manager_id,
        "dimension": entry.dimension,
        "star_rating": entry.star_rating,
        "content": entry.content,
        "entry_date": entry.entry_date.isoformat(),
        "attachment_count": entry.attachment_count,
        "approval_status": entry.approval_status,
        "evidence_source": entry.evidence_source,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


def archive_entry(
    db: Session,
    entry_id: int,
    reason: ArchiveReason | str | None = ArchiveReason.manual,
    actor_id: int | None = None,
) -> EvidenceEntry:
    """Move an active entry to archived.

    Raises NotFoundError if the entry does not exist, InvalidStateError if it
    is already archived, ValidationError for an unknown reason.
    """
    archive_reason = _parse_reason(reason)
    now = datetime.now(timezone.utc)
    with atomic(db):
        entry = get_entry_row(db, entry_id, for_update=True)
        if entry.status == "archived":
            raise InvalidStateError(f"Entry {entry_id} is already archived")
        db.add(
            EvidenceArchiveRecord(
                entry_id=entry.id,
                archived_by=actor_id,
                archive_reason=archive_reason.value,
                archived_at=now,
                original_data=_snapshot(entry),
            )
        )
        entry.status = "archived"
        entry.archive_reason = archive_reason.value
        entry.archived_at = now
    db.refresh(entry)
    logger.info(
        "evidence_entry_archived: id=%s reason=%s actor=%s",
        entry_id,
        archive_reason.value,
        actor_id,
    )
    return entry


def restore_entry(db: Session, entry_id: int) -> EvidenceEntry:
    """Move an archived entry back to active and clear its archive reason.

    Raises NotFoundError if the entry does not exist, InvalidStateError if it
    is already active.
    """
    now = datetime.now(timezone.utc)
    with atomic(db):
        entry = get_entry_row(db, entry_id, for_update=True)
        if entry.status != "archived":
            raise InvalidStateError(f"Entry {entry_id} is not archived")
        open_records = (
            db.query(EvidenceArchiveRecord)
            .filter(
                EvidenceArchiveRecord.entry_id == entry_id,
                EvidenceArchiveRecord.is_restored == False,
            )
            .all()
        )
        for record in open_records:
            record.is_restored = True
            record.restored_at = now
        entry.status = "active"
        entry.archive_reason = None
        entry.archived_at = None
    db.refresh(entry)
    logger.info("evidence_entry_restored: id=%s", entry_id)
    return entry


def archive_history(db: Session, entry_id: int) -> list[EvidenceArchiveRecord]:
    """Return the entry's archive records, oldest first."""
    get_entry_row(db, entry_id)
    try:
        return (
            db.query(EvidenceArchiveRecord)
            .filter(EvidenceArchiveRecord.entry_id == entry_id)
            .order_by(EvidenceArchiveRecord.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("archive_history failed for entry %s", entry_id)
        raise StorageError(f"Database error: {exc.__class__.__name__}") from exc
