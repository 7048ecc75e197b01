"""Entry Store: create, read, update and hard-delete evidence entries.

Every mutation runs in its own transaction via ``atomic``. Search lives in
``evidence_engine.services.evidence_search``.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from evidence_engine.db.session import atomic
from evidence_engine.errors import NotFoundError, StorageError, ValidationError
from evidence_engine.models import EvidenceEntry, EvidenceTagAssignment, Tag
from evidence_engine.schemas.evidence import (
    Dimension,
    EvidenceEntryCreate,
    EvidenceEntryRead,
)
from evidence_engine.schemas.search import ActorScope

logger = logging.getLogger(__name__)


# ── Lookups ─────────────────────────────────────────────────────────


def get_entry_row(
    db: Session,
    entry_id: int,
    *,
    for_update: bool = False,
) -> EvidenceEntry:
    """Return the EvidenceEntry ORM row or raise NotFoundError.

    for_update takes a row lock where the backend supports it (PostgreSQL).
    """
    try:
        query = db.query(EvidenceEntry).filter(EvidenceEntry.id == entry_id)
        if for_update:
            query = query.with_for_update()
        entry = query.first()
    except SQLAlchemyError as exc:
        logger.exception("get_entry_row failed for entry %s", entry_id)
        raise StorageError(f"Database error: {exc.__class__.__name__}") from exc
    if entry is None:
        raise NotFoundError(f"Entry {entry_id} not found")
    return entry


def in_scope(entry: EvidenceEntry, scope: ActorScope | None) -> bool:
    """Return True if entry falls inside the caller's visibility window."""
    if scope is None:
        return True
    if scope.employee_ids is not None and entry.employee_id not in scope.employee_ids:
        return False
    if scope.manager_id is not None and entry.manager_id != scope.manager_id:
        return False
    return True


def get_scoped_entry_row(
    db: Session,
    entry_id: int,
    scope: ActorScope | None,
) -> EvidenceEntry:
    """Like get_entry_row, but entries outside scope are reported as not found."""
    entry = get_entry_row(db, entry_id)
    if not in_scope(entry, scope):
        raise NotFoundError(f"Entry {entry_id} not found")
    return entry


def tag_names_for_entries(db: Session, entry_ids: list[int]) -> dict[int, list[str]]:
    """Map entry_id -> tag names (alphabetical) for the given entries."""
    if not entry_ids:
        return {}
    try:
        rows = (
            db.query(EvidenceTagAssignment.entry_id, Tag.name)
            .join(Tag, Tag.id == EvidenceTagAssignment.tag_id)
            .filter(EvidenceTagAssignment.entry_id.in_(entry_ids))
            .order_by(Tag.name.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("tag_names_for_entries failed")
        raise StorageError(f"Database error: {exc.__class__.__name__}") from exc
    names: dict[int, list[str]] = defaultdict(list)
    for entry_id, name in rows:
        names[entry_id].append(name)
    return dict(names)


def entry_to_read(entry: EvidenceEntry, tags: list[str] | None = None) -> EvidenceEntryRead:
    """Map an EvidenceEntry ORM instance to an EvidenceEntryRead schema."""
    return EvidenceEntryRead(
        id=entry.id,
        employee_id=entry.employee_id,
        manager_id=entry.manager_id,
        dimension=entry.dimension,
        star_rating=entry.star_rating,
        content=entry.content,
        entry_date=entry.entry_date,
        status=entry.status,
        archive_reason=entry.archive_reason,
        archived_at=entry.archived_at,
        attachment_count=entry.attachment_count,
        approval_status=entry.approval_status,
        evidence_source=entry.evidence_source,
        tags=tags or [],
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


def entries_to_read(db: Session, entries: list[EvidenceEntry]) -> list[EvidenceEntryRead]:
    """Map a list of entries, loading their tag names in one query."""
    names = tag_names_for_entries(db, [e.id for e in entries])
    return [entry_to_read(e, names.get(e.id)) for e in entries]


def get_entry(
    db: Session,
    entry_id: int,
    scope: ActorScope | None = None,
) -> EvidenceEntryRead:
    """Return one entry with its tags. Entries outside scope are reported as not found."""
    entry = get_scoped_entry_row(db, entry_id, scope)
    return entries_to_read(db, [entry])[0]


# ── Mutations ───────────────────────────────────────────────────────


def create_entry(db: Session, data: EvidenceEntryCreate) -> EvidenceEntry:
    """Persist a new active entry from validated submission data."""
    entry = EvidenceEntry(
        employee_id=data.employee_id,
        manager_id=data.manager_id,
        dimension=data.dimension.value,
        star_rating=data.star_rating,
        content=data.content,
        entry_date=data.entry_date,
        status="active",
        attachment_count=data.attachment_count,
        approval_status=data.approval_status.value,
        evidence_source=data.evidence_source.value if data.evidence_source else None,
    )
    with atomic(db):
        db.add(entry)
    db.refresh(entry)
    logger.info(
        "evidence_entry_created: id=%s employee_id=%s dimension=%s",
        entry.id,
        entry.employee_id,
        entry.dimension,
    )
    return entry


def update_dimension(db: Session, entry_id: int, dimension: Dimension | str) -> EvidenceEntry:
    """Recategorize an entry under a different dimension."""
    try:
        new_dimension = Dimension(dimension)
    except ValueError:
        raise ValidationError(f"Invalid dimension: {dimension!r}", field="dimension") from None

    with atomic(db):
        entry = get_entry_row(db, entry_id, for_update=True)
        entry.dimension = new_dimension.value
    db.refresh(entry)
    return entry


def delete_entry(db: Session, entry_id: int) -> None:
    """Hard delete an entry. Its tag assignments and archive history go with it."""
    with atomic(db):
        entry = get_entry_row(db, entry_id)
        db.delete(entry)
    logger.info("evidence_entry_deleted: id=%s", entry_id)
