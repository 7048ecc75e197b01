"""Tag Registry: create and list tags, assign them to entries.

Duplicate names (Unicode case-insensitive, surrounding whitespace ignored)
are rejected with ConflictError; the existing tag is never returned in place
of a new one. Assignment and removal are idempotent.
"""

from __future__ import annotations

import logging
import re

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from evidence_engine.config import get_settings
from evidence_engine.db.session import atomic
from evidence_engine.errors import ConflictError, NotFoundError, StorageError, ValidationError
from evidence_engine.models import EvidenceTagAssignment, Tag
from evidence_engine.models.tag import TAG_NAME_MAX_LENGTH, tag_name_key
from evidence_engine.services.entry_store import get_entry_row

logger = logging.getLogger(__name__)

_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def _find_by_name(db: Session, name: str) -> Tag | None:
    try:
        return db.query(Tag).filter(Tag.name_key == tag_name_key(name)).first()
    except SQLAlchemyError as exc:
        logger.exception("Tag lookup by name failed")
        raise StorageError(f"Database error: {exc.__class__.__name__}") from exc


def get_tag(db: Session, tag_id: int) -> Tag:
    """Return a tag by ID or raise NotFoundError."""
    try:
        tag = db.query(Tag).filter(Tag.id == tag_id).first()
    except SQLAlchemyError as exc:
        logger.exception("get_tag failed for tag %s", tag_id)
        raise StorageError(f"Database error: {exc.__class__.__name__}") from exc
    if tag is None:
        raise NotFoundError(f"Tag {tag_id} not found")
    return tag


def create_tag(
    db: Session,
    name: str,
    color: str | None = None,
    description: str | None = None,
    creator: int | None = None,
) -> Tag:
    """Create a tag.

    Raises ValidationError for an empty/too-long name or a malformed color,
    ConflictError when a tag with the same name (any case) already exists.
    """
    clean_name = (name or "").strip()
    if not clean_name:
        raise ValidationError("tag_name is required", field="tag_name")
    if len(clean_name) > TAG_NAME_MAX_LENGTH:
        raise ValidationError(
            f"tag_name must be at most {TAG_NAME_MAX_LENGTH} characters", field="tag_name"
        )
    clean_color = (color or "").strip() or get_settings().default_tag_color
    if not _COLOR_RE.match(clean_color):
        raise ValidationError("tag_color must look like #RRGGBB", field="tag_color")

    existing = _find_by_name(db, clean_name)
    if existing is not None:
        raise ConflictError(f"Tag '{existing.name}' already exists (id={existing.id})")

    tag = Tag(
        name=clean_name,
        color=clean_color,
        description=description,
        created_by=creator,
        is_active=True,
    )
    try:
        with atomic(db):
            db.add(tag)
    except ConflictError:
        # Lost a race against a concurrent create with the same name
        raise ConflictError(f"Tag '{clean_name}' already exists") from None
    db.refresh(tag)
    logger.info("evidence_tag_created: id=%s name=%s", tag.id, tag.name)
    return tag


def list_tags(db: Session, *, include_inactive: bool = False) -> list[Tag]:
    """Return tags ordered by name (case-insensitive), then id."""
    try:
        query = db.query(Tag)
        if not include_inactive:
            query = query.filter(Tag.is_active == True)
        return query.order_by(Tag.name_key.asc(), Tag.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception("list_tags failed")
        raise StorageError(f"Database error: {exc.__class__.__name__}") from exc


def deactivate_tag(db: Session, tag_id: int) -> Tag:
    """Hide a tag from listings and new assignments. Existing assignments stay."""
    with atomic(db):
        tag = get_tag(db, tag_id)
        tag.is_active = False
    db.refresh(tag)
    logger.info("evidence_tag_deactivated: id=%s", tag_id)
    return tag


def assign_tags(db: Session, entry_id: int, tag_ids: list[int]) -> list[int]:
    """Attach tags to an entry. Already-present assignments are left alone.

    All tags must exist and be active; otherwise nothing is written.
    Returns the tag IDs newly assigned.
    """
    wanted = list(dict.fromkeys(tag_ids))
    if not wanted:
        return []

    with atomic(db):
        get_entry_row(db, entry_id, for_update=True)
        found = {
            row[0]
            for row in db.query(Tag.id)
            .filter(Tag.id.in_(wanted), Tag.is_active == True)
            .all()
        }
        missing = [t for t in wanted if t not in found]
        if missing:
            raise NotFoundError(
                "Tag(s) not found: " + ", ".join(str(t) for t in missing)
            )
        already = {
            row[0]
            for row in db.query(EvidenceTagAssignment.tag_id)
            .filter(
                EvidenceTagAssignment.entry_id == entry_id,
                EvidenceTagAssignment.tag_id.in_(wanted),
            )
            .all()
        }
        added = [t for t in wanted if t not in already]
        for tag_id in added:
            db.add(EvidenceTagAssignment(entry_id=entry_id, tag_id=tag_id))
    return added


def remove_assignment(db: Session, entry_id: int, tag_id: int) -> bool:
    """Detach one tag from an entry. Returns False if it was not attached."""
    with atomic(db):
        removed = (
            db.query(EvidenceTagAssignment)
            .filter(
                EvidenceTagAssignment.entry_id == entry_id,
                EvidenceTagAssignment.tag_id == tag_id,
            )
            .delete(synchronize_session="fetch")
        )
    return removed > 0


def remove_tags(db: Session, entry_id: int, tag_ids: list[int] | None = None) -> int:
    """Detach the listed tags from an entry, or every tag when tag_ids is None.

    Returns the number of assignments removed.
    """
    if tag_ids is not None and not tag_ids:
        return 0
    with atomic(db):
        get_entry_row(db, entry_id)
        query = db.query(EvidenceTagAssignment).filter(
            EvidenceTagAssignment.entry_id == entry_id
        )
        if tag_ids is not None:
            query = query.filter(EvidenceTagAssignment.tag_id.in_(tag_ids))
        removed = query.delete(synchronize_session="fetch")
    return removed
