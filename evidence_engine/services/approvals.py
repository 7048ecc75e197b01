"""Approval workflow for evidence entries.

    none/rejected --request--> pending --decide--> approved | rejected

Every decision leaves an EvidenceApprovalRecord (approver, outcome, comments).
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from evidence_engine.db.session import atomic
from evidence_engine.errors import InvalidStateError, StorageError, ValidationError
from evidence_engine.models import EvidenceApprovalRecord, EvidenceEntry
from evidence_engine.schemas.evidence import ApprovalStatus
from evidence_engine.schemas.search import ActorScope
from evidence_engine.services.entry_store import get_entry_row
from evidence_engine.services.evidence_search.filter_compiler import compile_filter

logger = logging.getLogger(__name__)

_DECISIONS = (ApprovalStatus.approved, ApprovalStatus.rejected)


def list_pending_approvals(
    db: Session,
    scope: ActorScope | None = None,
    *,
    limit: int = 100,
) -> list[EvidenceEntry]:
    """Active entries awaiting approval within scope, newest first."""
    compiled = compile_filter({"approval_status": ApprovalStatus.pending.value}, scope)
    try:
        return (
            db.query(EvidenceEntry)
            .filter(*compiled.clauses)
            .order_by(EvidenceEntry.created_at.desc(), EvidenceEntry.id.desc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("list_pending_approvals failed")
        raise StorageError(f"Database error: {exc.__class__.__name__}") from exc


def request_approval(db: Session, entry_id: int) -> EvidenceEntry:
    """Submit an entry for approval. Pending or approved entries are rejected."""
    with atomic(db):
        entry = get_entry_row(db, entry_id, for_update=True)
        if entry.status == "archived":
            raise InvalidStateError(f"Entry {entry_id} is archived")
        if entry.approval_status not in (ApprovalStatus.none.value, ApprovalStatus.rejected.value):
            raise InvalidStateError(
                f"Entry {entry_id} approval is already {entry.approval_status}"
            )
        entry.approval_status = ApprovalStatus.pending.value
    db.refresh(entry)
    logger.info("evidence_approval_requested: id=%s", entry_id)
    return entry


def process_approval(
    db: Session,
    entry_id: int,
    decision: ApprovalStatus | str,
    approver_id: int | None = None,
    comments: str | None = None,
) -> EvidenceEntry:
    """Approve or reject a pending entry and record who decided and why.

    The status change and the approval record are written in one transaction.
    """
    try:
        status = ApprovalStatus(decision)
    except ValueError:
        status = None
    if status not in _DECISIONS:
        raise ValidationError("decision must be approved or rejected", field="decision")
    clean_comments = (comments or "").strip() or None

    with atomic(db):
        entry = get_entry_row(db, entry_id, for_update=True)
        if entry.approval_status != ApprovalStatus.pending.value:
            raise InvalidStateError(
                f"Entry {entry_id} is not pending approval (status={entry.approval_status})"
            )
        entry.approval_status = status.value
        db.add(
            EvidenceApprovalRecord(
                entry_id=entry.id,
                approver_id=approver_id,
                status=status.value,
                comments=clean_comments,
            )
        )
    db.refresh(entry)
    logger.info(
        "evidence_approval_processed: id=%s decision=%s approver=%s",
        entry_id,
        status.value,
        approver_id,
    )
    return entry


def approval_history(db: Session, entry_id: int) -> list[EvidenceApprovalRecord]:
    """Return the entry's approval decisions, oldest first."""
    get_entry_row(db, entry_id)
    try:
        return (
            db.query(EvidenceApprovalRecord)
            .filter(EvidenceApprovalRecord.entry_id == entry_id)
            .order_by(EvidenceApprovalRecord.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("approval_history failed for entry %s", entry_id)
        raise StorageError(f"Database error: {exc.__class__.__name__}") from exc
