"""Evidence API routes: search, statistics, bulk operations, archive/restore, tags.

Routes that read or change one entry honor the caller's scope headers; an
entry outside scope answers 404, the same as a missing one.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from evidence_engine.api.deps import (
    EntryId,
    TagId,
    get_actor_scope,
    http_error,
    require_internal_token,
    split_id_list,
)
from evidence_engine.db.session import get_db
from evidence_engine.errors import EvidenceError
from evidence_engine.schemas.bulk import BulkOperationRequest, BulkOperationResult
from evidence_engine.schemas.evidence import (
    ApprovalDecisionRequest,
    ApprovalRecordRead,
    ArchiveRecordRead,
    ArchiveRequest,
    EvidenceEntryCreate,
    EvidenceEntryRead,
    SuccessResponse,
)
from evidence_engine.schemas.search import ActorScope, SearchResponse
from evidence_engine.schemas.statistics import EvidenceStatistics
from evidence_engine.schemas.tag import TagAssignRequest
from evidence_engine.services.approvals import (
    approval_history,
    process_approval,
    request_approval,
)
from evidence_engine.services.archive_lifecycle import (
    archive_entry,
    archive_history,
    restore_entry,
)
from evidence_engine.services.bulk_operations import bulk_apply, parse_bulk_operation
from evidence_engine.services.entry_store import (
    create_entry,
    entry_to_read,
    get_entry,
    get_scoped_entry_row,
)
from evidence_engine.services.evidence_search import compile_filter, search
from evidence_engine.services.statistics import summarize
from evidence_engine.services.tag_registry import assign_tags, remove_assignment

router = APIRouter(dependencies=[Depends(require_internal_token)])


def _filter_params(request: Request) -> dict:
    """Flatten query parameters; tags arrive comma-joined and are split here only."""
    params: dict = dict(request.query_params)
    raw_tags = ",".join(request.query_params.getlist("tags"))
    params["tags"] = split_id_list(raw_tags, "tags") or []
    return params


# ── Search & statistics ─────────────────────────────────────────────


@router.get("/search", response_model=SearchResponse)
def api_search_evidence(
    request: Request,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> SearchResponse:
    """Search evidence entries.

    Query params: text, employee_id, manager_id, dimension, min_rating,
    max_rating, start_date, end_date, tags (comma list of tag IDs; entries
    must carry all of them), include_archived, content_length_min,
    content_length_max, has_attachments, approval_status, evidence_source,
    page, limit. Empty params are ignored; malformed ones return 422.
    """
    try:
        compiled = compile_filter(_filter_params(request), scope)
        return search(db, compiled)
    except EvidenceError as exc:
        raise http_error(exc) from exc


@router.get("/statistics", response_model=EvidenceStatistics)
def api_evidence_statistics(
    request: Request,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> EvidenceStatistics:
    """Summary counts over the same filter shape as search."""
    try:
        compiled = compile_filter(_filter_params(request), scope)
        return summarize(db, compiled)
    except EvidenceError as exc:
        raise http_error(exc) from exc


# ── Bulk ────────────────────────────────────────────────────────────


@router.post("/bulk", response_model=BulkOperationResult)
def api_bulk_operation(
    data: BulkOperationRequest,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> BulkOperationResult:
    """Apply one operation (archive, delete, update_dimension, add_tags) to many entries.

    Per-entry failures, including entries outside scope, are reported in the
    body; only an empty ID list or a bad operation/payload returns 422.
    """
    try:
        operation = parse_bulk_operation(data.operation, data.operation_data)
        return bulk_apply(db, data.entry_ids, operation, scope)
    except EvidenceError as exc:
        raise http_error(exc) from exc


# ── Single entry ────────────────────────────────────────────────────


@router.post("", response_model=EvidenceEntryRead, status_code=201)
def api_create_evidence(
    data: EvidenceEntryCreate,
    db: Session = Depends(get_db),
) -> EvidenceEntryRead:
    """Record a new evidence entry (called by the submission flow)."""
    try:
        return entry_to_read(create_entry(db, data))
    except EvidenceError as exc:
        raise http_error(exc) from exc


@router.get("/{entry_id}", response_model=EvidenceEntryRead)
def api_get_evidence(
    entry_id: EntryId,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> EvidenceEntryRead:
    """Get a single entry with its tags."""
    try:
        return get_entry(db, entry_id, scope)
    except EvidenceError as exc:
        raise http_error(exc) from exc


@router.post("/{entry_id}/archive", response_model=SuccessResponse)
def api_archive_evidence(
    entry_id: EntryId,
    data: ArchiveRequest | None = None,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> SuccessResponse:
    """Archive an active entry. 409 if it is already archived."""
    reason = data.reason if data is not None else None
    try:
        get_scoped_entry_row(db, entry_id, scope)
        archive_entry(db, entry_id, reason, actor_id=scope.manager_id)
    except EvidenceError as exc:
        raise http_error(exc) from exc
    return SuccessResponse(success=True)


@router.post("/{entry_id}/restore", response_model=SuccessResponse)
def api_restore_evidence(
    entry_id: EntryId,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> SuccessResponse:
    """Restore an archived entry. 409 if it is already active."""
    try:
        get_scoped_entry_row(db, entry_id, scope)
        restore_entry(db, entry_id)
    except EvidenceError as exc:
        raise http_error(exc) from exc
    return SuccessResponse(success=True)


@router.get("/{entry_id}/archive-history", response_model=list[ArchiveRecordRead])
def api_archive_history(
    entry_id: EntryId,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> list[ArchiveRecordRead]:
    """Archive/restore history for an entry, oldest first."""
    try:
        get_scoped_entry_row(db, entry_id, scope)
        records = archive_history(db, entry_id)
    except EvidenceError as exc:
        raise http_error(exc) from exc
    return [ArchiveRecordRead.model_validate(r) for r in records]


@router.put("/{entry_id}/tags", response_model=EvidenceEntryRead)
def api_assign_tags(
    entry_id: EntryId,
    data: TagAssignRequest,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> EvidenceEntryRead:
    """Attach tags to an entry (idempotent). Returns the entry with its tags."""
    try:
        get_scoped_entry_row(db, entry_id, scope)
        assign_tags(db, entry_id, data.tag_ids)
        return get_entry(db, entry_id, scope)
    except EvidenceError as exc:
        raise http_error(exc) from exc


@router.delete("/{entry_id}/tags/{tag_id}", status_code=204)
def api_remove_tag(
    entry_id: EntryId,
    tag_id: TagId,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> None:
    """Detach a tag from an entry. Succeeds even if it was not attached."""
    try:
        get_scoped_entry_row(db, entry_id, scope)
        remove_assignment(db, entry_id, tag_id)
    except EvidenceError as exc:
        raise http_error(exc) from exc


@router.post("/{entry_id}/approval-request", response_model=EvidenceEntryRead)
def api_request_approval(
    entry_id: EntryId,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> EvidenceEntryRead:
    """Submit an entry for approval."""
    try:
        get_scoped_entry_row(db, entry_id, scope)
        request_approval(db, entry_id)
        return get_entry(db, entry_id, scope)
    except EvidenceError as exc:
        raise http_error(exc) from exc


@router.post("/{entry_id}/approval", response_model=EvidenceEntryRead)
def api_process_approval(
    entry_id: EntryId,
    data: ApprovalDecisionRequest,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> EvidenceEntryRead:
    """Approve or reject a pending entry, with optional comments."""
    try:
        get_scoped_entry_row(db, entry_id, scope)
        process_approval(
            db,
            entry_id,
            data.decision,
            approver_id=scope.manager_id,
            comments=data.comments,
        )
        return get_entry(db, entry_id, scope)
    except EvidenceError as exc:
        raise http_error(exc) from exc


@router.get("/{entry_id}/approval-history", response_model=list[ApprovalRecordRead])
def api_approval_history(
    entry_id: EntryId,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> list[ApprovalRecordRead]:
    """Approve/reject decisions for an entry, oldest first."""
    try:
        get_scoped_entry_row(db, entry_id, scope)
        records = approval_history(db, entry_id)
    except EvidenceError as exc:
        raise http_error(exc) from exc
    return [ApprovalRecordRead.model_validate(r) for r in records]
