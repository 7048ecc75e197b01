"""Approval queue API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from evidence_engine.api.deps import get_actor_scope, http_error, require_internal_token
from evidence_engine.db.session import get_db
from evidence_engine.errors import EvidenceError
from evidence_engine.schemas.evidence import EvidenceEntryRead
from evidence_engine.schemas.search import ActorScope
from evidence_engine.services.approvals import list_pending_approvals
from evidence_engine.services.entry_store import entries_to_read

router = APIRouter(dependencies=[Depends(require_internal_token)])


@router.get("/pending", response_model=list[EvidenceEntryRead])
def api_pending_approvals(
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> list[EvidenceEntryRead]:
    """Entries awaiting approval within the caller's scope, newest first."""
    try:
        return entries_to_read(db, list_pending_approvals(db, scope, limit=limit))
    except EvidenceError as exc:
        raise http_error(exc) from exc
