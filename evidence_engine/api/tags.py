"""Tag API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from evidence_engine.api.deps import TagId, get_actor_scope, http_error, require_internal_token
from evidence_engine.db.session import get_db
from evidence_engine.errors import EvidenceError
from evidence_engine.schemas.search import ActorScope
from evidence_engine.schemas.tag import TagCreate, TagList, TagRead
from evidence_engine.services.tag_registry import create_tag, deactivate_tag, list_tags

router = APIRouter(dependencies=[Depends(require_internal_token)])


@router.get("", response_model=TagList)
def api_list_tags(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
) -> TagList:
    """List tags ordered by name."""
    try:
        tags = list_tags(db, include_inactive=include_inactive)
    except EvidenceError as exc:
        raise http_error(exc) from exc
    return TagList(items=[TagRead.model_validate(t) for t in tags])


@router.post("", response_model=TagRead, status_code=201)
def api_create_tag(
    data: TagCreate,
    db: Session = Depends(get_db),
    scope: ActorScope = Depends(get_actor_scope),
) -> TagRead:
    """Create a tag. 409 if a tag with the same name (any case) exists."""
    try:
        tag = create_tag(
            db,
            data.tag_name,
            color=data.tag_color,
            description=data.description,
            creator=scope.manager_id,
        )
    except EvidenceError as exc:
        raise http_error(exc) from exc
    return TagRead.model_validate(tag)


@router.delete("/{tag_id}", response_model=TagRead)
def api_deactivate_tag(
    tag_id: TagId,
    db: Session = Depends(get_db),
) -> TagRead:
    """Deactivate a tag. Existing assignments are kept."""
    try:
        tag = deactivate_tag(db, tag_id)
    except EvidenceError as exc:
        raise http_error(exc) from exc
    return TagRead.model_validate(tag)
