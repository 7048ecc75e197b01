"""Entry Store search: execute a CompiledQuery and report the pre-pagination total.

Results are ordered by entry_date DESC, id DESC, so re-running the same
compiled query without intervening writes returns the same page.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from evidence_engine.errors import StorageError
from evidence_engine.models import EvidenceEntry
from evidence_engine.schemas.search import PaginationMeta, SearchResponse
from evidence_engine.services.entry_store import entries_to_read
from evidence_engine.services.evidence_search.filter_compiler import CompiledQuery

logger = logging.getLogger(__name__)


@dataclass
class SearchPage:
    """One page of matching entries plus the total match count."""

    entries: list[EvidenceEntry]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total


def search_entries(db: Session, compiled: CompiledQuery) -> SearchPage:
    """Run compiled against the entry table.

    Raises StorageError on database faults so callers can tell a failed
    query from an empty result.
    """
    try:
        base_query = db.query(EvidenceEntry).filter(*compiled.clauses)
        total = base_query.order_by(None).count()
        entries = (
            base_query.order_by(*compiled.order_by)
            .offset(compiled.offset)
            .limit(compiled.limit)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Evidence search failed")
        raise StorageError(f"Search failed: {exc.__class__.__name__}") from exc
    return SearchPage(entries=entries, total=total, page=compiled.page, limit=compiled.limit)


def build_search_response(db: Session, result: SearchPage) -> SearchResponse:
    """Assemble the collaborator-facing response with tags and pagination metadata."""
    try:
        results = entries_to_read(db, result.entries)
    except SQLAlchemyError as exc:
        logger.exception("Loading tags for search results failed")
        raise StorageError(f"Search failed: {exc.__class__.__name__}") from exc
    return SearchResponse(
        results=results,
        pagination=PaginationMeta(
            total=result.total,
            page=result.page,
            limit=result.limit,
            pages=result.pages,
            has_more=result.has_more,
        ),
    )


def search(db: Session, compiled: CompiledQuery) -> SearchResponse:
    """search_entries + build_search_response."""
    return build_search_response(db, search_entries(db, compiled))
