"""Statistics Aggregator: read-only summary over a compiled predicate set.

Uses the same predicates as the search it accompanies (pagination ignored),
so include_archived is honored identically.
"""

from __future__ import annotations

import logging

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from evidence_engine.errors import StorageError
from evidence_engine.models import EvidenceEntry
from evidence_engine.schemas.statistics import EvidenceStatistics
from evidence_engine.services.evidence_search.filter_compiler import CompiledQuery

logger = logging.getLogger(__name__)

POSITIVE_RATING = 4
NEUTRAL_RATING = 3


def _count_where(condition) -> object:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def summarize(db: Session, compiled: CompiledQuery) -> EvidenceStatistics:
    """Compute totals, rating mix and coverage for entries matching compiled."""
    rating = EvidenceEntry.star_rating
    try:
        row = (
            db.query(
                func.count(EvidenceEntry.id),
                func.avg(rating),
                _count_where(rating >= POSITIVE_RATING),
                _count_where(rating == NEUTRAL_RATING),
                _count_where(rating < NEUTRAL_RATING),
                func.count(func.distinct(EvidenceEntry.employee_id)),
                func.count(func.distinct(EvidenceEntry.manager_id)),
                func.count(func.distinct(EvidenceEntry.dimension)),
            )
            .filter(*compiled.clauses)
            .one()
        )
        dimension_rows = (
            db.query(EvidenceEntry.dimension, func.count(EvidenceEntry.id))
            .filter(*compiled.clauses)
            .group_by(EvidenceEntry.dimension)
            .order_by(EvidenceEntry.dimension.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("Evidence statistics query failed")
        raise StorageError(f"Statistics failed: {exc.__class__.__name__}") from exc

    total, avg_rating, positive, neutral, negative, employees, managers, dimensions = row
    return EvidenceStatistics(
        total_entries=total or 0,
        avg_rating=round(float(avg_rating), 2) if avg_rating is not None else None,
        positive_entries=int(positive or 0),
        neutral_entries=int(neutral or 0),
        negative_entries=int(negative or 0),
        unique_employees=employees or 0,
        unique_managers=managers or 0,
        dimensions_covered=dimensions or 0,
        by_dimension={dimension: count for dimension, count in dimension_rows},
    )
