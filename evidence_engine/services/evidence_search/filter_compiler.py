"""Filter compiler: raw search parameters -> validated SearchFilter -> CompiledQuery.

Permissive on absence, strict on malformed presence: missing, empty and
unrecognized keys mean "no constraint"; a present value that cannot be
parsed raises ValidationError naming the field.

Multi-tag filters use ALL semantics: an entry must carry every requested tag.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from sqlalchemy import ColumnElement, false, func, select

from evidence_engine.config import get_settings
from evidence_engine.errors import ValidationError
from evidence_engine.models import EvidenceEntry, EvidenceTagAssignment
from evidence_engine.schemas.evidence import (
    DB_INT_MAX,
    DB_INT_MIN,
    ApprovalStatus,
    Dimension,
    EvidenceSource,
)
from evidence_engine.schemas.search import ActorScope, SearchFilter

MIN_RATING = 1
MAX_RATING = 5

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})


@dataclass(frozen=True)
class Predicate:
    """One named WHERE clause. Names make compiled queries inspectable."""

    name: str
    clause: ColumnElement[bool]


@dataclass(frozen=True)
class CompiledQuery:
    """Validated predicates plus a total sort order and a pagination window."""

    filter: SearchFilter
    predicates: tuple[Predicate, ...]
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def clauses(self) -> list[ColumnElement[bool]]:
        return [p.clause for p in self.predicates]

    @property
    def predicate_names(self) -> list[str]:
        return [p.name for p in self.predicates]

    @property
    def order_by(self) -> tuple:
        # entry_date alone is not unique; id makes the order total so pages never overlap
        return (EvidenceEntry.entry_date.desc(), EvidenceEntry.id.desc())


# ── Field parsers ───────────────────────────────────────────────────


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def _parse_int(name: str, value: Any) -> int | None:
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer", field=name)
    if isinstance(value, int):
        parsed = value
    else:
        try:
            parsed = int(str(value).strip())
        except ValueError:
            raise ValidationError(f"{name} must be an integer", field=name) from None
    if not DB_INT_MIN <= parsed <= DB_INT_MAX:
        raise ValidationError(f"{name} is out of range", field=name)
    return parsed


def _parse_bool(name: str, value: Any) -> bool | None:
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValidationError(f"{name} must be a boolean", field=name)


def _parse_date(name: str, value: Any) -> date | None:
    if _is_blank(value):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(
            f"{name} must be a valid date (YYYY-MM-DD)", field=name
        ) from None


def _parse_enum(name: str, value: Any, enum_cls: type[Enum]) -> Any:
    if _is_blank(value):
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{name} must be one of: {allowed}", field=name) from None


def _parse_tag_ids(value: Any) -> tuple[int, ...]:
    if _is_blank(value):
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ValidationError("tags must be a list of tag IDs", field="tags")
    seen: dict[int, None] = {}
    for item in value:
        if _is_blank(item):
            continue
        tag_id = _parse_int("tags", item)
        seen.setdefault(tag_id, None)
    return tuple(seen)


def _parse_text(value: Any) -> str | None:
    if _is_blank(value):
        return None
    return str(value).strip()


def build_search_filter(raw: Mapping[str, Any]) -> SearchFilter:
    """Parse a flat, untyped parameter mapping into a SearchFilter.

    Accepts ``search`` as an alias of ``text`` and ``tag_ids`` of ``tags``.
    """
    text = raw.get("text")
    if _is_blank(text):
        text = raw.get("search")
    tags = raw.get("tags")
    if _is_blank(tags):
        tags = raw.get("tag_ids")

    page = _parse_int("page", raw.get("page"))
    return SearchFilter(
        text=_parse_text(text),
        employee_id=_parse_int("employee_id", raw.get("employee_id")),
        manager_id=_parse_int("manager_id", raw.get("manager_id")),
        dimension=_parse_enum("dimension", raw.get("dimension"), Dimension),
        min_rating=_parse_int("min_rating", raw.get("min_rating")),
        max_rating=_parse_int("max_rating", raw.get("max_rating")),
        start_date=_parse_date("start_date", raw.get("start_date")),
        end_date=_parse_date("end_date", raw.get("end_date")),
        content_length_min=_parse_int("content_length_min", raw.get("content_length_min")),
        content_length_max=_parse_int("content_length_max", raw.get("content_length_max")),
        has_attachments=_parse_bool("has_attachments", raw.get("has_attachments")),
        approval_status=_parse_enum("approval_status", raw.get("approval_status"), ApprovalStatus),
        evidence_source=_parse_enum("evidence_source", raw.get("evidence_source"), EvidenceSource),
        tag_ids=_parse_tag_ids(tags),
        include_archived=bool(_parse_bool("include_archived", raw.get("include_archived"))),
        page=1 if page is None else page,
        limit=_parse_int("limit", raw.get("limit")),
    )


# ── Validation ──────────────────────────────────────────────────────


def _check_range(name_min: str, low: Any, name_max: str, high: Any) -> None:
    if low is not None and high is not None and low > high:
        raise ValidationError(f"{name_min} must not exceed {name_max}", field=name_min)


def _check_db_int(name: str, value: int | None) -> None:
    if value is not None and not DB_INT_MIN <= value <= DB_INT_MAX:
        raise ValidationError(f"{name} is out of range", field=name)


def _validate(f: SearchFilter) -> None:
    for name in (
        "employee_id",
        "manager_id",
        "content_length_min",
        "content_length_max",
        "page",
        "limit",
    ):
        _check_db_int(name, getattr(f, name))
    for tag_id in f.tag_ids:
        _check_db_int("tags", tag_id)
    for name in ("min_rating", "max_rating"):
        value = getattr(f, name)
        if value is not None and not MIN_RATING <= value <= MAX_RATING:
            raise ValidationError(
                f"{name} must be between {MIN_RATING} and {MAX_RATING}", field=name
            )
    _check_range("min_rating", f.min_rating, "max_rating", f.max_rating)
    _check_range("start_date", f.start_date, "end_date", f.end_date)
    for name in ("content_length_min", "content_length_max"):
        value = getattr(f, name)
        if value is not None and value < 0:
            raise ValidationError(f"{name} must be zero or greater", field=name)
    _check_range(
        "content_length_min", f.content_length_min, "content_length_max", f.content_length_max
    )
    if f.page < 1:
        raise ValidationError("page must be 1 or greater", field="page")
    if f.limit is not None and f.limit < 1:
        raise ValidationError("limit must be 1 or greater", field="limit")


def _resolve_limit(requested: int | None) -> int:
    settings = get_settings()
    if requested is None:
        return settings.search_default_page_size
    return min(requested, settings.search_max_page_size)


# ── Predicate construction ──────────────────────────────────────────


def _like_pattern(text: str) -> str:
    """Substring pattern with LIKE wildcards in the user text escaped."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _scope_predicates(scope: ActorScope | None) -> list[Predicate]:
    if scope is None:
        return []
    preds: list[Predicate] = []
    if scope.employee_ids is not None:
        if scope.employee_ids:
            clause = EvidenceEntry.employee_id.in_(scope.employee_ids)
        else:
            clause = false()
        preds.append(Predicate("scope_employees", clause))
    if scope.manager_id is not None:
        preds.append(Predicate("scope_manager", EvidenceEntry.manager_id == scope.manager_id))
    return preds


def _filter_predicates(f: SearchFilter) -> list[Predicate]:
    preds: list[Predicate] = []
    if not f.include_archived:
        preds.append(Predicate("exclude_archived", EvidenceEntry.status == "active"))
    if f.employee_id is not None:
        preds.append(Predicate("employee", EvidenceEntry.employee_id == f.employee_id))
    if f.manager_id is not None:
        preds.append(Predicate("manager", EvidenceEntry.manager_id == f.manager_id))
    if f.dimension is not None:
        preds.append(Predicate("dimension", EvidenceEntry.dimension == f.dimension.value))
    if f.min_rating is not None:
        preds.append(Predicate("min_rating", EvidenceEntry.star_rating >= f.min_rating))
    if f.max_rating is not None:
        preds.append(Predicate("max_rating", EvidenceEntry.star_rating <= f.max_rating))
    if f.start_date is not None:
        preds.append(Predicate("start_date", EvidenceEntry.entry_date >= f.start_date))
    if f.end_date is not None:
        preds.append(Predicate("end_date", EvidenceEntry.entry_date <= f.end_date))
    content_length = func.length(EvidenceEntry.content)
    if f.content_length_min is not None:
        preds.append(Predicate("content_length_min", content_length >= f.content_length_min))
    if f.content_length_max is not None:
        preds.append(Predicate("content_length_max", content_length <= f.content_length_max))
    if f.has_attachments is True:
        preds.append(Predicate("has_attachments", EvidenceEntry.attachment_count > 0))
    elif f.has_attachments is False:
        preds.append(Predicate("has_attachments", EvidenceEntry.attachment_count == 0))
    if f.approval_status is not None:
        preds.append(
            Predicate("approval_status", EvidenceEntry.approval_status == f.approval_status.value)
        )
    if f.evidence_source is not None:
        preds.append(
            Predicate("evidence_source", EvidenceEntry.evidence_source == f.evidence_source.value)
        )
    if f.text:
        preds.append(
            Predicate("text", EvidenceEntry.content.ilike(_like_pattern(f.text), escape="\\"))
        )
    # ALL semantics: one membership subquery per requested tag
    for tag_id in f.tag_ids:
        tagged = select(EvidenceTagAssignment.entry_id).where(
            EvidenceTagAssignment.tag_id == tag_id
        )
        preds.append(Predicate(f"tag:{tag_id}", EvidenceEntry.id.in_(tagged)))
    return preds


def compile_filter(
    raw: Mapping[str, Any] | SearchFilter,
    scope: ActorScope | None = None,
) -> CompiledQuery:
    """Validate a filter request and compile it into a CompiledQuery.

    Pure transformation; performs no I/O. Raises ValidationError on malformed
    values or inconsistent bounds.
    """
    search_filter = raw if isinstance(raw, SearchFilter) else build_search_filter(raw)
    _validate(search_filter)
    limit = _resolve_limit(search_filter.limit)
    if search_filter.page * limit > DB_INT_MAX:
        raise ValidationError("page is out of range for the requested limit", field="page")
    predicates = _scope_predicates(scope) + _filter_predicates(search_filter)
    return CompiledQuery(
        filter=search_filter,
        predicates=tuple(predicates),
        page=search_filter.page,
        limit=limit,
    )
