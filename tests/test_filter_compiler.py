"""Tests for the filter compiler (raw parameters -> CompiledQuery)."""

from __future__ import annotations

from datetime import date

import pytest

from evidence_engine.errors import ValidationError
from evidence_engine.schemas.evidence import Dimension
from evidence_engine.schemas.search import ActorScope, SearchFilter
from evidence_engine.services.evidence_search import build_search_filter, compile_filter


class TestBuildSearchFilter:
    """Parsing of untyped parameter maps."""

    def test_empty_and_unknown_keys_mean_no_constraint(self) -> None:
        """Blank values and unrecognized keys are ignored."""
        f = build_search_filter(
            {"employee_id": "", "dimension": "  ", "min_rating": None, "colour": "red"}
        )
        assert f == SearchFilter()

    def test_parses_typed_values(self) -> None:
        """Strings are converted to the field's type."""
        f = build_search_filter(
            {
                "employee_id": "101",
                "dimension": "kpis",
                "min_rating": "2",
                "start_date": "2026-01-01",
                "has_attachments": "true",
                "include_archived": "1",
                "page": "3",
                "limit": "10",
            }
        )
        assert f.employee_id == 101
        assert f.dimension is Dimension.kpis
        assert f.min_rating == 2
        assert f.start_date == date(2026, 1, 1)
        assert f.has_attachments is True
        assert f.include_archived is True
        assert f.page == 3
        assert f.limit == 10

    def test_search_is_alias_for_text(self) -> None:
        """The "search" key fills text when text is absent."""
        assert build_search_filter({"search": " roadmap "}).text == "roadmap"

    def test_tag_ids_deduplicated_in_order(self) -> None:
        """Repeated tag IDs collapse, keeping first occurrence order."""
        f = build_search_filter({"tags": [3, "1", 3, ""]})
        assert f.tag_ids == (3, 1)

    def test_comma_joined_tag_string_rejected(self) -> None:
        """Tags must already be split into a list."""
        with pytest.raises(ValidationError) as exc_info:
            build_search_filter({"tags": "1,2"})
        assert exc_info.value.field == "tags"

    @pytest.mark.parametrize(
        "raw, field",
        [
            ({"min_rating": "abc"}, "min_rating"),
            ({"employee_id": "1.5"}, "employee_id"),
            ({"start_date": "2026-13-01"}, "start_date"),
            ({"dimension": "charisma"}, "dimension"),
            ({"has_attachments": "maybe"}, "has_attachments"),
        ],
    )
    def test_malformed_value_names_field(self, raw: dict, field: str) -> None:
        """A present but unparseable value raises ValidationError naming the field."""
        with pytest.raises(ValidationError) as exc_info:
            build_search_filter(raw)
        assert exc_info.value.field == field

    @pytest.mark.parametrize(
        "raw, field",
        [
            ({"employee_id": "99999999999999999999"}, "employee_id"),
            ({"manager_id": "-99999999999999999999"}, "manager_id"),
            ({"page": "2147483648"}, "page"),
            ({"limit": "99999999999"}, "limit"),
            ({"content_length_min": "2147483648"}, "content_length_min"),
            ({"tags": [1, 2**31]}, "tags"),
        ],
    )
    def test_integer_beyond_column_range_names_field(self, raw: dict, field: str) -> None:
        """Integers that do not fit a 32-bit column are rejected before any query."""
        with pytest.raises(ValidationError) as exc_info:
            build_search_filter(raw)
        assert exc_info.value.field == field

    def test_column_range_edges_accepted(self) -> None:
        """The largest and smallest 32-bit values still parse."""
        f = build_search_filter({"employee_id": "2147483647", "manager_id": "-2147483648"})
        assert f.employee_id == 2**31 - 1
        assert f.manager_id == -(2**31)


class TestCompileFilter:
    """Validation and predicate construction."""

    def test_default_excludes_archived(self) -> None:
        """With no parameters only the archive exclusion applies."""
        compiled = compile_filter({})
        assert compiled.predicate_names == ["exclude_archived"]
        assert compiled.page == 1
        assert compiled.limit == 20
        assert compiled.offset == 0

    def test_include_archived_drops_exclusion(self) -> None:
        """include_archived=true removes the archive predicate."""
        compiled = compile_filter({"include_archived": "true"})
        assert "exclude_archived" not in compiled.predicate_names

    def test_one_predicate_per_tag(self) -> None:
        """Each requested tag becomes its own membership predicate."""
        compiled = compile_filter({"tags": [4, 9]})
        assert "tag:4" in compiled.predicate_names
        assert "tag:9" in compiled.predicate_names

    def test_limit_clamped_to_max(self) -> None:
        """Requests above the maximum page size are clamped, not rejected."""
        assert compile_filter({"limit": "500"}).limit == 100

    def test_offset_from_page_and_limit(self) -> None:
        """offset = (page - 1) * limit."""
        assert compile_filter({"page": "3", "limit": "10"}).offset == 20

    @pytest.mark.parametrize(
        "raw, field",
        [
            ({"min_rating": "0"}, "min_rating"),
            ({"max_rating": "6"}, "max_rating"),
            ({"min_rating": "4", "max_rating": "2"}, "min_rating"),
            ({"start_date": "2026-05-01", "end_date": "2026-04-01"}, "start_date"),
            ({"content_length_min": "-1"}, "content_length_min"),
            ({"content_length_min": "50", "content_length_max": "10"}, "content_length_min"),
            ({"page": "0"}, "page"),
            ({"limit": "0"}, "limit"),
        ],
    )
    def test_invalid_bounds_rejected(self, raw: dict, field: str) -> None:
        """Out-of-range and inverted bounds raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            compile_filter(raw)
        assert exc_info.value.field == field

    def test_equal_bounds_allowed(self) -> None:
        """min == max is a valid range."""
        compiled = compile_filter({"min_rating": "3", "max_rating": "3"})
        assert {"min_rating", "max_rating"} <= set(compiled.predicate_names)

    def test_scope_predicates_come_first(self) -> None:
        """Scope restrictions are added ahead of filter predicates."""
        scope = ActorScope(employee_ids=(1, 2), manager_id=7)
        compiled = compile_filter({"dimension": "values"}, scope)
        assert compiled.predicate_names[:2] == ["scope_employees", "scope_manager"]
        assert "dimension" in compiled.predicate_names

    def test_page_times_limit_beyond_column_range_rejected(self) -> None:
        """A page whose offset cannot be represented is rejected, naming page."""
        with pytest.raises(ValidationError) as exc_info:
            compile_filter({"page": "2147483647", "limit": "100"})
        assert exc_info.value.field == "page"

    @pytest.mark.parametrize(
        "search_filter, field",
        [
            (SearchFilter(employee_id=2**40), "employee_id"),
            (SearchFilter(manager_id=-(2**40)), "manager_id"),
            (SearchFilter(tag_ids=(2**33,)), "tags"),
        ],
    )
    def test_prebuilt_filter_beyond_column_range_rejected(
        self, search_filter: SearchFilter, field: str
    ) -> None:
        """Range checks also apply to a SearchFilter built in code."""
        with pytest.raises(ValidationError) as exc_info:
            compile_filter(search_filter)
        assert exc_info.value.field == field

    def test_accepts_prebuilt_search_filter(self) -> None:
        """A SearchFilter is validated and compiled without re-parsing."""
        compiled = compile_filter(SearchFilter(min_rating=4, limit=5))
        assert "min_rating" in compiled.predicate_names
        assert compiled.limit == 5
