"""Evidence search: filter compilation and query execution."""

from evidence_engine.services.evidence_search.filter_compiler import (
    CompiledQuery,
    Predicate,
    build_search_filter,
    compile_filter,
)
from evidence_engine.services.evidence_search.query_service import (
    SearchPage,
    build_search_response,
    search,
    search_entries,
)

__all__ = [
    "CompiledQuery",
    "Predicate",
    "SearchPage",
    "build_search_filter",
    "build_search_response",
    "compile_filter",
    "search",
    "search_entries",
]
