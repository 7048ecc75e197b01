"""Bulk Operation Coordinator: apply one operation across many entries.

Entries are processed in the order given, each in its own transaction. A
failure on one entry is recorded and the loop moves on; there is no
cross-entry atomicity. success_count + failed_count always equals the
number of IDs supplied.
"""

from __future__ import annotations

import logging
from typing import Any, assert_never

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from evidence_engine.errors import EvidenceError, ValidationError
from evidence_engine.schemas.bulk import (
    BULK_OPERATION_NAMES,
    AddTagsOperation,
    ArchiveOperation,
    BulkOperation,
    BulkOperationResult,
    DeleteOperation,
    UpdateDimensionOperation,
)
from evidence_engine.schemas.search import ActorScope
from evidence_engine.services.archive_lifecycle import archive_entry
from evidence_engine.services.entry_store import (
    delete_entry,
    get_scoped_entry_row,
    update_dimension,
)
from evidence_engine.services.tag_registry import assign_tags

logger = logging.getLogger(__name__)

_operation_adapter: TypeAdapter[BulkOperation] = TypeAdapter(BulkOperation)


def parse_bulk_operation(operation: str, operation_data: dict[str, Any] | None) -> BulkOperation:
    """Turn a transport-level (name, payload) pair into a typed operation.

    Raises ValidationError for an unknown operation name or a payload that
    does not fit the operation's schema (e.g. update_dimension without a
    dimension).
    """
    name = (operation or "").strip()
    if name not in BULK_OPERATION_NAMES:
        raise ValidationError(f"Unknown operation: {operation}", field="operation")
    payload = dict(operation_data or {})
    payload["operation"] = name
    # The original transport used "tags" for the add_tags payload
    if name == "add_tags" and "tag_ids" not in payload and "tags" in payload:
        payload["tag_ids"] = payload.pop("tags")
    try:
        return _operation_adapter.validate_python(payload)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(p) for p in first.get("loc", ()) if p != name)
        raise ValidationError(
            f"Invalid operation_data for {name}: {location or 'payload'}: {first.get('msg')}",
            field="operation_data",
        ) from None


def _apply_one(
    db: Session,
    entry_id: int,
    operation: BulkOperation,
    scope: ActorScope | None = None,
) -> None:
    """Single-entry equivalent of operation. Raises EvidenceError on failure."""
    if scope is not None:
        get_scoped_entry_row(db, entry_id, scope)
    if isinstance(operation, ArchiveOperation):
        archive_entry(db, entry_id, operation.reason, actor_id=operation.actor_id)
    elif isinstance(operation, DeleteOperation):
        delete_entry(db, entry_id)
    elif isinstance(operation, UpdateDimensionOperation):
        update_dimension(db, entry_id, operation.dimension)
    elif isinstance(operation, AddTagsOperation):
        assign_tags(db, entry_id, operation.tag_ids)
    else:
        assert_never(operation)


def bulk_apply(
    db: Session,
    entry_ids: list[int],
    operation: BulkOperation,
    scope: ActorScope | None = None,
) -> BulkOperationResult:
    """Apply operation to each entry in entry_ids, accumulating outcomes.

    Raises ValidationError only for caller-level problems (empty ID list).
    Item-level failures never raise; they are counted and described in
    BulkOperationResult.errors as "Entry <id>: <message>". Entries outside
    scope fail as not found, the same as missing ones.
    """
    if not entry_ids:
        raise ValidationError("No entries selected for bulk operation", field="entry_ids")

    result = BulkOperationResult()
    for entry_id in entry_ids:
        try:
            _apply_one(db, entry_id, operation, scope)
        except EvidenceError as exc:
            result.failed_count += 1
            result.errors.append(f"Entry {entry_id}: {exc.message}")
            logger.warning(
                "bulk_%s failed for entry %s: %s", operation.operation, entry_id, exc.message
            )
            continue
        except Exception as exc:
            db.rollback()
            result.failed_count += 1
            result.errors.append(f"Entry {entry_id}: {exc}")
            logger.exception("bulk_%s crashed for entry %s", operation.operation, entry_id)
            continue
        result.success_count += 1

    logger.info(
        "bulk_%s completed: requested=%d success=%d failed=%d",
        operation.operation,
        len(entry_ids),
        result.success_count,
        result.failed_count,
    )
    return result
