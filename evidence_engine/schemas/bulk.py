"""Bulk operation schemas.

Operations form a closed, discriminated union: each variant carries its own
typed payload, so adding an operation means adding a payload type here and a
branch in the coordinator.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from evidence_engine.schemas.evidence import ArchiveReason, DbInt, Dimension, RowId


class ArchiveOperation(BaseModel):
    operation: Literal["archive"] = "archive"
    reason: ArchiveReason = ArchiveReason.manual
    actor_id: RowId | None = None


class DeleteOperation(BaseModel):
    operation: Literal["delete"] = "delete"


class UpdateDimensionOperation(BaseModel):
    operation: Literal["update_dimension"] = "update_dimension"
    dimension: Dimension


class AddTagsOperation(BaseModel):
    operation: Literal["add_tags"] = "add_tags"
    tag_ids: list[RowId] = Field(..., min_length=1)


BulkOperation = Annotated[
    Union[ArchiveOperation, DeleteOperation, UpdateDimensionOperation, AddTagsOperation],
    Field(discriminator="operation"),
]

BULK_OPERATION_NAMES: frozenset[str] = frozenset(
    {"archive", "delete", "update_dimension", "add_tags"}
)


class BulkOperationRequest(BaseModel):
    """Transport shape: operation name plus an untyped payload."""

    entry_ids: list[DbInt]
    operation: str
    operation_data: dict = Field(default_factory=dict)


class BulkOperationResult(BaseModel):
    """Per-batch outcome. success_count + failed_count == len(entry_ids)."""

    success_count: int = 0
    failed_count: int = 0
    errors: list[str] = Field(default_factory=list)
