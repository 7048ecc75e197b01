"""Error taxonomy for the evidence engine.

Single-item operations raise these directly. Bulk operations capture them
per item in BulkOperationResult and only raise for caller-level
precondition violations.
"""

from __future__ import annotations


class EvidenceError(Exception):
    """Base class for all engine errors."""

    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EvidenceError):
    """Malformed filter bounds, bad payload fields, empty entry-ID list."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ConflictError(EvidenceError):
    """Uniqueness violation, e.g. a duplicate tag name."""


class InvalidStateError(EvidenceError):
    """Transition not allowed from the entry's current state."""


class NotFoundError(EvidenceError):
    """Entry or tag does not exist."""


class StorageError(EvidenceError):
    """Transient database fault. Safe to retry."""

    retryable = True
