"""Shared FastAPI dependencies for API routes."""

from __future__ import annotations

import logging
import secrets
from typing import Annotated

from fastapi import Header, HTTPException, Path, status

from evidence_engine.config import get_settings
from evidence_engine.db.session import get_db  # re-export
from evidence_engine.errors import (
    ConflictError,
    EvidenceError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from evidence_engine.schemas.evidence import DB_INT_MAX, DB_INT_MIN
from evidence_engine.schemas.search import ActorScope

logger = logging.getLogger(__name__)

EntryId = Annotated[int, Path(ge=1, le=DB_INT_MAX)]
TagId = Annotated[int, Path(ge=1, le=DB_INT_MAX)]

__all__ = [
    "EntryId",
    "TagId",
    "get_db",
    "get_actor_scope",
    "http_error",
    "require_internal_token",
    "split_id_list",
]


def require_internal_token(x_internal_token: str | None = Header(None)) -> None:
    """Validate the service token from the X-Internal-Token header.

    Uses constant-time comparison to prevent timing attacks.
    Raises 403 if the token is missing, unconfigured, or does not match.
    """
    expected = get_settings().internal_api_token
    if not expected or not x_internal_token or not secrets.compare_digest(
        x_internal_token, expected
    ):
        logger.warning("API auth failed: invalid or missing token")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid internal token")


def split_id_list(raw: str | None, param_name: str) -> list[int] | None:
    """Split a comma-joined ID list from the transport layer.

    None or blank -> None. Non-integer or out-of-range items raise 422.
    """
    if raw is None or not raw.strip():
        return None
    try:
        ids = [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid {param_name}: must be a comma-separated list of integers",
        ) from None
    if any(not DB_INT_MIN <= i <= DB_INT_MAX for i in ids):
        raise HTTPException(status_code=422, detail=f"Invalid {param_name}: ID out of range")
    return ids


def get_actor_scope(
    x_scope_employee_ids: str | None = Header(None),
    x_scope_manager_id: str | None = Header(None),
) -> ActorScope:
    """Build the caller's visibility window from headers set by the auth layer.

    An X-Scope-Employee-Ids header that is present but empty means no employees
    are visible.
    """
    employee_ids: list[int] | None = None
    if x_scope_employee_ids is not None:
        employee_ids = split_id_list(x_scope_employee_ids, "X-Scope-Employee-Ids") or []
    manager_id: int | None = None
    if x_scope_manager_id is not None and x_scope_manager_id.strip():
        try:
            manager_id = int(x_scope_manager_id)
        except ValueError:
            raise HTTPException(
                status_code=422, detail="Invalid X-Scope-Manager-Id: must be an integer"
            ) from None
        if not DB_INT_MIN <= manager_id <= DB_INT_MAX:
            raise HTTPException(
                status_code=422, detail="Invalid X-Scope-Manager-Id: ID out of range"
            )
    return ActorScope(employee_ids=employee_ids, manager_id=manager_id)


def http_error(exc: EvidenceError) -> HTTPException:
    """Translate an engine error into the HTTPException a route should raise."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=exc.message)
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=exc.message)
    if isinstance(exc, (ConflictError, InvalidStateError)):
        return HTTPException(status_code=409, detail=exc.message)
    if isinstance(exc, StorageError):
        return HTTPException(
            status_code=503, detail=exc.message, headers={"Retry-After": "1"}
        )
    return HTTPException(status_code=500, detail=exc.message)
