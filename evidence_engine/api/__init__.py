"""API routes."""

from evidence_engine.api.approvals import router as approvals_router
from evidence_engine.api.evidence import router as evidence_router
from evidence_engine.api.tags import router as tags_router

__all__ = ["approvals_router", "evidence_router", "tags_router"]
