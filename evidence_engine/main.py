"""
Evidence Engine FastAPI application entry point.

Routes: search/statistics → bulk operations → archive lifecycle → tags → approvals
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from evidence_engine import __version__
from evidence_engine.config import get_settings
from evidence_engine.db.session import check_db_connection, engine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("Evidence Engine starting")
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise
        if not get_settings().internal_api_token:
            logger.warning("INTERNAL_API_TOKEN is not set; every /api request will be rejected")

        yield
    finally:
        logger.info("Evidence Engine shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Mount API routes
    from evidence_engine.api.approvals import router as approvals_router
    from evidence_engine.api.evidence import router as evidence_router
    from evidence_engine.api.tags import router as tags_router

    app.include_router(evidence_router, prefix="/api/evidence", tags=["evidence"])
    app.include_router(tags_router, prefix="/api/tags", tags=["tags"])
    app.include_router(approvals_router, prefix="/api/approvals", tags=["approvals"])

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint. Confirms DB connectivity."""
        from sqlalchemy import text

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {
                "status": "ok",
                "version": __version__,
                "database": "connected",
            }
        except Exception:
            from fastapi.responses import JSONResponse

            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                },
            )

    return app


app = create_app()
