"""
Database session management. SQLAlchemy 2.x style.
"""

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from evidence_engine.config import get_settings
from evidence_engine.errors import ConflictError, StorageError


def _engine_kwargs(database_url: str, *, debug: bool, connect_timeout: int) -> dict:
    """Build create_engine kwargs for the configured backend.

    PostgreSQL gets a sized pool and UTC session timezone. SQLite (local runs,
    tests) shares one connection across threads when in-memory.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict = {
            "echo": debug,
            "connect_args": {"check_same_thread": False},
        }
        if make_url(database_url).database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "echo": debug,
        "connect_args": {
            "connect_timeout": connect_timeout,
            "options": "-c timezone=UTC",
        },
    }


def make_engine(database_url: str, *, debug: bool = False, connect_timeout: int = 10) -> Engine:
    """Create an engine for database_url with backend-appropriate settings."""
    return create_engine(
        database_url,
        **_engine_kwargs(database_url, debug=debug, connect_timeout=connect_timeout),
    )


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite ignores FOREIGN KEY clauses unless enabled per connection."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


settings = get_settings()
engine = make_engine(
    settings.database_url,
    debug=settings.debug,
    connect_timeout=settings.db_connect_timeout,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


def check_db_connection() -> None:
    """
    Verify database connectivity. Raises if unreachable.
    Call during application startup.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run one unit of work: commit on success, roll back on any failure.

    IntegrityError surfaces as ConflictError and other database faults as
    StorageError; engine errors raised inside the block propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Change conflicts with existing data") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(f"Database error: {exc.__class__.__name__}") from exc
    except Exception:
        db.rollback()
        raise
