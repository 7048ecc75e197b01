"""
Database startup, engine configuration and transaction helper tests.
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.pool import StaticPool

from evidence_engine.db.session import _engine_kwargs, atomic
from evidence_engine.errors import ConflictError, NotFoundError, StorageError


def test_app_fails_to_start_when_db_unreachable() -> None:
    """App fails fast when database is unreachable at startup."""
    with patch("evidence_engine.main.check_db_connection") as mock_check:
        mock_check.side_effect = Exception("Database unreachable")

        from evidence_engine.main import create_app

        app = create_app()

        with pytest.raises(Exception, match="Database unreachable"):
            with TestClient(app) as test_client:
                test_client.get("/health")


def test_in_memory_sqlite_uses_static_pool() -> None:
    """In-memory SQLite shares one connection so every session sees the same tables."""
    kwargs = _engine_kwargs("sqlite+pysqlite:///:memory:", debug=False, connect_timeout=10)
    assert kwargs["poolclass"] is StaticPool
    assert kwargs["connect_args"] == {"check_same_thread": False}


def test_file_sqlite_uses_default_pool() -> None:
    """File-backed SQLite keeps the default pool."""
    kwargs = _engine_kwargs("sqlite:///./evidence.db", debug=False, connect_timeout=10)
    assert "poolclass" not in kwargs


def test_postgres_gets_pool_and_timeout() -> None:
    """PostgreSQL engines are sized and pinned to UTC."""
    kwargs = _engine_kwargs(
        "postgresql+psycopg://u@localhost/evidence", debug=False, connect_timeout=3
    )
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["connect_args"]["connect_timeout"] == 3
    assert "timezone=UTC" in kwargs["connect_args"]["options"]


class TestAtomic:
    """atomic() commit/rollback and error translation."""

    def test_commits_on_success(self) -> None:
        db = MagicMock()
        with atomic(db):
            pass
        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_integrity_error_becomes_conflict(self) -> None:
        db = MagicMock()
        db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))
        with pytest.raises(ConflictError):
            with atomic(db):
                pass
        db.rollback.assert_called_once()

    def test_operational_error_becomes_storage_error(self) -> None:
        db = MagicMock()
        db.commit.side_effect = OperationalError("UPDATE", {}, Exception("timeout"))
        with pytest.raises(StorageError) as exc_info:
            with atomic(db):
                pass
        assert exc_info.value.retryable is True
        db.rollback.assert_called_once()

    def test_engine_errors_propagate_unchanged(self) -> None:
        """Errors raised inside the block roll back and surface as-is."""
        db = MagicMock()
        with pytest.raises(NotFoundError):
            with atomic(db):
                raise NotFoundError("Entry 1 not found")
        db.commit.assert_not_called()
        db.rollback.assert_called_once()
