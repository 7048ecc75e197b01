"""
Configuration tests.
"""

import pytest

from evidence_engine.config import Settings, get_settings


def test_get_settings_returns_settings() -> None:
    """get_settings returns a Settings instance."""
    settings = get_settings()
    assert isinstance(settings, Settings)


def test_settings_has_required_attributes() -> None:
    """Settings has all required attributes."""
    settings = get_settings()
    assert hasattr(settings, "app_name")
    assert hasattr(settings, "database_url")
    assert hasattr(settings, "internal_api_token")
    assert hasattr(settings, "search_default_page_size")
    assert hasattr(settings, "search_max_page_size")
    assert settings.app_name == "Evidence Engine"


def test_search_page_size_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Default page size is 20 and the cap is 100."""
    monkeypatch.delenv("SEARCH_DEFAULT_PAGE_SIZE", raising=False)
    monkeypatch.delenv("SEARCH_MAX_PAGE_SIZE", raising=False)
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.search_default_page_size == 20
        assert settings.search_max_page_size == 100
    finally:
        get_settings.cache_clear()


def test_default_page_size_never_exceeds_max(monkeypatch: pytest.MonkeyPatch) -> None:
    """SEARCH_DEFAULT_PAGE_SIZE above SEARCH_MAX_PAGE_SIZE is capped."""
    monkeypatch.setenv("SEARCH_DEFAULT_PAGE_SIZE", "250")
    monkeypatch.setenv("SEARCH_MAX_PAGE_SIZE", "50")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.search_max_page_size == 50
        assert settings.search_default_page_size == 50
    finally:
        get_settings.cache_clear()


def test_postgresql_url_gets_psycopg_driver(monkeypatch: pytest.MonkeyPatch) -> None:
    """A generic postgresql:// DATABASE_URL is rewritten to use psycopg3."""
    monkeypatch.setenv("DATABASE_URL", "postgresql://user@db:5432/evidence")
    get_settings.cache_clear()
    try:
        settings = get_settings()
        assert settings.database_url == "postgresql+psycopg://user@db:5432/evidence"
    finally:
        get_settings.cache_clear()


def test_sqlite_url_left_unchanged(monkeypatch: pytest.MonkeyPatch) -> None:
    """SQLite URLs pass through untouched."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    get_settings.cache_clear()
    try:
        assert get_settings().database_url == "sqlite+pysqlite:///:memory:"
    finally:
        get_settings.cache_clear()
