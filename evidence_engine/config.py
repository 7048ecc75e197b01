"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "Evidence Engine"
    debug: bool = False

    # Database (postgresql+psycopg for psycopg3; sqlite:// accepted for local runs and tests)
    database_url: str = "postgresql+psycopg://localhost:5432/evidence_dev"
    db_connect_timeout: int = 10  # seconds

    # Security: service token expected in X-Internal-Token on every /api route
    internal_api_token: str = ""

    # Search
    search_default_page_size: int = 20
    search_max_page_size: int = 100

    # Tags
    default_tag_color: str = "#007bff"

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'evidence_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql://
        if raw_url.startswith("postgresql://") and not raw_url.startswith("postgresql+psycopg"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))

        self.internal_api_token = os.getenv("INTERNAL_API_TOKEN", "")

        self.search_default_page_size = int(
            os.getenv("SEARCH_DEFAULT_PAGE_SIZE", str(self.search_default_page_size))
        )
        self.search_max_page_size = int(
            os.getenv("SEARCH_MAX_PAGE_SIZE", str(self.search_max_page_size))
        )
        if self.search_default_page_size > self.search_max_page_size:
            self.search_default_page_size = self.search_max_page_size

        self.default_tag_color = os.getenv("DEFAULT_TAG_COLOR", self.default_tag_color)
