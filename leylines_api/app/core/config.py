"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
application runs out of the box against a local SQLite file.  In a
deployment you should override these via environment variables.
"""

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Leylines")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by the ``db`` module; ``:memory:`` keeps
    # everything in the single shared connection.
    database_url: str = os.getenv("DATABASE_URL", "leylines.db")

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "5000"))

    # Comma-separated list of origins allowed by CORS.  ``*`` allows all.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    postit_page_size: int = int(os.getenv("POSTIT_PAGE_SIZE", "50"))

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
