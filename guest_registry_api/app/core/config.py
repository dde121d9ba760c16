"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts in development mode without any configuration.  In a
production deployment set at least ``APP_ENV=production``,
``ADMIN_TOKEN`` and ``ALLOWED_ORIGINS``.
"""

import os
from dataclasses import dataclass
from typing import List


def _default_log_level() -> str:
    env = os.getenv("APP_ENV", "development")
    return os.getenv("LOG_LEVEL", "INFO" if env == "production" else "DEBUG")


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Guest Registry API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    environment: str = os.getenv("APP_ENV", "development")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))
    log_level: str = _default_log_level()
    # Directory for ``combined.log`` and ``error.log``.  Leave empty to
    # log to the console only.
    log_dir: str = os.getenv("LOG_DIR", "logs")

    # Comma‑separated list of origins allowed to call the API from a
    # browser.  Requests without an Origin header (curl, server to
    # server) are not affected.
    allowed_origins: str = os.getenv(
        "ALLOWED_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    )

    # Path to the SQLite database file.  Relative paths are resolved
    # against the project root by the ``db`` module; ``:memory:`` keeps
    # everything in process.
    database_url: str = os.getenv("DATABASE_URL", "data/guests.db")

    # Shared secret expected in the ``X-Admin-Token`` header of admin
    # requests.  When empty, admin endpoints reject every caller.
    admin_token: str = os.getenv("ADMIN_TOKEN", "")

    # Directory holding the single page application (``index.html``).
    public_dir: str = os.getenv("PUBLIC_DIR", "public")
    max_body_bytes: int = int(os.getenv("MAX_BODY_BYTES", str(10 * 1024 * 1024)))
    shutdown_grace_seconds: int = int(os.getenv("SHUTDOWN_GRACE_SECONDS", "10"))

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def origins(self) -> List[str]:
        """Allowed CORS origins as a list, blanks removed."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
