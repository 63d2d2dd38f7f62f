"""
JotDB configuration — all environment variables in one place.

Read from environment at import time. Never hardcode secrets.
"""

from __future__ import annotations

import logging
import os

DATABASE_URL_REQUIRED = "DATABASE_URL environment variable is required for the postgres backend"


class Settings:
    """Store settings from environment variables."""

    # Storage backend: "memory" or "postgres"
    STORAGE: str = os.environ.get("JOTDB_STORAGE", "memory")

    # Database (postgres backend only)
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    DB_POOL_MIN_SIZE: int = int(os.environ.get("JOTDB_DB_POOL_MIN_SIZE", "1"))
    DB_POOL_MAX_SIZE: int = int(os.environ.get("JOTDB_DB_POOL_MAX_SIZE", "10"))

    # Audit trail
    AUDIT_LOG_LIMIT: int = int(os.environ.get("JOTDB_AUDIT_LOG_LIMIT", "100"))

    # Logging
    LOG_LEVEL: str = os.environ.get("JOTDB_LOG_LEVEL", "WARNING")

    def migration_url(self) -> str:
        """
        DATABASE_URL in the sync sqlalchemy scheme alembic connects with.
        Raises RuntimeError when it is unset, like open_namespace does.
        """
        if not self.DATABASE_URL:
            raise RuntimeError(DATABASE_URL_REQUIRED)
        # asyncpg-style URLs need the sync sqlalchemy scheme
        if self.DATABASE_URL.startswith("postgres://"):
            return self.DATABASE_URL.replace("postgres://", "postgresql://", 1)
        return self.DATABASE_URL

    def validate(self) -> list[str]:
        """Return configuration problems; empty list = usable."""
        issues = []
        if self.STORAGE not in ("memory", "postgres"):
            issues.append(f"Invalid JOTDB_STORAGE: {self.STORAGE}")
        if self.STORAGE == "postgres" and not self.DATABASE_URL:
            issues.append(DATABASE_URL_REQUIRED)
        if self.AUDIT_LOG_LIMIT < 1:
            issues.append("JOTDB_AUDIT_LOG_LIMIT must be >= 1")
        return issues


# Singleton instance
settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Apply the configured level to the jotdb logger tree."""
    logging.getLogger("jotdb").setLevel((level or settings.LOG_LEVEL).upper())
