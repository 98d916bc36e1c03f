"""
Todo Service - Application Configuration
=========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the application factory, the entry point, and tests.
When:  Loaded once at module import time; validated before the app starts.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development; a bare
    `python -m todo_service` serves on :8080 with metrics on :8082 and a
    SQLite file under ./storage/.
    """

    # ── Storage ───────────────────────────────────────────────────────────
    # Format: sqlite+aiosqlite:///<path>  (any async SQLAlchemy URL works)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./storage/storage.db",
        description="Async SQLAlchemy connection URL",
    )
    db_pool_pre_ping: bool = Field(default=True)

    # What: Which TodoStorage implementation backs the handlers
    # Valid: "sql" (SQLAlchemy engine from database_url), "memory" (process-local dict)
    storage_backend: str = Field(default="sql")

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Ensures the backend name is one we know how to build."""
        valid = {"sql", "memory"}
        lower = v.lower()
        if lower not in valid:
            raise ValueError(f"Invalid storage_backend '{v}'. Must be one of: {valid}")
        return lower

    # ── Request Deadline ──────────────────────────────────────────────────
    # What: Seconds each request may spend in its storage call before it is
    # reported as 408 Request Timeout. Fixed for the process, not per request.
    idle_timeout: float = Field(default=5.0, gt=0, le=300)

    # ── Server ────────────────────────────────────────────────────────────
    service_host: str = Field(default="0.0.0.0")
    service_port: int = Field(default=8080, ge=1, le=65535)

    # ── Metrics ───────────────────────────────────────────────────────────
    # Exposed on a separate listener in Prometheus text format
    metrics_enabled: bool = Field(default=True)
    metrics_host: str = Field(default="0.0.0.0")
    metrics_port: int = Field(default=8082, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATABASE_URL and database_url both work
    }


# Singleton instance, imported by the application factory and entry point
settings = Settings()
