"""
Application configuration.

Loads settings from environment variables and .env file.
Every tunable of the service lives here: storage, locking, limits.
"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_heavy: Rate limit for purchase endpoints.
        max_request_size_bytes: Maximum allowed request body size.
        storage_backend: "sql" for the database store, "memory" for a
            process-local store (development and tests only).
        lock_timeout_seconds: How long a transaction waits for a row lock.
        conflict_retry_attempts: Attempts per operation on lock conflicts.
        conflict_retry_backoff_seconds: Base delay between those attempts.

    Database settings: ``database_url`` wins when set, otherwise a
    PostgreSQL DSN is built from the postgres_* values.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "Vending Ledger"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"
    rate_limit_heavy: str = "20/minute"
    max_request_size_bytes: int = 65_536  # 64 KB

    storage_backend: Literal["sql", "memory"] = "sql"
    lock_timeout_seconds: float = 5.0
    conflict_retry_attempts: int = 3
    conflict_retry_backoff_seconds: float = 0.05

    database_url: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "vending"

    def get_database_dsn(self) -> str:
        """Return the effective SQLAlchemy DSN for the vending store.

        Priority:
        1. Explicit `DATABASE_URL`
        2. DSN built from postgres_* values (Docker Compose or local setups)
        """
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}@"
            f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
