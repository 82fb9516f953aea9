"""Mission engine configuration.

Configuration is read from environment variables with defaults suited to a
single-node deployment backed by a local SQLite file.

Environment Variables:
- SMARTFUNDS_DATABASE_URL: Database URL (default: sqlite+aiosqlite:///./smartfunds.db)
  Plain postgresql:// and postgres:// URLs are rewritten to postgresql+asyncpg://,
  plain sqlite:/// URLs to sqlite+aiosqlite:///.
- SMARTFUNDS_STORAGE: "sql" or "memory" (default: sql)
- SMARTFUNDS_ENVIRONMENT: "production" (JSON logs) or "development" (default: production)
- SQLALCHEMY_ECHO: Echo SQL statements when "1", "true" or "yes"
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./smartfunds.db"

STORAGE_BACKENDS: frozenset[str] = frozenset({"sql", "memory"})
ENVIRONMENTS: frozenset[str] = frozenset({"production", "development"})


def normalize_database_url(url: str) -> str:
    """Convert a database URL to its async driver form.

    Args:
        url: Database URL as configured.

    Returns:
        URL with an async driver (asyncpg for PostgreSQL, aiosqlite for SQLite).
    """
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def mask_database_url(url: str) -> str:
    """Hide the password of a database URL for logging."""
    if "@" not in url:
        return url
    before_at, after_at = url.rsplit("@", 1)
    scheme, _, credentials = before_at.partition("://")
    if ":" in credentials:
        user = credentials.split(":", 1)[0]
        return f"{scheme}://{user}:***@{after_at}"
    return url


def _get_bool_env(key: str) -> bool:
    return os.environ.get(key, "").lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class MissionEngineConfig:
    """Configuration for the mission engine composition root.

    Attributes:
        database_url: Async SQLAlchemy URL of the mission database.
        storage: Storage backend, "sql" or "memory".
        environment: "production" or "development"; selects the log renderer.
        sql_echo: Whether the engine echoes SQL statements.
    """

    database_url: str = DEFAULT_DATABASE_URL
    storage: str = "sql"
    environment: str = "production"
    sql_echo: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.database_url.strip():
            raise ValueError("database_url must not be empty")
        if self.storage not in STORAGE_BACKENDS:
            raise ValueError(
                f"storage must be one of {sorted(STORAGE_BACKENDS)}, got {self.storage!r}"
            )
        if self.environment not in ENVIRONMENTS:
            raise ValueError(
                f"environment must be one of {sorted(ENVIRONMENTS)}, "
                f"got {self.environment!r}"
            )

    @classmethod
    def from_environment(cls) -> MissionEngineConfig:
        """Create config from environment variables with defaults.

        Returns:
            MissionEngineConfig with values from environment or defaults.

        Raises:
            ValueError: If a variable holds an unsupported value.
        """
        return cls(
            database_url=normalize_database_url(
                os.environ.get("SMARTFUNDS_DATABASE_URL", DEFAULT_DATABASE_URL)
            ),
            storage=os.environ.get("SMARTFUNDS_STORAGE", "sql").lower(),
            environment=os.environ.get("SMARTFUNDS_ENVIRONMENT", "production").lower(),
            sql_echo=_get_bool_env("SQLALCHEMY_ECHO"),
        )


# In-memory config for unit tests and local experiments
TEST_MISSION_ENGINE_CONFIG = MissionEngineConfig(
    storage="memory",
    environment="development",
)
