"""Database configuration and adapter factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from verdict.persistence.adapter import PersistenceAdapter


MEMORY_URL = "memory://"


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// and memory:// URL schemes.
    """

    url: str

    @classmethod
    def from_env(cls) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var
        2. VERDICT_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: memory://
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("VERDICT_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        return cls(url=MEMORY_URL)

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        return self.url.startswith("memory")

    @property
    def sqlite_path(self) -> str:
        path = self.url.replace("sqlite:///", "", 1)
        return path or ":memory:"


def create_adapter(config: DatabaseConfig) -> PersistenceAdapter:
    """Create a persistence adapter based on the database URL scheme.

    Args:
        config: Database configuration with URL.

    Returns:
        A PersistenceAdapter instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite:
        from verdict.persistence.sqlite import SQLiteAdapter

        return SQLiteAdapter(config.sqlite_path)

    if config.is_memory:
        from verdict.persistence.memory import MemoryAdapter

        return MemoryAdapter()

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
