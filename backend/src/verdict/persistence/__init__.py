"""Persistence layer - storage adapters used as lookup and write targets."""

from verdict.persistence.adapter import PersistenceAdapter
from verdict.persistence.config import DatabaseConfig, create_adapter
from verdict.persistence.memory import MemoryAdapter
from verdict.persistence.sqlite import SQLiteAdapter

__all__ = [
    "DatabaseConfig",
    "MemoryAdapter",
    "PersistenceAdapter",
    "SQLiteAdapter",
    "create_adapter",
]
