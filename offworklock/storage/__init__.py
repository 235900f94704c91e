"""Storage backends for OffWorkLock."""

from .base import PlayerRecord, RecordBackend, sanitize_context
from .flatfile import FlatFileRecordBackend
from .memory import InMemoryRecordBackend
from .sqlalchemy import AsyncSQLAlchemyStorage, SQLAlchemyRecordBackend
from .store import ContextTransaction, PlayerStateStore

__all__ = [
    "PlayerRecord",
    "RecordBackend",
    "sanitize_context",
    "FlatFileRecordBackend",
    "InMemoryRecordBackend",
    "AsyncSQLAlchemyStorage",
    "SQLAlchemyRecordBackend",
    "ContextTransaction",
    "PlayerStateStore",
]
