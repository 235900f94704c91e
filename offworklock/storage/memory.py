"""In-memory storage backend for OffWorkLock."""

from __future__ import annotations

from typing import Mapping

from .base import PlayerRecord, RecordBackend


class InMemoryRecordBackend(RecordBackend):
    def __init__(self) -> None:
        self._contexts: dict[str, dict[str, PlayerRecord]] = {}
        self.saves = 0

    async def load(self, context: str) -> dict[str, PlayerRecord]:
        return dict(self._contexts.get(context, {}))

    async def save(self, context: str, records: Mapping[str, PlayerRecord]) -> None:
        self._contexts[context] = dict(records)
        self.saves += 1

    def dump(self) -> dict[str, dict[str, PlayerRecord]]:
        return {context: dict(records) for context, records in self._contexts.items()}
