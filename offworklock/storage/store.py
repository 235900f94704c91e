"""Cached, per-context player record store."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from types import MappingProxyType
from typing import AsyncIterator, Mapping
from weakref import WeakValueDictionary

from ..domain.exceptions import StorageError
from .base import PlayerRecord, RecordBackend, sanitize_context

logger = logging.getLogger(__name__)


class ContextTransaction:
    """Read-modify-write access to one context while its lock is held.

    Only valid inside :meth:`PlayerStateStore.transaction`.
    """

    def __init__(self, store: "PlayerStateStore", key: str) -> None:
        self._store = store
        self._key = key
        self.context = key

    async def get_or_create(self, player_id: str) -> PlayerRecord:
        """Return the stored record or a fresh default.

        A default only becomes part of the context once it is passed to
        :meth:`update`.
        """
        records = await self._store._load(self._key)
        record = records.get(player_id)
        if record is None:
            record = PlayerRecord(player_id=player_id)
        return record

    async def find(self, player_id: str) -> PlayerRecord | None:
        records = await self._store._load(self._key)
        return records.get(player_id)

    async def update(self, player_id: str, record: PlayerRecord) -> None:
        if record.player_id != player_id:
            raise ValueError(
                f"Record for {record.player_id!r} cannot be stored under {player_id!r}"
            )
        await self._store._write(self._key, player_id, record)


class PlayerStateStore:
    """Keep one authoritative in-memory cache per context in front of a backend.

    Contexts are loaded lazily on first touch. Every write flushes the whole
    context through the backend before the cache is updated, so a failed
    write never leaves unsaved state visible. All operations on a context are
    serialised by that context's lock.
    """

    def __init__(self, backend: RecordBackend) -> None:
        self._backend = backend
        self._cache: dict[str, dict[str, PlayerRecord]] = {}
        # Entries vanish once no operation holds or awaits the lock.
        self._locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()

    @property
    def backend(self) -> RecordBackend:
        return self._backend

    @asynccontextmanager
    async def transaction(self, context: str) -> AsyncIterator[ContextTransaction]:
        key = sanitize_context(context)
        async with self._lock_for(key):
            yield ContextTransaction(self, key)

    async def get_or_create(self, context: str, player_id: str) -> PlayerRecord:
        async with self.transaction(context) as tx:
            return await tx.get_or_create(player_id)

    async def update(self, context: str, player_id: str, record: PlayerRecord) -> None:
        async with self.transaction(context) as tx:
            await tx.update(player_id, record)

    async def find(self, context: str, player_id: str) -> PlayerRecord | None:
        async with self.transaction(context) as tx:
            return await tx.find(player_id)

    async def snapshot(self, context: str) -> Mapping[str, PlayerRecord]:
        key = sanitize_context(context)
        async with self._lock_for(key):
            records = await self._load(key)
            return MappingProxyType(dict(records))

    def invalidate(self, context: str | None = None) -> None:
        """Forget cached contexts so the next access reloads from the backend."""
        if context is None:
            self._cache.clear()
        else:
            self._cache.pop(sanitize_context(context), None)

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def _load(self, key: str) -> dict[str, PlayerRecord]:
        records = self._cache.get(key)
        if records is not None:
            return records
        try:
            loaded = await self._backend.load(key)
        except StorageError as exc:
            logger.error("Failed to load player records for context '%s': %s", key, exc)
            raise
        records = dict(loaded)
        self._cache[key] = records
        logger.debug("Loaded %d player records for context '%s'", len(records), key)
        return records

    async def _write(self, key: str, player_id: str, record: PlayerRecord) -> None:
        current = await self._load(key)
        pending = dict(current)
        pending[player_id] = record
        try:
            await self._backend.save(key, pending)
        except StorageError as exc:
            logger.error("Failed to save player records for context '%s': %s", key, exc)
            raise
        self._cache[key] = pending
        logger.debug("Flushed %d player records for context '%s'", len(pending), key)
