"""Locked-zone lookup and the exit restriction decision."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import DEFAULT_LOCK_MESSAGE, ConfigSource
from ..storage.store import PlayerStateStore


@dataclass(frozen=True, slots=True)
class ExitDecision:
    locked: bool
    message: str | None = None


class ZoneLockService:
    """Answer whether a zone is locked.

    The normalised zone set is cached and rebuilt whenever the content of the
    current snapshot's ``locked_zones`` changes.
    """

    def __init__(self, config: ConfigSource) -> None:
        self._config = config
        self._version: int | None = None
        self._zones: frozenset[str] = frozenset()

    def is_locked(self, zone_id: str | None) -> bool:
        return _normalize(zone_id) in self.locked_zones()

    def locked_zones(self) -> frozenset[str]:
        configured = tuple(self._config.current().lock.locked_zones)
        version = hash(configured)
        if version != self._version:
            self._zones = frozenset(
                normalized for normalized in map(_normalize, configured) if normalized
            )
            self._version = version
        return self._zones


class ExitGate:
    """Decide whether a player's exit is currently restricted."""

    def __init__(
        self, store: PlayerStateStore, zones: ZoneLockService, config: ConfigSource
    ) -> None:
        self._store = store
        self._zones = zones
        self._config = config

    async def decide(
        self,
        context: str,
        player_id: str,
        zone_id: str | None,
        *,
        player_present: bool = True,
    ) -> ExitDecision:
        config = self._config.current()
        if not player_present or not self._zones.is_locked(zone_id):
            return ExitDecision(locked=False)

        record = await self._store.get_or_create(context, player_id)
        if record.unlocked:
            return ExitDecision(locked=False)

        message = config.lock.message
        if not message or not message.strip():
            message = DEFAULT_LOCK_MESSAGE
        return ExitDecision(locked=True, message=message)


def _normalize(zone_id: str | None) -> str:
    return (zone_id or "").strip().lower()
