"""Top level application object wiring the OffWorkLock services."""

from __future__ import annotations

from random import Random
from typing import Any

from .config import ConfigHolder, EngineConfig
from .domain.abuse import AbuseTracker
from .domain.economy import EconomyService
from .domain.gacha import RollEngine
from .domain.selection import WeightedSelector
from .domain.session import SessionPolicy
from .domain.views import ViewService
from .domain.zones import ExitGate, ZoneLockService
from .storage.base import RecordBackend
from .storage.flatfile import FlatFileRecordBackend
from .storage.memory import InMemoryRecordBackend
from .storage.sqlalchemy import AsyncSQLAlchemyStorage
from .storage.store import PlayerStateStore


class LockApp:
    """Central dependency container used by platform integrations."""

    def __init__(
        self,
        config: EngineConfig | ConfigHolder,
        *,
        backend: RecordBackend | None = None,
        rng: Random | None = None,
        abuse_tracker: AbuseTracker | None = None,
    ) -> None:
        self.config_source = config if isinstance(config, ConfigHolder) else ConfigHolder(config)
        initial = self.config_source.current()

        self._rng = rng or (Random(initial.rng_seed) if initial.rng_seed is not None else Random())
        self._sqlalchemy_storage: AsyncSQLAlchemyStorage | None = None

        self.backend = backend or self._wire_backend(initial)
        self.store = PlayerStateStore(self.backend)
        self.abuse_tracker = abuse_tracker or AbuseTracker()

        self.roll_engine = RollEngine(
            self.store, self.config_source, selector=WeightedSelector(self._rng)
        )
        self.economy = EconomyService(self.store, self.config_source)
        self.sessions = SessionPolicy(self.store, self.config_source, self.abuse_tracker)
        self.zones = ZoneLockService(self.config_source)
        self.exit_gate = ExitGate(self.store, self.zones, self.config_source)
        self.views = ViewService(self.store, self.config_source)

    @property
    def config(self) -> EngineConfig:
        return self.config_source.current()

    def _wire_backend(self, config: EngineConfig) -> RecordBackend:
        backend = config.storage.backend
        if backend == "memory":
            return InMemoryRecordBackend()
        if backend == "flatfile":
            return FlatFileRecordBackend(config.storage.directory)
        if backend == "sqlalchemy":
            dsn = config.storage.resolve_dsn()
            if not dsn:
                raise ValueError("SQLAlchemy backend requires a DSN")
            storage = AsyncSQLAlchemyStorage(dsn, echo=config.storage.echo_sql)
            self._sqlalchemy_storage = storage
            return storage.record_backend()
        raise ValueError(f"Unsupported storage backend {backend}")

    def reload_config(self, config: EngineConfig) -> EngineConfig:
        """Swap in a new snapshot; returns the previous one.

        The storage backend is not rewired; a changed ``storage`` section
        takes effect on the next start.
        """
        return self.config_source.swap(config)

    def snapshot(self) -> dict[str, Any]:
        """Export current configuration for debugging."""
        config = self.config
        return {
            "storage": config.storage.backend,
            "roll_cost": config.effective_cost,
            "rewards": [reward.reward_id for reward in config.rewards],
            "locked_zones": sorted(self.zones.locked_zones()),
            "accumulation_mode": config.accumulation_mode.value,
            "session_reset_mode": config.session_reset_mode.value,
            "forced_exit_hooks": len(tuple(self.abuse_tracker.hooks())),
        }

    async def init_backend(self) -> None:
        """Initialize storage backend resources (e.g., database tables)."""
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.init_models()

    async def close(self) -> None:
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.dispose()
