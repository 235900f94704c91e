"""Configuration models for OffWorkLock."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Literal, Mapping, Protocol, Sequence

from .domain.rewards import DEFAULT_REWARDS, RewardDefinition


StorageBackend = Literal["memory", "flatfile", "sqlalchemy"]

DEFAULT_LOCK_MESSAGE = "You have to roll Off Work before you can leave."
DEFAULT_FORCED_EXIT_MESSAGE = "Forced exit detected {count} times."


class AccumulationMode(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class SessionResetMode(str, Enum):
    ONE_TIME = "one_time"
    PERMANENT = "permanent"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Configure where player records are persisted."""

    backend: StorageBackend = "flatfile"
    directory: str = "playerdata"
    dsn: str | None = None
    echo_sql: bool = False

    def resolve_dsn(self) -> str | None:
        if self.dsn:
            return self.dsn
        if self.backend == "sqlalchemy":
            return "sqlite+aiosqlite:///./offworklock.db"
        return None


@dataclass(frozen=True, slots=True)
class LockConfig:
    """Zones where exiting is restricted and the message shown while locked."""

    locked_zones: tuple[str, ...] = (
        "minecraft:overworld",
        "minecraft:the_nether",
        "minecraft:the_end",
    )
    hide_buttons: bool = False
    message: str = DEFAULT_LOCK_MESSAGE


@dataclass(frozen=True, slots=True)
class ForcedExitConfig:
    tracking_enabled: bool = True
    warning_threshold: int = 3
    warning_message: str = DEFAULT_FORCED_EXIT_MESSAGE

    def __post_init__(self) -> None:
        if self.warning_threshold < 0:
            object.__setattr__(self, "warning_threshold", 0)


@dataclass(frozen=True, slots=True)
class HudConfig:
    """Display toggles consumed by HUD renderers."""

    enabled: bool = True
    offset_x: int = 4
    offset_y: int = 4
    show_cost: bool = True
    show_unlock_state: bool = True


def _default_action_values() -> Mapping[str, int]:
    return {
        "minecraft:coal_ore": 1,
        "minecraft:iron_ore": 2,
        "minecraft:gold_ore": 3,
        "minecraft:diamond_ore": 5,
    }


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Immutable configuration snapshot read by every service.

    Services capture one snapshot per operation; reloading swaps the whole
    object instead of mutating it.
    """

    lock: LockConfig = field(default_factory=LockConfig)
    action_values: Mapping[str, int] = field(default_factory=_default_action_values)
    roll_cost: int = 100
    rewards: tuple[RewardDefinition, ...] = DEFAULT_REWARDS
    accumulation_mode: AccumulationMode = AccumulationMode.AUTOMATIC
    session_reset_mode: SessionResetMode = SessionResetMode.ONE_TIME
    forced_exit: ForcedExitConfig = field(default_factory=ForcedExitConfig)
    hud: HudConfig = field(default_factory=HudConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    rng_seed: int | None = None

    @property
    def effective_cost(self) -> int:
        return max(0, self.roll_cost)

    def with_changes(self, **changes) -> "EngineConfig":
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Create config from environment variables prefixed with OFFWORK_."""
        prefix = "OFFWORK_"
        defaults = cls()

        locked_zones = tuple(
            zone.strip()
            for zone in os.getenv(f"{prefix}LOCKED_ZONES", ",".join(defaults.lock.locked_zones)).split(",")
            if zone.strip()
        )
        lock = LockConfig(
            locked_zones=locked_zones,
            hide_buttons=_env_flag(f"{prefix}LOCK_HIDE_BUTTONS", False),
            message=os.getenv(f"{prefix}LOCK_MESSAGE", DEFAULT_LOCK_MESSAGE),
        )

        forced_exit = ForcedExitConfig(
            tracking_enabled=_env_flag(f"{prefix}FORCED_EXIT_TRACKING", True),
            warning_threshold=int(os.getenv(f"{prefix}FORCED_EXIT_THRESHOLD", "3")),
            warning_message=os.getenv(f"{prefix}FORCED_EXIT_MESSAGE", DEFAULT_FORCED_EXIT_MESSAGE),
        )

        hud = HudConfig(
            enabled=_env_flag(f"{prefix}HUD_ENABLED", True),
            offset_x=int(os.getenv(f"{prefix}HUD_OFFSET_X", "4")),
            offset_y=int(os.getenv(f"{prefix}HUD_OFFSET_Y", "4")),
            show_cost=_env_flag(f"{prefix}HUD_SHOW_COST", True),
            show_unlock_state=_env_flag(f"{prefix}HUD_SHOW_UNLOCK_STATE", True),
        )

        storage = StorageConfig(
            backend=os.getenv(f"{prefix}STORAGE_BACKEND", "flatfile"),  # type: ignore[arg-type]
            directory=os.getenv(f"{prefix}STORAGE_DIR", "playerdata"),
            dsn=os.getenv(f"{prefix}STORAGE_DSN"),
            echo_sql=_env_flag(f"{prefix}STORAGE_ECHO_SQL", False),
        )

        action_values = _parse_action_values(os.getenv(f"{prefix}ACTION_VALUES"))

        return cls(
            lock=lock,
            action_values=action_values if action_values is not None else _default_action_values(),
            roll_cost=int(os.getenv(f"{prefix}ROLL_COST", "100")),
            accumulation_mode=AccumulationMode(
                os.getenv(f"{prefix}ACCUMULATION_MODE", AccumulationMode.AUTOMATIC.value).lower()
            ),
            session_reset_mode=SessionResetMode(
                os.getenv(f"{prefix}SESSION_RESET_MODE", SessionResetMode.ONE_TIME.value).lower()
            ),
            forced_exit=forced_exit,
            hud=hud,
            storage=storage,
            rng_seed=(
                int(os.getenv(f"{prefix}RNG_SEED")) if os.getenv(f"{prefix}RNG_SEED") else None
            ),
        )


class ConfigSource(Protocol):
    def current(self) -> EngineConfig:
        ...


class ConfigHolder:
    """Hold the current snapshot and swap it atomically on reload."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()

    def current(self) -> EngineConfig:
        return self._config

    def swap(self, config: EngineConfig) -> EngineConfig:
        previous, self._config = self._config, config
        return previous


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_action_values(raw: str | None) -> Mapping[str, int] | None:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid JSON for OFFWORK_ACTION_VALUES") from exc
    if not isinstance(data, dict):
        raise ValueError("OFFWORK_ACTION_VALUES must be a JSON object")
    return {str(k): int(v) for k, v in data.items()}


def action_value(config: EngineConfig, action_key: str) -> int:
    """Return the configured value for *action_key*, or 0 when inert."""
    value = config.action_values.get(action_key)
    if value is None or value <= 0:
        return 0
    return int(value)


def positive_rewards(rewards: Sequence[RewardDefinition]) -> list[RewardDefinition]:
    return [reward for reward in rewards if reward.weight > 0]
