"""Load and dump the engine configuration as JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from ..config import (
    AccumulationMode,
    EngineConfig,
    ForcedExitConfig,
    HudConfig,
    LockConfig,
    SessionResetMode,
    StorageConfig,
)
from ..domain.exceptions import ConfigError
from ..domain.rewards import RewardDefinition

STORAGE_BACKENDS = ("memory", "flatfile", "sqlalchemy")


def load_config_from_json(path: str | Path) -> EngineConfig:
    """Read, validate and parse a JSON config file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_config_dict(data)


def parse_config_dict(data: dict[str, Any]) -> EngineConfig:
    """Parse a decoded JSON dict into an :class:`EngineConfig`.

    Every key is optional; a missing key or an explicit ``null`` falls back
    to the default.
    """
    errors = validate_config_dict(data)
    if errors:
        raise ConfigError(_format_errors("Config validation failed", errors), errors)

    defaults = EngineConfig()
    rewards_raw = data.get("rewards")
    action_values = data.get("actionValues")
    seed = data.get("rngSeed")

    return EngineConfig(
        lock=parse_lock(_get(data, "lock", {})),
        action_values=(
            {str(k): int(v) for k, v in action_values.items()}
            if action_values is not None
            else dict(defaults.action_values)
        ),
        roll_cost=int(_get(data, "rollCost", defaults.roll_cost)),
        rewards=(
            tuple(parse_reward(entry) for entry in rewards_raw)
            if rewards_raw is not None
            else defaults.rewards
        ),
        accumulation_mode=AccumulationMode(
            _get(data, "accumulationMode", defaults.accumulation_mode.value).lower()
        ),
        session_reset_mode=SessionResetMode(
            _get(data, "sessionResetMode", defaults.session_reset_mode.value).lower()
        ),
        forced_exit=parse_forced_exit(_get(data, "forcedExit", {})),
        hud=parse_hud(_get(data, "hud", {})),
        storage=parse_storage(_get(data, "storage", {})),
        rng_seed=int(seed) if seed is not None else None,
    )


def parse_lock(entry: dict[str, Any]) -> LockConfig:
    defaults = LockConfig()
    zones = entry.get("lockedZones")
    return LockConfig(
        locked_zones=tuple(map(str, zones)) if zones is not None else defaults.locked_zones,
        hide_buttons=bool(_get(entry, "hideButtons", defaults.hide_buttons)),
        message=_get(entry, "message", defaults.message),
    )


def parse_reward(entry: dict[str, Any]) -> RewardDefinition:
    return RewardDefinition(
        reward_id=entry["id"],
        name=_get(entry, "name", entry["id"]),
        description=_get(entry, "description", ""),
        weight=float(_get(entry, "weight", 1.0)),
        effects=tuple(map(str, _get(entry, "effects", ()))),
    )


def parse_forced_exit(entry: dict[str, Any]) -> ForcedExitConfig:
    defaults = ForcedExitConfig()
    return ForcedExitConfig(
        tracking_enabled=bool(_get(entry, "trackingEnabled", defaults.tracking_enabled)),
        warning_threshold=int(_get(entry, "warningThreshold", defaults.warning_threshold)),
        warning_message=_get(entry, "warningMessage", defaults.warning_message),
    )


def parse_hud(entry: dict[str, Any]) -> HudConfig:
    defaults = HudConfig()
    return HudConfig(
        enabled=bool(_get(entry, "enabled", defaults.enabled)),
        offset_x=int(_get(entry, "offsetX", defaults.offset_x)),
        offset_y=int(_get(entry, "offsetY", defaults.offset_y)),
        show_cost=bool(_get(entry, "showCost", defaults.show_cost)),
        show_unlock_state=bool(_get(entry, "showUnlockState", defaults.show_unlock_state)),
    )


def parse_storage(entry: dict[str, Any]) -> StorageConfig:
    defaults = StorageConfig()
    return StorageConfig(
        backend=_get(entry, "backend", defaults.backend),
        directory=_get(entry, "directory", defaults.directory),
        dsn=entry.get("dsn", defaults.dsn),
        echo_sql=bool(_get(entry, "echoSql", defaults.echo_sql)),
    )


def dump_config_dict(config: EngineConfig) -> dict[str, Any]:
    """Return the JSON-ready representation of *config*."""
    return {
        "lock": {
            "lockedZones": list(config.lock.locked_zones),
            "hideButtons": config.lock.hide_buttons,
            "message": config.lock.message,
        },
        "actionValues": dict(config.action_values),
        "rollCost": config.roll_cost,
        "rewards": [
            {
                "id": reward.reward_id,
                "name": reward.name,
                "description": reward.description,
                "weight": reward.weight,
                "effects": list(reward.effects),
            }
            for reward in config.rewards
        ],
        "accumulationMode": config.accumulation_mode.value,
        "sessionResetMode": config.session_reset_mode.value,
        "forcedExit": {
            "trackingEnabled": config.forced_exit.tracking_enabled,
            "warningThreshold": config.forced_exit.warning_threshold,
            "warningMessage": config.forced_exit.warning_message,
        },
        "hud": {
            "enabled": config.hud.enabled,
            "offsetX": config.hud.offset_x,
            "offsetY": config.hud.offset_y,
            "showCost": config.hud.show_cost,
            "showUnlockState": config.hud.show_unlock_state,
        },
        "storage": {
            "backend": config.storage.backend,
            "directory": config.storage.directory,
            "dsn": config.storage.dsn,
            "echoSql": config.storage.echo_sql,
        },
        "rngSeed": config.rng_seed,
    }


def validate_config_file(path: str | Path) -> list[str]:
    """Validate config JSON file and return a list of errors."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return validate_config_dict(data)


def validate_config_dict(data: Any) -> list[str]:
    if not isinstance(data, dict):
        return ["Config must be a JSON object."]

    errors: list[str] = []

    lock = _get(data, "lock", {})
    if not isinstance(lock, dict):
        errors.append("'lock' must be an object.")
    else:
        zones = lock.get("lockedZones")
        if zones is not None and (
            not isinstance(zones, list) or not all(isinstance(zone, str) for zone in zones)
        ):
            errors.append("'lock.lockedZones' must be an array of strings.")
        _check_bool(errors, lock, "hideButtons", "lock")
        _check_str(errors, lock, "message", "lock")

    action_values = data.get("actionValues")
    if action_values is not None:
        if not isinstance(action_values, dict):
            errors.append("'actionValues' must be an object.")
        else:
            for key, value in action_values.items():
                if not _is_int(value):
                    errors.append(f"Action value for '{key}' must be an integer.")

    roll_cost = data.get("rollCost")
    if roll_cost is not None and not _is_int(roll_cost):
        errors.append(f"'rollCost' must be an integer, got '{roll_cost}'.")

    rewards = data.get("rewards")
    if rewards is not None:
        if not isinstance(rewards, list):
            errors.append("'rewards' must be an array.")
        else:
            _validate_rewards(errors, rewards)

    _check_enum(errors, data, "accumulationMode", AccumulationMode)
    _check_enum(errors, data, "sessionResetMode", SessionResetMode)

    forced_exit = _get(data, "forcedExit", {})
    if not isinstance(forced_exit, dict):
        errors.append("'forcedExit' must be an object.")
    else:
        _check_bool(errors, forced_exit, "trackingEnabled", "forcedExit")
        threshold = forced_exit.get("warningThreshold")
        if threshold is not None and not _is_int(threshold):
            errors.append("'forcedExit.warningThreshold' must be an integer.")
        _check_str(errors, forced_exit, "warningMessage", "forcedExit")

    hud = _get(data, "hud", {})
    if not isinstance(hud, dict):
        errors.append("'hud' must be an object.")
    else:
        for key in ("enabled", "showCost", "showUnlockState"):
            _check_bool(errors, hud, key, "hud")
        for key in ("offsetX", "offsetY"):
            if hud.get(key) is not None and not _is_int(hud[key]):
                errors.append(f"'hud.{key}' must be an integer.")

    storage = _get(data, "storage", {})
    if not isinstance(storage, dict):
        errors.append("'storage' must be an object.")
    else:
        backend = storage.get("backend")
        if backend is not None and backend not in STORAGE_BACKENDS:
            errors.append(
                f"'storage.backend' must be one of {', '.join(STORAGE_BACKENDS)}, got '{backend}'."
            )
        _check_str(errors, storage, "directory", "storage")
        dsn = storage.get("dsn")
        if dsn is not None and not isinstance(dsn, str):
            errors.append("'storage.dsn' must be a string or null.")
        _check_bool(errors, storage, "echoSql", "storage")

    seed = data.get("rngSeed")
    if seed is not None and not _is_int(seed):
        errors.append("'rngSeed' must be an integer or null.")

    return errors


def _validate_rewards(errors: list[str], rewards: list[Any]) -> None:
    for idx, entry in enumerate(rewards, start=1):
        if not isinstance(entry, dict):
            errors.append(f"Reward #{idx} must be an object.")
            continue
        reward_id = entry.get("id")
        if not isinstance(reward_id, str) or not reward_id.strip():
            errors.append(f"Reward #{idx} must define non-empty 'id'.")
            continue
        for field_name in ("name", "description"):
            value = entry.get(field_name)
            if value is not None and not isinstance(value, str):
                errors.append(f"Reward '{reward_id}' field '{field_name}' must be a string.")
        weight = entry.get("weight")
        if weight is not None and (isinstance(weight, bool) or not isinstance(weight, (int, float))):
            errors.append(f"Reward '{reward_id}' has invalid 'weight' value '{weight}'.")
        effects = entry.get("effects")
        if effects is not None and (
            not isinstance(effects, list) or not all(isinstance(effect, str) for effect in effects)
        ):
            errors.append(f"Reward '{reward_id}' 'effects' must be an array of strings.")


def _check_bool(errors: list[str], section: dict[str, Any], key: str, prefix: str) -> None:
    if section.get(key) is not None and not isinstance(section[key], bool):
        errors.append(f"'{prefix}.{key}' must be a boolean.")


def _check_str(errors: list[str], section: dict[str, Any], key: str, prefix: str) -> None:
    if section.get(key) is not None and not isinstance(section[key], str):
        errors.append(f"'{prefix}.{key}' must be a string.")


def _check_enum(errors: list[str], data: dict[str, Any], key: str, enum_type: type) -> None:
    value = data.get(key)
    if value is None:
        return
    allowed = [member.value for member in enum_type]
    if not isinstance(value, str) or value.lower() not in allowed:
        errors.append(f"'{key}' must be one of {', '.join(allowed)}, got '{value}'.")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _format_errors(prefix: str, errors: Iterable[str]) -> str:
    formatted = "\n".join(f"- {err}" for err in errors)
    return f"{prefix}:\n{formatted}"


def _get(section: dict[str, Any], key: str, default: Any) -> Any:
    value = section.get(key)
    return default if value is None else value
