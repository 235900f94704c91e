"""Validation utilities for OffWorkLock configurations."""

from __future__ import annotations

from .config import EngineConfig
from .domain.effects import EffectKind, parse_effect


def validate_config(config: EngineConfig) -> list[str]:
    """Return list of validation errors discovered in a parsed config."""
    errors: list[str] = []

    if config.roll_cost < 0:
        errors.append(f"Roll cost cannot be negative, got '{config.roll_cost}'.")

    for key, value in config.action_values.items():
        if value <= 0:
            errors.append(f"Action value for '{key}' must be positive; it is ignored otherwise.")

    if not config.rewards:
        errors.append("Reward table is empty; every roll will fail.")

    reward_ids: set[str] = set()
    for reward in config.rewards:
        if reward.reward_id in reward_ids:
            errors.append(f"Reward id '{reward.reward_id}' defined multiple times.")
        reward_ids.add(reward.reward_id)

        if reward.weight < 0:
            errors.append(f"Reward '{reward.reward_id}' has negative weight '{reward.weight}'.")

        for effect in reward.parsed_effects():
            keyword = effect.raw_command.split(":", 1)[0].strip().lower()
            if effect.kind is EffectKind.CUSTOM and keyword != EffectKind.CUSTOM.value:
                errors.append(
                    f"Reward '{reward.reward_id}' effect '{effect.raw_command}' has unknown keyword '{keyword}'."
                )
            if effect.kind is EffectKind.ADD_POINTS:
                amount = effect.argument(0, "")
                try:
                    int(amount)
                except ValueError:
                    errors.append(
                        f"Reward '{reward.reward_id}' effect '{effect.raw_command}' has non-integer amount '{amount}'."
                    )

    if config.rewards and not any(reward.weight > 0 for reward in config.rewards):
        errors.append("No reward has a positive weight; every roll will fail.")

    message = config.forced_exit.warning_message
    if message and message.strip() and "{count}" not in message:
        errors.append("Forced exit warning message should contain the '{count}' placeholder.")

    return errors


__all__ = ["validate_config"]
