"""Domain models and services."""

from .effects import EffectDescriptor, EffectKind, parse_effect
from .exceptions import ConfigError, OffWorkLockError, StorageError
from .points import MAX_POINTS, apply_delta, clamp_points, saturating_increment
from .rewards import DEFAULT_REWARDS, RewardDefinition, RewardDisplay, reward_displays
from .selection import WeightedSelector

__all__ = [
    "EffectDescriptor",
    "EffectKind",
    "parse_effect",
    "ConfigError",
    "OffWorkLockError",
    "StorageError",
    "MAX_POINTS",
    "apply_delta",
    "clamp_points",
    "saturating_increment",
    "DEFAULT_REWARDS",
    "RewardDefinition",
    "RewardDisplay",
    "reward_displays",
    "WeightedSelector",
]
