"""Testing utilities for OffWorkLock."""

from .factory import PlayerRecordFactory, RewardFactory
from .fixtures import app_fixture, memory_app
from .scenario_client import ScenarioClient

__all__ = [
    "PlayerRecordFactory",
    "RewardFactory",
    "app_fixture",
    "memory_app",
    "ScenarioClient",
]
