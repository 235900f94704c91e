"""OffWorkLock public API."""

from .app import LockApp
from .config import ConfigHolder, EngineConfig
from .loaders import ConfigManager

__all__ = [
    "ConfigHolder",
    "ConfigManager",
    "EngineConfig",
    "LockApp",
]
