"""Pytest fixtures for OffWorkLock."""

from __future__ import annotations

from dataclasses import replace

import pytest

from ..app import LockApp
from ..config import EngineConfig, StorageConfig


@pytest.fixture()
def memory_app() -> LockApp:
    return app_fixture()


def app_fixture(**kwargs) -> LockApp:
    """Helper for ad-hoc tests where pytest is not available.

    Builds an app over in-memory storage; keyword arguments override
    :class:`EngineConfig` fields.
    """
    config = EngineConfig(**kwargs)
    if "storage" not in kwargs:
        config = replace(config, storage=StorageConfig(backend="memory"))
    return LockApp(config)
