"""File-backed configuration source with reload support."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..config import ConfigHolder, EngineConfig
from ..domain.exceptions import ConfigError
from .json_loader import dump_config_dict, parse_config_dict

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "offwork-lock.json"


class ConfigManager(ConfigHolder):
    """Keep the snapshot in sync with ``offwork-lock.json`` in *directory*.

    A missing file is created with the default configuration. A failed
    reload raises :class:`ConfigError` and leaves the current snapshot in
    place.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.path = self.directory / CONFIG_FILENAME
        self.directory.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._write(EngineConfig())
            logger.info("Wrote default config to %s", self.path)
        super().__init__(self._read())

    def reload(self) -> EngineConfig:
        config = self._read()
        self.swap(config)
        logger.info("Reloaded config from %s", self.path)
        return config

    def save(self, config: EngineConfig) -> None:
        self._write(config)
        self.swap(config)

    def _read(self) -> EngineConfig:
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"Cannot read config file {self.path}: {exc}") from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Config file {self.path} is not valid JSON: {exc}") from exc
        return parse_config_dict(data)

    def _write(self, config: EngineConfig) -> None:
        payload = json.dumps(dump_config_dict(config), indent=2, ensure_ascii=False)
        self.path.write_text(payload + "\n", encoding="utf-8")
