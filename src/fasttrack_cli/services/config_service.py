"""Configuration service for FastTrack CLI.

``ConfigService`` is the single source of truth for configuration. It handles:

- Loading and saving config.json
- Creating the default configuration on first run
- Reading and updating individual settings by dotted key (``fasting.default_hours``)
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError

from fasttrack_cli.models.config_models import AppConfig


class ConfigService:
    """Service for loading, saving and editing the application configuration."""

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir("fasttrack_cli"))
        self.config_path = self.config_dir / "config.json"
        self._default_data_dir = Path(user_data_dir("fasttrack_cli"))

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def data_dir(self) -> Path:
        """Directory holding the snapshot and the alert queue."""
        override = self.config.storage.data_dir
        data_dir = Path(override).expanduser() if override else self._default_data_dir
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            self._config = AppConfig()
            self.save_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))

            self.config_path.chmod(0o600)
        except Exception as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Reset configuration to defaults."""
        if self.config_path.exists():
            self.config_path.unlink()
        self._config = AppConfig()
        self.save_config()
        return self._config

    def get_value(self, key: str) -> Any:
        """Return a setting by dotted key, e.g. ``notifications.enabled``."""
        node: Any = self.config.model_dump()
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                raise KeyError(key)
            node = node[part]
        return node

    def set_value(self, key: str, raw_value: str) -> Any:
        """Update a setting by dotted key and persist it.

        *raw_value* is parsed as JSON when possible (``true``, ``18``, ``null``)
        and used as a plain string otherwise. The whole configuration is
        re-validated before saving.

        Raises:
            KeyError: If the key does not exist
            ValueError: If the new value fails validation
        """
        self.get_value(key)
        try:
            value = json.loads(raw_value)
        except json.JSONDecodeError:
            value = raw_value

        data = self.config.model_dump()
        parts = key.split(".")
        node = data
        for part in parts[:-1]:
            node = node[part]
        node[parts[-1]] = value

        try:
            self._config = AppConfig.model_validate(data)
        except ValidationError as e:
            raise ValueError(str(e)) from e

        self.save_config()
        return self.get_value(key)


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
