"""Configuration service for Flvr CLI.

This module provides the ConfigService class, the durable key-value store
behind the client. It handles:

- Loading and saving config.json (endpoint, polling, preferences)
- Credential management for the API key, kept out of config.json
- Dot-separated get/set access for the ``config`` commands
"""

from __future__ import annotations

import json
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir
from pydantic import BaseModel

from flvr_cli.models.config_models import AppConfig, Preferences

_APP_NAME = "flvr_cli"
_CREDENTIALS_NAME = "default"


class ConfigService:
    """Service for managing application configuration and preferences."""

    def __init__(self):
        """Initialize the config service."""

        self.config_dir = Path(user_config_dir(_APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.credentials_dir = self.config_dir / "credentials"

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.credentials_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None
        self._api_key: str | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def preferences(self) -> Preferences:
        return self.config.preferences

    @property
    def credentials_path(self) -> Path:
        return self.credentials_dir / f"{_CREDENTIALS_NAME}.json"

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config  # Return cached config if already loaded

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Expected on first run
            self._config = AppConfig()
            self.save_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self):
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

    def reset_config(self, key: str | None = None):
        """Reset configuration (or a single dotted key) to defaults."""
        if key is None:
            self._config = AppConfig()
            self.save_config()
            return

        default_value = self._lookup(AppConfig(), key)
        if isinstance(default_value, BaseModel):
            default_value = default_value.model_dump()
        self.set(key, default_value)

    @staticmethod
    def _lookup(config: AppConfig, key: str) -> Any:
        value: Any = config
        for k in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        return self._lookup(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key.

        The whole config is re-validated, so invalid values raise
        ``pydantic.ValidationError`` and leave the stored config untouched.
        """
        keys = key.split(".")
        config_dict = self.config.model_dump()

        current = config_dict
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                raise KeyError(key)
            current = current[k]
        if keys[-1] not in current:
            raise KeyError(key)

        current[keys[-1]] = value

        self._config = AppConfig.model_validate(config_dict)
        self.save_config()

    def update_preferences(self, **updates: Any) -> Preferences:
        """Apply preference updates and persist them."""
        for name, value in updates.items():
            setattr(self.preferences, name, value)
        self.save_config()
        return self.preferences

    def load_api_key(self) -> str:
        """Load the stored API key, or an empty string when none is saved."""
        if self._api_key is not None:
            return self._api_key

        self._api_key = ""
        if self.credentials_path.exists():
            try:
                with open(self.credentials_path, encoding="utf-8") as f:
                    self._api_key = str(json.load(f).get("token", ""))
            except JSONDecodeError:
                pass
        return self._api_key

    def save_api_key(self, api_key: str) -> None:
        """Save the API key with owner-only permissions."""
        self.credentials_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.credentials_path, "w", encoding="utf-8") as f:
            json.dump({"token": api_key}, f, indent=2)

        self.credentials_path.chmod(0o600)
        self._api_key = api_key

    def clear_credentials(self) -> None:
        """Remove the stored API key."""
        if self.credentials_path.exists():
            self.credentials_path.unlink()
        self._api_key = ""


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
