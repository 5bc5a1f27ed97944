"""Configuration service for managing FocusKeeper configuration.

This module provides the ConfigService class, which is the single source of truth
for all configuration management in FocusKeeper. It handles:

- Loading and saving config.json
- Context management (list, add, switch)
- Credential management for remote contexts
- Config file initialization with sensible defaults
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

from focuskeeper.adapters.sqlite.connection import default_vault_path
from focuskeeper.models.config_models import AppConfig, Context
from focuskeeper.models.storage_strategy import (
    LocalStorageStrategy,
    RemoteStorageStrategy,
    StorageStrategyContext,
)

TOKEN_ENV_VAR = "FOCUSKEEPER_TOKEN"


class ConfigService:
    """Service for managing application configuration."""

    def __init__(self, config_dir: Path | None = None, data_dir: Path | None = None):
        self.config_dir = config_dir or Path(user_config_dir("focuskeeper"))
        self.config_path = self.config_dir / "config.json"
        self.credentials_dir = self.config_dir / "credentials"
        self.data_dir = data_dir or Path(user_data_dir("focuskeeper"))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.credentials_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None
        self._storage_strategy_context: StorageStrategyContext | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def storage_strategy_context(self) -> StorageStrategyContext:
        """StorageStrategyContext for the active context, built on first use."""
        if self._storage_strategy_context is None:
            context = self.get_current_context()
            if context.type == "remote":
                strategy = RemoteStorageStrategy()
            else:
                strategy = LocalStorageStrategy(db_path=context.source)
            self._storage_strategy_context = StorageStrategyContext(strategy)
        return self._storage_strategy_context

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            self._config = self.create_default_config()
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
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def create_default_config(self) -> AppConfig:
        """Create a default configuration with a single local context."""
        local_context = Context(
            name="local",
            type="local",
            source=str(default_vault_path(self.data_dir)),
            description="Local SQLite vault",
        )
        self._config = AppConfig(
            current_context_name=local_context.name,
            contexts=[local_context],
        )
        self.save_config()
        return self._config

    def list_contexts(self) -> list[Context]:
        """List all available contexts."""
        return self.config.contexts

    def get_current_context(self) -> Context:
        """Get the currently active context.

        Raises:
            ValueError: If the current context is not found
        """
        return self.config.get_current_context()

    def use_context(self, name: str) -> Context:
        """Set the current context by name."""
        context = self.config.get_context(name)
        self.config.current_context_name = context.name
        self.save_config()
        self._storage_strategy_context = None
        return context

    def add_context(self, context: Context):
        """Add a new context to the configuration."""
        self.config.add_context(context)
        self.save_config()

    def load_credentials(self) -> dict | None:
        """Load credentials for the current context.

        The FOCUSKEEPER_TOKEN environment variable takes precedence over the
        stored credential file.
        """
        token = os.environ.get(TOKEN_ENV_VAR)
        if token:
            return {"token": token}
        try:
            current_context = self.config.get_current_context()
        except ValueError:
            return None
        return self.load_context_credentials(current_context.name)

    def load_context_credentials(self, context_name: str) -> dict | None:
        """Load credentials for a specific context, or None if absent."""
        cred_path = self.credentials_dir / f"{context_name}.json"
        if not cred_path.exists():
            return None

        try:
            with open(cred_path, encoding="utf-8") as f:
                return json.load(f)
        except JSONDecodeError:
            return None

    def save_credentials(self, access_token: str, context_name: str | None = None):
        """Save a bearer token for a context (defaults to the current one)."""
        if context_name is None:
            context_name = self.config.get_current_context().name

        cred_path = self.credentials_dir / f"{context_name}.json"
        cred_path.parent.mkdir(parents=True, exist_ok=True)

        with open(cred_path, "w", encoding="utf-8") as f:
            json.dump({"token": access_token}, f, indent=2)

        cred_path.chmod(0o600)


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service


def get_storage_strategy_context() -> StorageStrategyContext:
    """Get a StorageStrategyContext based on the current configuration."""
    return get_config_service().storage_strategy_context
