"""Unit tests for services/config_service.py.

Uses a real ConfigService pointed at a tmp_path directory.
"""

from __future__ import annotations

import json
import stat

import pytest

from focuskeeper.models.config_models import AppConfig, Context
from focuskeeper.models.storage_strategy import LocalStorageStrategy, RemoteStorageStrategy
from focuskeeper.services.config_service import (
    TOKEN_ENV_VAR,
    ConfigService,
    get_config_service,
    get_storage_strategy_context,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def svc(tmp_path, monkeypatch) -> ConfigService:
    """ConfigService backed by a temporary directory."""
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
    service = ConfigService(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
    _ = service.config
    return service


# ---------------------------------------------------------------------------
# Loading and saving
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_first_run_creates_local_context(self, svc, tmp_path):
        context = svc.get_current_context()
        assert context.name == "local"
        assert context.type == "local"
        assert context.source == str(tmp_path / "data" / "vault.db")
        assert svc.config_path.exists()

    def test_config_file_is_private(self, svc):
        mode = stat.S_IMODE(svc.config_path.stat().st_mode)
        assert mode == 0o600

    def test_reload_reads_saved_file(self, svc, tmp_path):
        svc.config.focus.default_daily_target = 5
        svc.save_config()

        fresh = ConfigService(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
        assert fresh.config.focus.default_daily_target == 5

    def test_corrupt_file_raises(self, tmp_path):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "config.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(RuntimeError, match="Failed to load config"):
            ConfigService(config_dir=config_dir, data_dir=tmp_path / "data").load_config()

    def test_save_without_config_raises(self, tmp_path):
        service = ConfigService(config_dir=tmp_path / "c", data_dir=tmp_path / "d")
        with pytest.raises(RuntimeError, match="No configuration to save"):
            service.save_config()


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


class TestContexts:
    def test_add_and_use_context(self, svc):
        svc.add_context(Context(name="team", type="remote", source="https://focus.example.com"))

        context = svc.use_context("team")

        assert context.name == "team"
        assert svc.get_current_context().type == "remote"
        saved = json.loads(svc.config_path.read_text(encoding="utf-8"))
        assert saved["current_context_name"] == "team"

    def test_duplicate_context_rejected(self, svc):
        with pytest.raises(ValueError, match="already exists"):
            svc.add_context(Context(name="local", type="local", source="/tmp/other.db"))

    def test_use_unknown_context(self, svc):
        with pytest.raises(ValueError, match="not found"):
            svc.use_context("nope")

    def test_list_contexts(self, svc):
        assert [c.name for c in svc.list_contexts()] == ["local"]

    def test_empty_source_rejected(self):
        with pytest.raises(ValueError):
            Context(name="x", type="local", source="   ")


# ---------------------------------------------------------------------------
# Storage strategy
# ---------------------------------------------------------------------------


class TestStorageStrategy:
    def test_local_context_gets_local_strategy(self, svc):
        context = svc.storage_strategy_context
        assert context.storage_type == "local"
        assert isinstance(context._strategy, LocalStorageStrategy)
        assert svc.storage_strategy_context is context

    def test_use_context_rebuilds_strategy(self, svc, mocker):
        mocker.patch("focuskeeper.services.api.client.get_config_service", return_value=svc)
        local = svc.storage_strategy_context
        svc.add_context(Context(name="team", type="remote", source="https://focus.example.com"))

        svc.use_context("team")

        remote = svc.storage_strategy_context
        assert remote is not local
        assert isinstance(remote._strategy, RemoteStorageStrategy)


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestCredentials:
    def test_none_when_missing(self, svc):
        assert svc.load_credentials() is None

    def test_save_and_load_for_current_context(self, svc):
        svc.save_credentials("abc123")

        assert svc.load_credentials() == {"token": "abc123"}
        cred_path = svc.credentials_dir / "local.json"
        assert stat.S_IMODE(cred_path.stat().st_mode) == 0o600

    def test_save_for_named_context(self, svc):
        svc.save_credentials("xyz", context_name="team")
        assert svc.load_context_credentials("team") == {"token": "xyz"}
        assert svc.load_credentials() is None

    def test_environment_token_wins(self, svc, monkeypatch):
        svc.save_credentials("stored")
        monkeypatch.setenv(TOKEN_ENV_VAR, "from-env")
        assert svc.load_credentials() == {"token": "from-env"}

    def test_corrupt_credentials_ignored(self, svc):
        (svc.credentials_dir / "local.json").write_text("{broken", encoding="utf-8")
        assert svc.load_context_credentials("local") is None


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------


def test_get_config_service_is_cached(tmp_config):
    assert get_config_service() is tmp_config
    assert get_config_service() is get_config_service()


def test_get_storage_strategy_context_uses_current_context(tmp_config):
    assert get_storage_strategy_context() is tmp_config.storage_strategy_context


def test_app_config_defaults():
    config = AppConfig()
    assert config.api.retry == 3
    assert config.focus.tick_interval_seconds == 1.0
    assert config.focus.stats_window_days == 30
