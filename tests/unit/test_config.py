"""Tests for Recurrence configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from recurrence.config import (
    NotificationPolicy,
    RecurrenceConfig,
    get_config,
    load_config_from_file,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep ambient RECURRENCE_* variables and .env files out of these tests."""
    for name in (
        "RECURRENCE_MODE",
        "RECURRENCE_REDIS_URL",
        "RECURRENCE_NOTIFICATIONS_DIR",
        "RECURRENCE_API_PORT",
        "RECURRENCE_ENVIRONMENT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    """Test suite for default configuration values."""

    def test_defaults(self) -> None:
        config = RecurrenceConfig()

        assert config.mode == "lite"
        assert config.api_port == 8682
        assert config.metrics_enabled is True
        assert config.store.redis_url == "redis://localhost:6379/0"
        assert config.store.index_key == "exceptions:all"
        assert config.notifications.directory == Path("./notifications")
        assert config.notifications.policy is NotificationPolicy.DUPLICATES_ONLY
        assert config.ingestion.max_archive_bytes == 50 * 1024 * 1024

    def test_mode_is_normalized(self) -> None:
        assert RecurrenceConfig(mode="STANDARD").mode == "standard"

    def test_unknown_mode_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unknown mode"):
            RecurrenceConfig(mode="cluster")


class TestEnvironmentOverrides:
    """Test suite for RECURRENCE_* environment variables."""

    def test_flat_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECURRENCE_MODE", "standard")
        monkeypatch.setenv("RECURRENCE_REDIS_URL", "redis://cache:6380/2")
        monkeypatch.setenv("RECURRENCE_NOTIFICATIONS_DIR", "/var/lib/recurrence")

        config = RecurrenceConfig()

        assert config.mode == "standard"
        assert config.store.redis_url == "redis://cache:6380/2"
        assert config.notifications.directory == Path("/var/lib/recurrence")

    def test_nested_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECURRENCE_NOTIFICATIONS__POLICY", "all")

        config = RecurrenceConfig()

        assert config.notifications.policy is NotificationPolicy.ALL

    def test_environment_wins_over_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        config_file = tmp_path / "recurrence.yaml"
        config_file.write_text("mode: lite\napi_port: 9000\n")
        monkeypatch.setenv("RECURRENCE_MODE", "standard")

        config = get_config(str(config_file))

        assert config.mode == "standard"
        assert config.api_port == 9000


class TestConfigFile:
    """Test suite for YAML configuration files."""

    def test_load_values(self, tmp_path: Path) -> None:
        config_file = tmp_path / "recurrence.yaml"
        config_file.write_text(
            "mode: standard\n"
            "store:\n"
            "  redis_url: redis://redis:6379/1\n"
            "notifications:\n"
            "  policy: all\n"
            "ingestion:\n"
            "  exception_keywords: [crash]\n"
        )

        config = get_config(str(config_file))

        assert config.mode == "standard"
        assert config.store.redis_url == "redis://redis:6379/1"
        assert config.notifications.policy is NotificationPolicy.ALL
        assert config.ingestion.exception_keywords == ["crash"]

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_config_from_file(str(tmp_path / "absent.yaml")) == {}

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("mode: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config_from_file(str(config_file))

    def test_non_mapping(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- lite\n- standard\n")

        with pytest.raises(ValueError, match="mapping"):
            load_config_from_file(str(config_file))

    def test_explicit_overrides_win(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "recurrence.yaml"
        config_file.write_text("mode: standard\n")
        monkeypatch.setenv("RECURRENCE_MODE", "standard")

        config = get_config(str(config_file), mode="lite")

        assert config.mode == "lite"
