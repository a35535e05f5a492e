"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from cachedep import DependencySettings, MemoryAdapter, create_manager


class TestDefaults:
    """Tests for default settings."""

    def test_defaults(self) -> None:
        settings = DependencySettings()
        assert settings.prefix == "cdep"
        assert settings.tag_version_ttl == 30 * 86_400_000
        assert settings.lock_wait == 5000
        assert settings.fail_open is None
        assert settings.db_fail_open is False
        assert settings.db_connection is None
        assert settings.allow_baseline_failure is False
        assert settings.log_failures is True


class TestEnvironment:
    """Tests for CACHE_DEPENDENCY_* environment variables."""

    def test_reads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHE_DEPENDENCY_PREFIX", "app")
        monkeypatch.setenv("CACHE_DEPENDENCY_TAG_VERSION_TTL", "7d")
        monkeypatch.setenv("CACHE_DEPENDENCY_FAIL_OPEN", "true")
        monkeypatch.setenv("CACHE_DEPENDENCY_DB_FAIL_OPEN", "1")
        monkeypatch.setenv("CACHE_DEPENDENCY_DB_CONNECTION", "replica")

        settings = DependencySettings()
        assert settings.prefix == "app"
        assert settings.tag_version_ttl == 7 * 86_400_000
        assert settings.fail_open is True
        assert settings.db_fail_open is True
        assert settings.db_connection == "replica"

    def test_plain_number_is_milliseconds(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CACHE_DEPENDENCY_LOCK_WAIT", "250")
        assert DependencySettings().lock_wait == 250

    def test_invalid_duration(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHE_DEPENDENCY_LOCK_WAIT", "soon")
        with pytest.raises(ValidationError):
            DependencySettings()


class TestCreateManager:
    """Tests for the create_manager factory."""

    def test_overrides(self) -> None:
        manager = create_manager(
            adapter=MemoryAdapter(), fail_open=False, tag_version_ttl="1h"
        )
        assert manager.settings.fail_open is False
        assert manager.settings.tag_version_ttl == 3_600_000

    def test_overrides_apply_on_top_of_settings(self) -> None:
        base = DependencySettings(prefix="base", db_fail_open=True)
        manager = create_manager(adapter=MemoryAdapter(), settings=base, prefix="x")
        assert manager.settings.prefix == "x"
        assert manager.settings.db_fail_open is True

    def test_unknown_override(self) -> None:
        with pytest.raises(TypeError, match="Unknown settings: nope"):
            create_manager(adapter=MemoryAdapter(), nope=1)
