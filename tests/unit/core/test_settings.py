"""Unit tests for settings file I/O."""

import tomllib
from pathlib import Path

import pytest

from provctl.core.errors import SettingsError
from provctl.core.settings import RunnerSettings, Settings, load_settings, save_settings


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """No settings file is not an error."""
        settings = load_settings(tmp_path / "config.toml")

        assert settings == Settings()
        assert settings.runner.retries == 3
        assert settings.require_admin is True

    def test_partial_file(self, tmp_path: Path) -> None:
        """Unset values keep their defaults."""
        path = tmp_path / "config.toml"
        path.write_text("record_history = false\n\n[runner]\nretries = 5\n", encoding="utf-8")

        settings = load_settings(path)

        assert settings.record_history is False
        assert settings.runner.retries == 5
        assert settings.runner.backoff_seconds == 5.0

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises SettingsError."""
        path = tmp_path / "config.toml"
        path.write_text("[runner\nretries = ", encoding="utf-8")

        with pytest.raises(SettingsError, match="Invalid TOML"):
            load_settings(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        """Out-of-range values raise SettingsError."""
        path = tmp_path / "config.toml"
        path.write_text("[runner]\nretries = 0\n", encoding="utf-8")

        with pytest.raises(SettingsError, match="Invalid settings"):
            load_settings(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        """Typos are reported rather than ignored."""
        path = tmp_path / "config.toml"
        path.write_text("require_admn = false\n", encoding="utf-8")

        with pytest.raises(SettingsError):
            load_settings(path)


class TestSaveSettings:
    """Tests for save_settings()."""

    def test_save_then_load(self, tmp_path: Path) -> None:
        """Saved settings load back unchanged."""
        settings = Settings(
            runner=RunnerSettings(retries=2, backoff_seconds=1.0),
            catalog_path=tmp_path / "catalog.toml",
            require_admin=False,
        )
        path = tmp_path / "nested" / "config.toml"

        saved = save_settings(settings, path)

        assert saved == path
        assert load_settings(path) == settings

    def test_unset_catalog_path_omitted(self, tmp_path: Path) -> None:
        """TOML has no null, so an unset override is left out."""
        path = save_settings(Settings(), tmp_path / "config.toml")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        assert "catalog_path" not in data
        assert data["runner"]["timeout_seconds"] == 1800.0

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        """The atomic write leaves only the target file."""
        save_settings(Settings(), tmp_path / "config.toml")

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]
