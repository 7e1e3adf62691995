"""Settings file I/O and model.

This module provides loading and saving of the user settings file in
TOML format with validation using Pydantic models. A missing settings
file is not an error; defaults apply.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from provctl.core.errors import SettingsError
from provctl.core.paths import get_settings_path


class RunnerSettings(BaseModel):
    """Retry and timeout defaults for external commands.

    Attributes:
        retries: Total attempts per action (not additional retries).
        backoff_seconds: Blocking wait between attempts.
        timeout_seconds: Per-attempt timeout.
    """

    model_config = ConfigDict(extra="forbid")

    retries: Annotated[int, Field(ge=1, description="Total attempts per action")] = 3
    backoff_seconds: Annotated[float, Field(ge=0, description="Wait between attempts")] = 5.0
    timeout_seconds: Annotated[float, Field(gt=0, description="Per-attempt timeout")] = 1800.0


class Settings(BaseModel):
    """User settings for provctl.

    Attributes:
        runner: Retry and timeout defaults.
        catalog_path: Alternative catalogue file; None uses the bundled one.
        require_admin: Refuse to run without administrative rights.
        record_history: Append each run report to the history file.
    """

    model_config = ConfigDict(extra="forbid")

    runner: Annotated[RunnerSettings, Field(default_factory=RunnerSettings)]
    catalog_path: Annotated[Path | None, Field(description="Catalogue override")] = None
    require_admin: Annotated[bool, Field(description="Require elevation")] = True
    record_history: Annotated[bool, Field(description="Record run reports")] = True


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated Settings; defaults if the file does not exist.

    Raises:
        SettingsError: If the file cannot be read, parsed or validated.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        return Settings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings content: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        settings: The Settings object to save.
        path: Path to save the settings. If None, uses the default path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()

    tmp_path: Path | None = None
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(settings_to_dict(settings), f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Convert Settings to a dictionary suitable for TOML serialization.

    TOML has no null, so an unset catalogue override is omitted.
    """
    data: dict[str, Any] = {
        "require_admin": settings.require_admin,
        "record_history": settings.record_history,
    }
    if settings.catalog_path is not None:
        data["catalog_path"] = str(settings.catalog_path)
    data["runner"] = settings.runner.model_dump()
    return data
