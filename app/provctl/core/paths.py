"""Path management for provctl.

This module provides standardized paths for configuration and state
storage, plus expansion of the path tokens used in the catalogue.

Defaults follow the XDG Base Directory Specification; on Windows the
roaming and local application-data folders are used instead:
- Config: ~/.config/provctl/   (%APPDATA%\\provctl)
- State: ~/.local/state/provctl/   (%LOCALAPPDATA%\\provctl)
"""

import os
import sys
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "provctl"

# Editor whose user settings are patched
EDITOR_DIR_NAME = "Code"


def _get_xdg_dir(env_var: str, default_subdir: str, windows_var: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").
        windows_var: Windows folder variable used when XDG is unset.

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    if os.name == "nt" and os.environ.get(windows_var):
        return Path(os.environ[windows_var]) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/provctl/ (or XDG_CONFIG_HOME/provctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config", "APPDATA")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data holds the run history, which should persist between
    runs but is not configuration.

    Returns:
        Path to ~/.local/state/provctl/ (or XDG_STATE_HOME/provctl/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state", "LOCALAPPDATA")


def get_settings_path() -> Path:
    """Get the default settings file path.

    Returns:
        Path to ~/.config/provctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_history_path() -> Path:
    """Get the run history file path.

    Returns:
        Path to ~/.local/state/provctl/runs.jsonl.
    """
    return get_state_dir() / "runs.jsonl"


def get_editor_user_dir() -> Path:
    """Get the editor's per-user settings directory.

    Returns:
        %APPDATA%/Code/User on Windows, ~/Library/Application Support/Code/User
        on macOS, ~/.config/Code/User elsewhere.
    """
    if os.name == "nt" and os.environ.get("APPDATA"):
        return Path(os.environ["APPDATA"]) / EDITOR_DIR_NAME / "User"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / EDITOR_DIR_NAME / "User"
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / EDITOR_DIR_NAME / "User"


def path_tokens() -> dict[str, str]:
    """Return the substitutions available to catalogue paths.

    Windows folder tokens fall back to their conventional locations so
    that catalogue paths stay well-formed on any host.

    Returns:
        Mapping of token name to directory string.
    """
    home = Path.home()
    return {
        "home": str(home),
        "editor_user_dir": str(get_editor_user_dir()),
        "program_files": os.environ.get("ProgramFiles", "C:\\Program Files"),
        "program_files_x86": os.environ.get("ProgramFiles(x86)", "C:\\Program Files (x86)"),
        "program_data": os.environ.get("ProgramData", "C:\\ProgramData"),
        "local_app_data": os.environ.get("LOCALAPPDATA", str(home / "AppData" / "Local")),
    }


def expand_path(template: str, tokens: dict[str, str] | None = None) -> str:
    """Expand ``{token}`` placeholders and a leading ``~`` in a path.

    Args:
        template: Path string from the catalogue.
        tokens: Substitutions to use. If None, uses path_tokens().

    Returns:
        Expanded, normalized path string.

    Raises:
        KeyError: If the template references an unknown token.
    """
    expanded = template.format_map(tokens if tokens is not None else path_tokens())
    return os.path.normpath(os.path.expanduser(expanded))


def ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
