"""Configuration edit model.

A ConfigEdit proposes a default value for one key in one artifact.
It is only ever applied when the key is absent.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ConfigFormat(str, Enum):
    """Serialization format of a configuration artifact.

    Attributes:
        JSON: Key-value document (editor settings); keys are top-level.
        INI: Sectioned text file; keys are written ``section.option``.
    """

    JSON = "json"
    INI = "ini"


@dataclass(frozen=True, slots=True)
class ConfigEdit:
    """A single non-destructive configuration edit.

    Attributes:
        artifact: Short name of the artifact (e.g., 'editor-settings').
        path: Artifact location; may contain ``~`` and path tokens.
        format: Serialization format of the artifact.
        key: Key to set when absent.
        value: Default value for the key.
    """

    artifact: str
    path: str
    format: ConfigFormat
    key: str
    value: Any

    def __post_init__(self) -> None:
        """Validate edit data after initialization."""
        if not self.key:
            msg = "Config key cannot be empty"
            raise ValueError(msg)
        if self.format == ConfigFormat.INI and "." not in self.key:
            msg = f"INI keys must be written as 'section.option', got {self.key!r}"
            raise ValueError(msg)

    @property
    def target(self) -> str:
        """Action target string, ``artifact:key``."""
        return f"{self.artifact}:{self.key}"
