"""Filesystem collaborator.

The reconciler touches the filesystem only through this interface,
which keeps config patching and path probing testable against a
temporary directory.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from provctl.core.errors import ConfigurationCorruptError


class FileSystem(ABC):
    """Whole-file text access plus existence checks."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a file exists."""

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        """Check whether a directory exists."""

    @abstractmethod
    def read_text(self, path: str) -> str:
        """Read a whole file as text.

        Raises:
            ConfigurationCorruptError: If the content is not valid UTF-8.
            OSError: If the file cannot be read.
        """

    @abstractmethod
    def write_text(self, path: str, content: str) -> None:
        """Write a whole file, creating parent directories.

        Raises:
            OSError: If the file cannot be written.
        """

    def read_json(self, path: str) -> dict[str, Any]:
        """Read a JSON object document.

        Returns:
            The parsed mapping; an empty file reads as an empty mapping.

        Raises:
            ConfigurationCorruptError: If the content is not a JSON object.
            OSError: If the file cannot be read.
        """
        text = self.read_text(path)
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON in {path}: {e}"
            raise ConfigurationCorruptError(msg) from e
        if not isinstance(data, dict):
            msg = f"Expected a JSON object in {path}, got {type(data).__name__}"
            raise ConfigurationCorruptError(msg)
        return data

    def write_json(self, path: str, data: dict[str, Any]) -> None:
        """Write a JSON object document with 4-space indentation."""
        self.write_text(path, json.dumps(data, indent=4, ensure_ascii=False) + "\n")


class LocalFileSystem(FileSystem):
    """FileSystem backed by pathlib."""

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def is_dir(self, path: str) -> bool:
        return Path(path).is_dir()

    def read_text(self, path: str) -> str:
        # utf-8-sig tolerates the BOM some Windows editors write
        try:
            return Path(path).read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as e:
            msg = f"{path} is not valid UTF-8: {e.reason} at byte {e.start}"
            raise ConfigurationCorruptError(msg) from e

    def write_text(self, path: str, content: str) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
