"""Non-destructive configuration patching.

A ConfigEdit sets a key only when it is absent. A key that is already
set, to any value, is left untouched so that re-running the provisioner
never clobbers a choice the user made since the previous run.
"""

import configparser
import logging
import re

from provctl.core.errors import ConfigurationCorruptError
from provctl.core.filesystem import FileSystem
from provctl.core.paths import expand_path
from provctl.models.action import (
    Action,
    ActionKind,
    ActionOutcome,
    ActionResult,
    failed_result,
    skipped_result,
)
from provctl.models.config_edit import ConfigEdit, ConfigFormat

logger = logging.getLogger(__name__)


class ConfigPatcher:
    """Applies ConfigEdits to JSON and INI artifacts.

    Structured (JSON) artifacts are parsed, given only the missing key,
    and re-serialized with every existing key and nesting preserved.
    INI artifacts are edited textually so comments and layout survive.
    """

    def __init__(self, file_system: FileSystem, tokens: dict[str, str] | None = None) -> None:
        """Initialize the patcher.

        Args:
            file_system: Filesystem collaborator.
            tokens: Path token substitutions. If None, uses the host's.
        """
        self._fs = file_system
        self._tokens = tokens

    def apply(self, edit: ConfigEdit) -> ActionResult:
        """Apply one edit.

        Args:
            edit: The edit to apply.

        Returns:
            SUCCESS if the key was added, SKIPPED_ALREADY_SATISFIED if it was
            already set, FAILED_AFTER_RETRIES if the artifact is corrupt or
            unwritable. Never raises.
        """
        action = Action(
            kind=ActionKind.CONFIG_PATCH,
            target=edit.target,
            rationale=f"Default for {edit.key}",
        )

        try:
            path = expand_path(edit.path, self._tokens)
        except KeyError as e:
            return failed_result(action, f"Unknown path token {e} in {edit.path}", attempts=1)

        try:
            if edit.format == ConfigFormat.JSON:
                changed = self._apply_json(path, edit)
            else:
                changed = self._apply_ini(path, edit)
        except ConfigurationCorruptError as e:
            logger.warning("Not patching %s: %s", path, e)
            return failed_result(action, str(e), attempts=1)
        except OSError as e:
            logger.warning("Cannot update %s: %s", path, e)
            return failed_result(action, f"Cannot update {path}: {e}", attempts=1)

        if not changed:
            logger.debug("%s already set in %s", edit.key, path)
            return skipped_result(action, f"{edit.key} already set in {path}")

        logger.info("Set %s in %s", edit.key, path)
        return ActionResult(
            action=action,
            outcome=ActionOutcome.SUCCESS,
            attempts=1,
            message=f"Set {edit.key} in {path}",
        )

    def _apply_json(self, path: str, edit: ConfigEdit) -> bool:
        """Add a missing top-level key to a JSON document."""
        data = self._fs.read_json(path) if self._fs.exists(path) else {}
        if edit.key in data:
            return False
        data[edit.key] = edit.value
        self._fs.write_json(path, data)
        return True

    def _apply_ini(self, path: str, edit: ConfigEdit) -> bool:
        """Add a missing ``section.option`` to an INI file."""
        section, _, option = edit.key.partition(".")
        text = self._fs.read_text(path) if self._fs.exists(path) else ""

        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read_string(text, source=path)
        except configparser.Error as e:
            msg = f"Invalid INI in {path}: {e}"
            raise ConfigurationCorruptError(msg) from e

        if parser.has_option(section, option):
            return False

        self._fs.write_text(path, _insert_ini_option(text, section, option, edit.value))
        return True


def _format_ini_value(value: object) -> str:
    """Render a value the way INI readers expect booleans and scalars."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _insert_ini_option(text: str, section: str, option: str, value: object) -> str:
    """Insert ``option = value`` at the end of ``section``, creating it if needed."""
    line = f"{option} = {_format_ini_value(value)}"
    lines = text.splitlines()
    header = re.compile(rf"^\s*\[{re.escape(section)}\]\s*$")

    start = next((i for i, current in enumerate(lines) if header.match(current)), None)
    if start is None:
        prefix = text.rstrip("\n")
        separator = "\n\n" if prefix else ""
        return f"{prefix}{separator}[{section}]\n{line}\n"

    # Section ends at the next header; insert after its last non-blank line
    end = next(
        (i for i in range(start + 1, len(lines)) if lines[i].lstrip().startswith("[")),
        len(lines),
    )
    insert_at = end
    while insert_at > start + 1 and not lines[insert_at - 1].strip():
        insert_at -= 1
    lines.insert(insert_at, line)
    return "\n".join(lines) + "\n"
