"""Visual Studio Code extension host.

Lists and installs extensions through the ``code`` command-line
launcher.
"""

import logging
import shutil
import subprocess

from provctl.core.runner import CommandRunner
from provctl.extensions.base import ExtensionHost
from provctl.models.action import Action, ActionKind, ActionResult
from provctl.models.package import ExtensionRef
from provctl.utils.shell import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)


def _already_installed(result: CommandResult) -> bool:
    """Check whether the CLI reported the extension as already present."""
    return "is already installed" in result.output.lower()


class VSCodeExtensionHost(ExtensionHost):
    """Extension host backed by the VS Code CLI.

    On Windows ``code`` is a ``.cmd`` shim, so the executable is resolved
    through the search path before invoking it.
    """

    _LIST_TIMEOUT: float = 120.0

    def __init__(self, runner: CommandRunner | None = None, command: str = "code") -> None:
        """Initialize the host.

        Args:
            runner: CommandRunner for installs.
            command: Name of the editor CLI (e.g., 'code-insiders').
        """
        super().__init__(runner)
        self._command = command

    @property
    def name(self) -> str:
        """Return 'vscode'."""
        return "vscode"

    def is_available(self) -> bool:
        """Check if the editor CLI is on the search path."""
        return command_exists(self._command)

    def list_installed(self) -> set[str]:
        """Return the lowercased ids of installed extensions.

        Raises:
            RuntimeError: If the CLI is unavailable or the listing fails.
        """
        if not self.is_available():
            msg = f"{self._command} is not available on the search path"
            raise RuntimeError(msg)

        try:
            result = run_command(
                [self._executable(), "--list-extensions"], timeout=self._LIST_TIMEOUT
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            msg = f"{self._command} --list-extensions failed: {e}"
            raise RuntimeError(msg) from e

        if not result.success:
            msg = f"{self._command} --list-extensions failed: {result.stderr.strip()}"
            raise RuntimeError(msg)

        return {line.strip().lower() for line in result.stdout.splitlines() if line.strip()}

    def install(self, extension: ExtensionRef) -> ActionResult:
        """Install an extension with ``code --install-extension``."""
        action = Action(
            kind=ActionKind.INSTALL_EXTENSION,
            target=extension.id,
            rationale="Extension is in the desired state but not installed",
        )
        return self._runner.run(
            action,
            [self._executable(), "--install-extension", extension.id, "--force"],
            not_applicable=_already_installed,
        )

    def _executable(self) -> str:
        """Resolve the CLI launcher, falling back to the bare name."""
        return shutil.which(self._command) or self._command
