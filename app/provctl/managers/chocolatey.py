"""Chocolatey package manager implementation.

Lists, installs and removes packages using the choco CLI.
"""

import logging
import subprocess

from provctl.managers.base import PackageManager
from provctl.models.action import Action, ActionKind, ActionResult
from provctl.models.package import PackageRef
from provctl.utils.shell import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)

# Output fragments choco prints when the requested change is a no-op
_NOT_INSTALLED_MARKERS = (
    "not installed",
    "cannot uninstall a non-existent package",
    "0/0 packages uninstalled",
)
_ALREADY_INSTALLED_MARKERS = ("already installed",)


def _uninstall_not_applicable(result: CommandResult) -> bool:
    """Check whether choco reported the package as already absent."""
    text = result.output.lower()
    return any(marker in text for marker in _NOT_INSTALLED_MARKERS)


def _install_not_applicable(result: CommandResult) -> bool:
    """Check whether choco reported the package as already present."""
    text = result.output.lower()
    return any(marker in text for marker in _ALREADY_INSTALLED_MARKERS)


class ChocolateyPackageManager(PackageManager):
    """Package manager backed by Chocolatey.

    All mutating commands are non-interactive (``-y``) and run through
    the CommandRunner so they inherit its retry policy.
    """

    # Listing is read-only and quick compared to installs
    _LIST_TIMEOUT: float = 120.0

    @property
    def name(self) -> str:
        """Return 'chocolatey'."""
        return "chocolatey"

    def is_available(self) -> bool:
        """Check if choco is available."""
        return command_exists("choco")

    def list_installed(self) -> set[str]:
        """Return the lowercased ids of every locally installed package.

        Returns:
            Set of package ids.

        Raises:
            RuntimeError: If choco is unavailable or the listing fails.
        """
        if not self.is_available():
            msg = "Chocolatey is not available on this system"
            raise RuntimeError(msg)

        try:
            result = run_command(["choco", "list", "--limit-output"], timeout=self._LIST_TIMEOUT)
        except (OSError, subprocess.TimeoutExpired) as e:
            msg = f"choco list failed: {e}"
            raise RuntimeError(msg) from e

        if not result.success:
            msg = f"choco list failed: {result.stderr.strip() or result.stdout.strip()}"
            raise RuntimeError(msg)

        installed: set[str] = set()
        for line in result.stdout.splitlines():
            # --limit-output format: id|version
            name, sep, _version = line.strip().partition("|")
            if not sep or not name:
                logger.debug("Skipping unparsable choco list line: %r", line[:100])
                continue
            installed.add(name.lower())
        return installed

    def install(self, package: PackageRef) -> ActionResult:
        """Install a package with ``choco install``."""
        action = Action(
            kind=ActionKind.INSTALL,
            target=package.id,
            rationale=f"{package.label} is in the desired state but not installed",
        )
        return self._runner.run(
            action,
            self._command("install", package.id, "--no-progress"),
            not_applicable=_install_not_applicable,
        )

    def uninstall(self, package: PackageRef) -> ActionResult:
        """Remove a package with ``choco uninstall``."""
        action = Action(
            kind=ActionKind.UNINSTALL,
            target=package.id,
            rationale="Listed in the removal set",
        )
        return self._runner.run(
            action,
            self._command("uninstall", package.id),
            not_applicable=_uninstall_not_applicable,
        )

    def update_sources(self) -> ActionResult:
        """Upgrade Chocolatey itself, refreshing its source metadata."""
        action = Action(
            kind=ActionKind.MAINTENANCE,
            target="sources",
            rationale="Refresh the package manager before installing",
        )
        return self._runner.run(
            action, self._command("upgrade", "chocolatey", "--no-progress")
        )

    def upgrade_all(self) -> ActionResult:
        """Upgrade every installed package with ``choco upgrade all``."""
        action = Action(
            kind=ActionKind.MAINTENANCE,
            target="all",
            rationale="Upgrade every installed package",
        )
        return self._runner.run(action, self._command("upgrade", "all", "--no-progress"))

    def _command(self, verb: str, *args: str) -> list[str]:
        """Build a non-interactive choco command line."""
        command = ["choco", verb, *args, "-y"]
        if self.dry_run:
            command.append("--noop")
        return command
