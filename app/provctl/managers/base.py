"""Abstract base class for package managers.

This module defines the PackageManager interface the reconciler uses
to observe and change installed packages.
"""

from abc import ABC, abstractmethod

from provctl.core.runner import CommandRunner
from provctl.models.action import ActionResult
from provctl.models.package import PackageRef


class PackageManager(ABC):
    """Abstract base class for all package managers.

    Package managers are treated as non-reentrant: callers invoke one
    operation at a time and wait for it to finish.

    Attributes:
        runner: CommandRunner used for mutating operations.
        dry_run: If True, ask the package manager to simulate changes.

    Example:
        >>> manager = ChocolateyPackageManager(CommandRunner())
        >>> if manager.is_available():
        ...     installed = manager.list_installed()
        ...     result = manager.install(PackageRef(id="git"))
    """

    def __init__(self, runner: CommandRunner | None = None, dry_run: bool = False) -> None:
        """Initialize the package manager.

        Args:
            runner: CommandRunner for installs and removals. If None, a
                runner with the default retry policy is used.
            dry_run: If True, only simulate actions.
        """
        self._runner = runner or CommandRunner()
        self._dry_run = dry_run

    @property
    def runner(self) -> CommandRunner:
        """Runner used for mutating operations."""
        return self._runner

    @property
    def dry_run(self) -> bool:
        """Check if the package manager is in dry-run mode."""
        return self._dry_run

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short name for messages (e.g., 'chocolatey')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this package manager is available on the system."""

    @abstractmethod
    def list_installed(self) -> set[str]:
        """Return the lowercased ids of every installed package.

        Raises:
            RuntimeError: If the package manager cannot be queried.
        """

    @abstractmethod
    def install(self, package: PackageRef) -> ActionResult:
        """Install a single package."""

    @abstractmethod
    def uninstall(self, package: PackageRef) -> ActionResult:
        """Remove a single package.

        A package that is not installed yields SKIPPED_ALREADY_SATISFIED.
        """

    @abstractmethod
    def update_sources(self) -> ActionResult:
        """Refresh the package manager and its source metadata."""

    @abstractmethod
    def upgrade_all(self) -> ActionResult:
        """Upgrade every installed package."""
