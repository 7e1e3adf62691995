"""Abstract base class for editor extension hosts."""

from abc import ABC, abstractmethod

from provctl.core.runner import CommandRunner
from provctl.models.action import ActionResult
from provctl.models.package import ExtensionRef


class ExtensionHost(ABC):
    """Abstract base class for the editor's extension subsystem.

    Extension installs are best-effort: an unavailable host degrades the
    extension steps of a run instead of aborting it.
    """

    def __init__(self, runner: CommandRunner | None = None) -> None:
        """Initialize the extension host.

        Args:
            runner: CommandRunner for installs. If None, a runner with the
                default retry policy is used.
        """
        self._runner = runner or CommandRunner()

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short name for messages (e.g., 'vscode')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the editor CLI can be invoked."""

    @abstractmethod
    def list_installed(self) -> set[str]:
        """Return the lowercased ids of installed extensions.

        Raises:
            RuntimeError: If the host cannot be queried.
        """

    @abstractmethod
    def install(self, extension: ExtensionRef) -> ActionResult:
        """Install a single extension."""
