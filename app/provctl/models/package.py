"""Package and extension references.

This module defines the identities used when diffing desired against
observed state: packages handled by the package manager and add-ons
handled by the editor's extension host.
"""

from collections.abc import Set
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class PackageRef:
    """Reference to a package known to the package manager.

    Equality and hashing use ``id`` only; the display name is
    informational.

    Attributes:
        id: Package-manager-specific identifier (e.g., 'terraform').
        display_name: Human-readable name (e.g., 'Terraform').
        aliases: Deprecated identifiers that also satisfy this package.
    """

    id: str
    display_name: str = field(default="", compare=False)
    aliases: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        """Validate package data after initialization."""
        if not self.id:
            msg = "Package id cannot be empty"
            raise ValueError(msg)

    @property
    def label(self) -> str:
        """Return the display name, falling back to the id."""
        return self.display_name or self.id

    def matches(self, installed: Set[str]) -> bool:
        """Check whether this package, or one of its aliases, is installed.

        Args:
            installed: Lowercased package ids reported by the package manager.

        Returns:
            True if the canonical id or any alias is present.
        """
        return any(name.lower() in installed for name in (self.id, *self.aliases))


@dataclass(frozen=True, slots=True)
class ExtensionRef:
    """Reference to an editor extension (e.g., 'hashicorp.terraform').

    Attributes:
        id: Marketplace identifier in ``publisher.name`` form.
    """

    id: str

    def __post_init__(self) -> None:
        """Validate extension data after initialization."""
        if not self.id:
            msg = "Extension id cannot be empty"
            raise ValueError(msg)

    @property
    def key(self) -> str:
        """Case-folded id; the extension host lowercases ids when listing."""
        return self.id.lower()
