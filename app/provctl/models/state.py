"""Desired and observed system state."""

from dataclasses import dataclass, field

from provctl.models.config_edit import ConfigEdit
from provctl.models.package import ExtensionRef, PackageRef


@dataclass(frozen=True, slots=True)
class DesiredState:
    """Target configuration derived from feature flags and the catalogue.

    Packages and extensions are tuples in catalogue declaration order so
    that plans computed from them are reproducible.

    Attributes:
        packages: Packages that should be installed.
        extensions: Editor extensions that should be installed.
        config_edits: Configuration edits to apply, in order.
    """

    packages: tuple[PackageRef, ...] = ()
    extensions: tuple[ExtensionRef, ...] = ()
    config_edits: tuple[ConfigEdit, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Check whether nothing is desired."""
        return not (self.packages or self.extensions or self.config_edits)

    @property
    def package_ids(self) -> frozenset[str]:
        """Set view of the desired package ids."""
        return frozenset(p.id for p in self.packages)

    @property
    def extension_ids(self) -> frozenset[str]:
        """Set view of the desired extension ids (case-folded)."""
        return frozenset(e.key for e in self.extensions)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "packages": [{"id": p.id, "name": p.label} for p in self.packages],
            "extensions": [e.id for e in self.extensions],
            "config_edits": [
                {"artifact": c.artifact, "path": c.path, "key": c.key, "value": c.value}
                for c in self.config_edits
            ],
        }


@dataclass(frozen=True, slots=True)
class ObservedState:
    """What is actually installed, queried fresh on every run.

    Attributes:
        packages: Lowercased package ids reported by the package manager.
        extensions: Lowercased extension ids reported by the extension host.
        extensions_available: False when the extension host could not be
            reached; extension steps are then skipped.
    """

    packages: frozenset[str] = field(default_factory=frozenset)
    extensions: frozenset[str] = field(default_factory=frozenset)
    extensions_available: bool = True
