"""Catalogue loading and desired-state resolution.

The catalogue is one declarative TOML document. CatalogResolver turns
it plus a set of feature flags into a DesiredState; the same flags
always produce the same DesiredState.
"""

import logging
import tomllib
from functools import lru_cache
from importlib import resources
from pathlib import Path

from pydantic import ValidationError

from provctl.core.errors import CatalogError, CatalogNotFoundError, CatalogValidationError
from provctl.core.paths import expand_path
from provctl.core.validator import Probe
from provctl.models.catalog import Catalog, PathProbe
from provctl.models.config_edit import ConfigEdit, ConfigFormat
from provctl.models.flags import FeatureFlags
from provctl.models.package import ExtensionRef, PackageRef
from provctl.models.state import DesiredState

logger = logging.getLogger(__name__)

BUNDLED_CATALOG = "catalog.toml"


def _parse_catalog(text: str, origin: str) -> Catalog:
    """Parse and validate catalogue TOML."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise CatalogValidationError(f"Invalid TOML syntax in {origin}: {e}") from e

    try:
        return Catalog.model_validate(data)
    except ValidationError as e:
        raise CatalogValidationError(f"Invalid catalogue content in {origin}: {e}") from e


@lru_cache(maxsize=1)
def bundled_catalog() -> Catalog:
    """Load the catalogue shipped with the package.

    Returns:
        Validated Catalog, cached after the first load.

    Raises:
        CatalogValidationError: If the bundled file is invalid.
    """
    resource = resources.files("provctl.data").joinpath(BUNDLED_CATALOG)
    return _parse_catalog(resource.read_text(encoding="utf-8"), BUNDLED_CATALOG)


def load_catalog(path: Path | None = None) -> Catalog:
    """Load and validate a catalogue.

    Args:
        path: Path to a catalogue file. If None, uses the bundled one.

    Returns:
        Validated Catalog object.

    Raises:
        CatalogNotFoundError: If the file doesn't exist.
        CatalogValidationError: If the TOML or its content is invalid.
        CatalogError: If the file cannot be read.
    """
    if path is None:
        return bundled_catalog()

    if not path.exists():
        raise CatalogNotFoundError(f"Catalogue not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"Failed to read catalogue: {e}") from e

    return _parse_catalog(text, str(path))


class CatalogResolver:
    """Resolves feature flags against a catalogue.

    Example:
        >>> resolver = CatalogResolver()
        >>> desired = resolver.resolve(FeatureFlags(docker=True))
        >>> [p.id for p in desired.packages][-1]
        'docker-desktop'
    """

    def __init__(self, catalog: Catalog | None = None) -> None:
        """Initialize the resolver.

        Args:
            catalog: Catalogue to resolve against. If None, uses the bundled one.
        """
        self.catalog = catalog or bundled_catalog()

    def resolve(self, flags: FeatureFlags) -> DesiredState:
        """Compute the desired state for a set of flags.

        Core entries (no gating flag) are always included; each
        conditional entry is included when its flag is set. With
        ``uninstall`` set the desired state is empty; removal uses
        removal_set() instead.

        Args:
            flags: Feature flags for this run.

        Returns:
            DesiredState with entries in catalogue declaration order.
        """
        if flags.uninstall:
            return DesiredState()

        enabled = flags.enabled()

        packages = tuple(
            PackageRef(id=p.id, display_name=p.name, aliases=tuple(p.aliases))
            for p in self.catalog.packages
            if p.flag is None or p.flag in enabled
        )
        extensions = tuple(
            ExtensionRef(id=e.id)
            for e in self.catalog.extensions
            if e.flag is None or e.flag in enabled
        )
        config_edits = tuple(
            ConfigEdit(
                artifact=c.artifact,
                path=c.path,
                format=ConfigFormat(c.format),
                key=c.key,
                value=c.value,
            )
            for c in self.catalog.config
            if c.flag is None or c.flag in enabled
        )
        return DesiredState(packages=packages, extensions=extensions, config_edits=config_edits)

    def removal_set(self) -> tuple[PackageRef, ...]:
        """Return every package any catalogue revision has shipped.

        Includes current packages, their deprecated aliases and retired
        packages, in that order, without duplicates. Independent of flags.
        """
        refs: list[PackageRef] = []
        seen: set[str] = set()

        def add(ref: PackageRef) -> None:
            if ref.id.lower() not in seen:
                seen.add(ref.id.lower())
                refs.append(ref)

        for package in self.catalog.packages:
            add(PackageRef(id=package.id, display_name=package.name))
            for alias in package.aliases:
                add(PackageRef(id=alias, display_name=f"{package.name} (deprecated id)"))
        for retired in self.catalog.removal.retired:
            add(PackageRef(id=retired, display_name=f"{retired} (retired)"))
        return tuple(refs)

    def probes(self) -> tuple[Probe, ...]:
        """Return the fixed validation battery, independent of flags."""
        return tuple(
            Probe(name=p.id, command=tuple(p.probe)) for p in self.catalog.packages if p.probe
        )

    def path_candidates(self, tokens: dict[str, str] | None = None) -> list[str]:
        """Return the static search path candidates with tokens expanded.

        Candidates with unknown tokens are skipped with a warning.
        """
        candidates: list[str] = []
        for template in self.catalog.path.candidates:
            try:
                candidates.append(expand_path(template, tokens))
            except KeyError as e:
                logger.warning("Skipping path candidate %s: unknown token %s", template, e)
        return candidates

    @property
    def path_probes(self) -> list[PathProbe]:
        """Discovery probes for additional search path entries."""
        return list(self.catalog.path.probes)
