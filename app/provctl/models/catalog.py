"""Catalogue models for declarative provisioning.

This module defines the Pydantic models representing the catalog.toml
structure: every package, editor extension, configuration edit and
search-path candidate the provisioner knows about.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Flags that gate a conditional group; `uninstall` never gates content
GroupFlag = Literal["azure_tools", "sql_tools", "docker", "power_bi", "security_tools"]


class CatalogMeta(BaseModel):
    """Metadata section of the catalogue."""

    model_config = ConfigDict(extra="forbid")

    version: Annotated[str, Field(description="Catalogue revision")]
    description: Annotated[str | None, Field(description="Catalogue description")] = None


class CatalogPackage(BaseModel):
    """A package the provisioner installs.

    Attributes:
        id: Canonical package-manager identifier.
        name: Display name.
        flag: Gating flag, or None for the always-installed core group.
        aliases: Deprecated identifiers for the same tool.
        probe: Version command used by the validator, if any.
    """

    model_config = ConfigDict(extra="forbid")

    id: Annotated[str, Field(min_length=1, description="Canonical package id")]
    name: Annotated[str, Field(description="Display name")]
    flag: Annotated[GroupFlag | None, Field(description="Gating feature flag")] = None
    aliases: Annotated[list[str], Field(default_factory=list, description="Deprecated ids")]
    probe: Annotated[list[str] | None, Field(description="Version probe command")] = None

    @property
    def is_core(self) -> bool:
        """Check if this package belongs to the always-installed core group."""
        return self.flag is None


class CatalogExtension(BaseModel):
    """An editor extension; ungated entries form the fixed baseline."""

    model_config = ConfigDict(extra="forbid")

    id: Annotated[str, Field(min_length=1, description="Marketplace id")]
    flag: Annotated[GroupFlag | None, Field(description="Gating feature flag")] = None


class CatalogConfigEdit(BaseModel):
    """A configuration default applied only when the key is absent."""

    model_config = ConfigDict(extra="forbid")

    artifact: Annotated[str, Field(min_length=1, description="Artifact short name")]
    path: Annotated[str, Field(min_length=1, description="Artifact path (tokens allowed)")]
    format: Annotated[Literal["json", "ini"], Field(description="Artifact format")]
    key: Annotated[str, Field(min_length=1, description="Key to set when absent")]
    value: Annotated[Any, Field(description="Default value")]
    flag: Annotated[GroupFlag | None, Field(description="Gating feature flag")] = None

    @model_validator(mode="after")
    def validate_ini_key(self) -> CatalogConfigEdit:
        """Validate that INI keys name both section and option."""
        if self.format == "ini" and "." not in self.key:
            msg = f"INI keys must be written as 'section.option', got {self.key!r}"
            raise ValueError(msg)
        return self


class PathProbe(BaseModel):
    """Command whose first output line names a directory to add to PATH."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1)]
    command: Annotated[list[str], Field(min_length=1)]


class CatalogPath(BaseModel):
    """Search-path section: static candidates plus discovery probes."""

    model_config = ConfigDict(extra="forbid")

    candidates: Annotated[list[str], Field(default_factory=list)]
    probes: Annotated[list[PathProbe], Field(default_factory=list)]


class CatalogRemoval(BaseModel):
    """Packages shipped by earlier catalogue revisions, kept for cleanup."""

    model_config = ConfigDict(extra="forbid")

    retired: Annotated[list[str], Field(default_factory=list)]


class Catalog(BaseModel):
    """Complete provisioning catalogue."""

    model_config = ConfigDict(extra="forbid")

    meta: CatalogMeta
    packages: Annotated[list[CatalogPackage], Field(default_factory=list)]
    extensions: Annotated[list[CatalogExtension], Field(default_factory=list)]
    config: Annotated[list[CatalogConfigEdit], Field(default_factory=list)]
    path: Annotated[CatalogPath, Field(default_factory=CatalogPath)]
    removal: Annotated[CatalogRemoval, Field(default_factory=CatalogRemoval)]

    @model_validator(mode="after")
    def validate_unique_ids(self) -> Catalog:
        """Validate that no package id or alias is declared twice."""
        seen: set[str] = set()
        for package in self.packages:
            for name in (package.id, *package.aliases):
                key = name.lower()
                if key in seen:
                    msg = f"Package id declared more than once: {name}"
                    raise ValueError(msg)
                seen.add(key)
        extension_ids = [e.id.lower() for e in self.extensions]
        if len(extension_ids) != len(set(extension_ids)):
            msg = "Extension ids must be unique"
            raise ValueError(msg)
        return self
