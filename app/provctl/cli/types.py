"""Shared option types and helpers for CLI commands.

The feature-flag switches map 1:1 onto FeatureFlags fields and are
declared once here so every command spells them the same way.
"""

from pathlib import Path
from typing import Annotated

import typer

from provctl.core.catalog import CatalogResolver, load_catalog
from provctl.core.errors import CatalogError, SettingsError
from provctl.core.settings import Settings, load_settings
from provctl.models.flags import FeatureFlags
from provctl.utils.formatting import print_error

AzureToolsOption = Annotated[
    bool, typer.Option("--azure-tools", help="Include cloud-focused editor extensions.")
]
SqlToolsOption = Annotated[
    bool, typer.Option("--sql-tools", help="Include SQL editor extensions and dialect config.")
]
DockerOption = Annotated[bool, typer.Option("--docker", help="Include the container runtime.")]
PowerBIOption = Annotated[bool, typer.Option("--power-bi", help="Include the BI desktop tool.")]
SecurityToolsOption = Annotated[
    bool, typer.Option("--security-tools", help="Include IaC security scanners.")
]
UninstallOption = Annotated[
    bool,
    typer.Option("--uninstall", help="Remove every package any catalogue revision installed."),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON.")]


def build_flags(
    *,
    azure_tools: bool = False,
    sql_tools: bool = False,
    docker: bool = False,
    power_bi: bool = False,
    security_tools: bool = False,
    uninstall: bool = False,
) -> FeatureFlags:
    """Build FeatureFlags from command-line switches."""
    return FeatureFlags(
        azure_tools=azure_tools,
        sql_tools=sql_tools,
        docker=docker,
        power_bi=power_bi,
        security_tools=security_tools,
        uninstall=uninstall,
    )


def require_settings(ctx: typer.Context) -> Settings:
    """Load settings or exit with a helpful error message.

    Args:
        ctx: Typer context; ``ctx.obj["settings_path"]`` may override the path.

    Returns:
        Loaded and validated Settings.

    Raises:
        typer.Exit: If the settings file is invalid.
    """
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    path: Path | None = obj.get("settings_path")
    try:
        return load_settings(path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def require_resolver(settings: Settings) -> CatalogResolver:
    """Load the configured catalogue or exit with a helpful error message.

    Raises:
        typer.Exit: If the catalogue cannot be loaded.
    """
    try:
        return CatalogResolver(load_catalog(settings.catalog_path))
    except CatalogError as e:
        print_error(f"Failed to load catalogue: {e}")
        raise typer.Exit(code=1) from e
