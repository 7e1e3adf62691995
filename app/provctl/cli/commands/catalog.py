"""Catalog command implementation.

Shows what the catalogue resolves to for a set of feature flags,
without touching the system.
"""

import json

import typer
from rich.table import Table

from provctl.cli.types import (
    AzureToolsOption,
    DockerOption,
    JsonOption,
    PowerBIOption,
    SecurityToolsOption,
    SqlToolsOption,
    UninstallOption,
    build_flags,
    require_resolver,
    require_settings,
)
from provctl.models.package import PackageRef
from provctl.models.state import DesiredState
from provctl.utils.formatting import console

app = typer.Typer(
    help="Show the desired state for a set of feature flags.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def catalog(
    ctx: typer.Context,
    azure_tools: AzureToolsOption = False,
    sql_tools: SqlToolsOption = False,
    docker: DockerOption = False,
    power_bi: PowerBIOption = False,
    security_tools: SecurityToolsOption = False,
    uninstall: UninstallOption = False,
    json_output: JsonOption = False,
) -> None:
    """Show what the catalogue resolves to.

    Lists the packages, editor extensions and config edits a run with
    the given flags would converge on. With --uninstall, lists the
    removal set instead.

    Examples:
        provctl catalog
        provctl catalog --sql-tools --docker
        provctl catalog --uninstall --json
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_settings(ctx)
    resolver = require_resolver(settings)
    flags = build_flags(
        azure_tools=azure_tools,
        sql_tools=sql_tools,
        docker=docker,
        power_bi=power_bi,
        security_tools=security_tools,
        uninstall=uninstall,
    )

    if flags.uninstall:
        removal = resolver.removal_set()
        if json_output:
            data = [{"id": ref.id, "name": ref.label} for ref in removal]
            console.print_json(json.dumps({"removal": data}))
        else:
            console.print(_removal_table(removal))
        return

    desired = resolver.resolve(flags)
    if json_output:
        console.print_json(json.dumps(desired.to_dict()))
    else:
        _print_desired(desired)


def _removal_table(removal: tuple[PackageRef, ...]) -> Table:
    table = Table(
        title="Removal Set",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Package", no_wrap=True)
    table.add_column("Name")
    for ref in removal:
        table.add_row(f"[removed]{ref.id}[/removed]", f"[muted]{ref.label}[/muted]")
    return table


def _print_desired(desired: DesiredState) -> None:
    """Print the desired state as three tables."""
    packages = Table(
        title="Packages",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    packages.add_column("Package", no_wrap=True)
    packages.add_column("Name")
    for ref in desired.packages:
        packages.add_row(ref.id, f"[muted]{ref.label}[/muted]")
    console.print(packages)

    if desired.extensions:
        extensions = Table(
            title="Editor Extensions",
            show_header=True,
            header_style="bold_header",
            border_style="border",
        )
        extensions.add_column("Extension", no_wrap=True)
        for ext in desired.extensions:
            extensions.add_row(ext.id)
        console.print(extensions)

    if desired.config_edits:
        edits = Table(
            title="Config Edits",
            show_header=True,
            header_style="bold_header",
            border_style="border",
        )
        edits.add_column("Artifact")
        edits.add_column("Key", no_wrap=True)
        edits.add_column("Value")
        for edit in desired.config_edits:
            edits.add_row(edit.artifact, edit.key, f"[muted]{edit.value!r}[/muted]")
        console.print(edits)
