"""Upgrade command implementation.

Refreshes the package manager itself, then upgrades every installed
package to its latest version.
"""

from typing import Annotated

import typer

from provctl.cli.display import create_results_table
from provctl.cli.types import require_settings
from provctl.core.errors import PreconditionUnmetError
from provctl.core.executor import build_runner
from provctl.core.reconciler import check_preconditions
from provctl.managers.chocolatey import ChocolateyPackageManager
from provctl.models.action import ActionResult
from provctl.utils.formatting import console, print_error, print_info, print_success
from provctl.utils.shell import is_admin

app = typer.Typer(
    help="Upgrade every installed package.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def upgrade(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Ask the package manager to simulate the upgrade.",
        ),
    ] = False,
    no_admin_check: Annotated[
        bool,
        typer.Option(
            "--no-admin-check",
            help="Do not require an elevated shell.",
        ),
    ] = False,
) -> None:
    """Update package sources, then upgrade all installed packages.

    Both steps are attempted even if the first fails.

    Examples:
        provctl upgrade
        provctl upgrade --yes
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_settings(ctx)
    manager = ChocolateyPackageManager(build_runner(settings), dry_run=dry_run)

    try:
        check_preconditions(
            manager,
            require_admin=settings.require_admin and not no_admin_check,
            admin_check=is_admin,
        )
    except PreconditionUnmetError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    if not yes and not dry_run:
        if not typer.confirm(f"Upgrade all packages installed with {manager.name}?"):
            print_info("Aborted.")
            raise typer.Exit(code=0)

    results: list[ActionResult] = [manager.update_sources(), manager.upgrade_all()]
    console.print(create_results_table(results))

    if any(r.failed for r in results):
        raise typer.Exit(code=1)
    print_success("Upgrade completed.")
