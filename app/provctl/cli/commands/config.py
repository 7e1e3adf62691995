"""Settings file commands.

Provides commands to create and inspect the provctl settings file.
"""

from typing import Annotated

import tomli_w
import typer

from provctl.cli.types import require_settings
from provctl.core.errors import SettingsError
from provctl.core.paths import get_settings_path
from provctl.core.settings import Settings, save_settings, settings_to_dict
from provctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage the provctl settings file.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing settings file.",
        ),
    ] = False,
) -> None:
    """Write a settings file with the default values."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    path = obj.get("settings_path") or get_settings_path()

    if path.exists() and not force:
        print_error(f"Settings file already exists: {path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        saved = save_settings(Settings(), path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Settings written to {saved}")


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective settings as TOML."""
    settings = require_settings(ctx)
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    path = obj.get("settings_path") or get_settings_path()
    source = str(path) if path.exists() else "defaults"

    console.print(f"[muted]# Source: {source}[/muted]")
    console.print(tomli_w.dumps(settings_to_dict(settings)), markup=False, highlight=False)
