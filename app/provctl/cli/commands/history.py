"""History command for viewing past runs.

This module provides the `provctl history` command for listing the
run reports recorded by `provctl apply`.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from provctl.cli.types import JsonOption
from provctl.core.state import StateManager
from provctl.models.action import ActionOutcome
from provctl.models.report import RunReport
from provctl.utils.formatting import console, print_info

app = typer.Typer(
    name="history",
    help="View history of provisioning runs.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of runs to show.",
        ),
    ] = 20,
    json_output: JsonOption = False,
) -> None:
    """Show recorded provisioning runs, newest first.

    Examples:
        provctl history             # Show last 20 runs
        provctl history -n 5
        provctl history --json      # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    runs = StateManager().get_runs(limit=limit)

    if not runs:
        print_info("No runs recorded yet.")
        return

    if json_output:
        console.print_json(json.dumps([run.to_dict() for run in runs]))
    else:
        _print_table(runs)


def _print_table(runs: list[RunReport]) -> None:
    """Print runs as a Rich table.

    Args:
        runs: Run reports to display.
    """
    table = Table(
        title="Run History",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Started", style="muted")
    table.add_column("Flags")
    table.add_column("Changed", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Duration", justify="right")

    for run in runs:
        failed = run.count(ActionOutcome.FAILED_AFTER_RETRIES)
        table.add_row(
            run.started.strftime("%Y-%m-%d %H:%M:%S"),
            ", ".join(run.flags) or "[muted]-[/muted]",
            str(run.count(ActionOutcome.SUCCESS)),
            str(run.count(ActionOutcome.SKIPPED_ALREADY_SATISFIED)),
            f"[error]{failed}[/error]" if failed else "0",
            f"{run.duration_seconds:.0f}s",
        )

    console.print(table)
