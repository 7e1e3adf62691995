"""Plan command implementation.

Queries the system and shows the steps a run would take.
"""

import json

import typer

from provctl.cli.display import create_plan_table, print_plan_summary
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
from provctl.core.errors import PreconditionUnmetError
from provctl.core.executor import build_reconciler
from provctl.utils.formatting import console, print_error

app = typer.Typer(
    help="Show the steps a run would take.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def plan(
    ctx: typer.Context,
    azure_tools: AzureToolsOption = False,
    sql_tools: SqlToolsOption = False,
    docker: DockerOption = False,
    power_bi: PowerBIOption = False,
    security_tools: SecurityToolsOption = False,
    uninstall: UninstallOption = False,
    json_output: JsonOption = False,
) -> None:
    """Compare the catalogue with the system and list every step.

    Nothing is changed. Steps already satisfied are listed too.

    Examples:
        provctl plan
        provctl plan --sql-tools --json
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_settings(ctx)
    reconciler = build_reconciler(settings, require_resolver(settings), require_admin=False)
    flags = build_flags(
        azure_tools=azure_tools,
        sql_tools=sql_tools,
        docker=docker,
        power_bi=power_bi,
        security_tools=security_tools,
        uninstall=uninstall,
    )

    try:
        action_plan = reconciler.plan(flags)
    except PreconditionUnmetError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    if json_output:
        console.print_json(json.dumps(action_plan.to_dict()))
        return

    console.print(create_plan_table(action_plan))
    print_plan_summary(action_plan)
