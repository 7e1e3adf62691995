"""Apply command implementation.

Runs one reconcile pass: installs what is missing, patches config,
extends the search path and validates the result.
"""

import json
from typing import Annotated

import typer

from provctl.cli.display import (
    create_plan_table,
    create_results_table,
    create_validation_table,
    print_plan_summary,
    print_report_summary,
)
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
from provctl.core.executor import build_reconciler, record_run_to_history
from provctl.core.search_path import commit_search_path
from provctl.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="Bring the workstation to the desired state.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def apply(
    ctx: typer.Context,
    azure_tools: AzureToolsOption = False,
    sql_tools: SqlToolsOption = False,
    docker: DockerOption = False,
    power_bi: PowerBIOption = False,
    security_tools: SecurityToolsOption = False,
    uninstall: UninstallOption = False,
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
            help="Show what would be done without making changes.",
        ),
    ] = False,
    no_admin_check: Annotated[
        bool,
        typer.Option(
            "--no-admin-check",
            help="Do not require an elevated shell.",
        ),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """Reconcile the workstation with the catalogue.

    Every step is attempted; a failing step is recorded and the run
    continues. Running apply again repairs whatever failed.

    Exits with code 1 if any step failed and code 2 if the run could
    not start.

    Examples:
        provctl apply --yes
        provctl apply --sql-tools --azure-tools
        provctl apply --uninstall --yes
        provctl apply --dry-run
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_settings(ctx)
    reconciler = build_reconciler(
        settings,
        require_resolver(settings),
        require_admin=False if no_admin_check else None,
    )
    flags = build_flags(
        azure_tools=azure_tools,
        sql_tools=sql_tools,
        docker=docker,
        power_bi=power_bi,
        security_tools=security_tools,
        uninstall=uninstall,
    )

    if dry_run or not yes:
        try:
            action_plan = reconciler.plan(flags)
        except PreconditionUnmetError as e:
            print_error(str(e))
            raise typer.Exit(code=2) from e

        if dry_run:
            if json_output:
                console.print_json(json.dumps(action_plan.to_dict()))
            else:
                console.print(create_plan_table(action_plan, dry_run=True))
                print_plan_summary(action_plan)
                print_info("Dry-run mode: no changes made.")
            return

        console.print(create_plan_table(action_plan))
        print_plan_summary(action_plan)
        if not typer.confirm("\nProceed with these changes?"):
            print_info("Aborted.")
            raise typer.Exit(code=0)

    try:
        report = reconciler.reconcile(flags)
    except PreconditionUnmetError as e:
        print_error(str(e))
        raise typer.Exit(code=2) from e

    commit_search_path(report.search_path)
    record_run_to_history(report, settings)

    if json_output:
        console.print_json(json.dumps(report.to_dict()))
    else:
        console.print(create_results_table(report.results))
        if report.validation:
            console.print(create_validation_table(report.validation))
        print_report_summary(report)

    if report.has_failures:
        raise typer.Exit(code=1)
