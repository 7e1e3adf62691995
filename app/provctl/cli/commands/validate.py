"""Validate command implementation.

Runs the version probes alone, without changing anything.
"""

import json

import typer

from provctl.cli.display import create_validation_table
from provctl.cli.types import JsonOption, require_resolver, require_settings
from provctl.core.search_path import current_search_path
from provctl.core.validator import Validator
from provctl.models.report import ProbeStatus
from provctl.utils.formatting import console, print_success, print_warning

app = typer.Typer(
    help="Check which catalogue tools respond on the search path.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def validate(
    ctx: typer.Context,
    json_output: JsonOption = False,
) -> None:
    """Probe every catalogue tool that has a version command.

    Probes are informational and never change the exit code.

    Examples:
        provctl validate
        provctl validate --json
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = require_settings(ctx)
    resolver = require_resolver(settings)
    validation = Validator().validate(resolver.probes(), search_path=current_search_path())

    if json_output:
        data = {name: outcome.to_dict() for name, outcome in validation.items()}
        console.print_json(json.dumps(data))
    else:
        console.print(create_validation_table(validation))
        absent = [n for n, o in validation.items() if o.status == ProbeStatus.ABSENT]
        if absent:
            print_warning(f"Not found on search path: {', '.join(absent)}")
        elif all(o.status == ProbeStatus.PRESENT for o in validation.values()):
            print_success(f"All {len(validation)} tool(s) respond.")
