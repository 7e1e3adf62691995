"""Shared Rich display functions for plans, results and probes.

Provides reusable table builders and summary printers used by the
plan, apply, validate and history commands.
"""

from collections.abc import Mapping, Sequence

from rich.table import Table

from provctl.models.action import ActionKind, ActionOutcome, ActionPlan, ActionResult
from provctl.models.report import ProbeOutcome, ProbeStatus, RunReport
from provctl.utils.formatting import console, print_success

_KIND_LABELS: dict[ActionKind, str] = {
    ActionKind.INSTALL: "[added]+install[/added]",
    ActionKind.UNINSTALL: "[removed]-uninstall[/removed]",
    ActionKind.INSTALL_EXTENSION: "[added]+extension[/added]",
    ActionKind.CONFIG_PATCH: "[changed]~config[/changed]",
    ActionKind.PATH_ADD: "[changed]+path[/changed]",
    ActionKind.MAINTENANCE: "[info]maintain[/info]",
}


def _table(title: str) -> Table:
    return Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )


def create_plan_table(plan: ActionPlan, dry_run: bool = False) -> Table:
    """Create a Rich table displaying every planned step.

    Steps already satisfied are shown muted so the table doubles as a
    status overview of the workstation.

    Args:
        plan: Plan to display.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table configured for plan display.
    """
    table = _table("Planned Actions (Dry Run)" if dry_run else "Planned Actions")
    table.add_column("Action", width=12)
    table.add_column("Target", no_wrap=True)
    table.add_column("Status", width=10)
    table.add_column("Reason")

    for action in plan.actions:
        if plan.is_satisfied(action):
            status = "[muted]ok[/muted]"
            target = f"[muted]{action.target}[/muted]"
        else:
            status = "[warning]pending[/warning]"
            target = f"[removed]{action.target}[/removed]" if action.is_destructive else action.target
        table.add_row(
            _KIND_LABELS[action.kind],
            target,
            status,
            f"[muted]{action.rationale or ''}[/muted]",
        )

    return table


def create_results_table(results: Sequence[ActionResult]) -> Table:
    """Create a Rich table displaying action results.

    Args:
        results: Results to display, in execution order.

    Returns:
        Rich Table configured for results display.
    """
    table = _table("Results")
    table.add_column("Status", width=6, justify="center")
    table.add_column("Action", width=12)
    table.add_column("Target", no_wrap=True)
    table.add_column("Tries", justify="right")
    table.add_column("Message")

    for result in results:
        if result.outcome == ActionOutcome.SUCCESS:
            status = "[success]OK[/success]"
            message = result.message or ""
        elif result.outcome == ActionOutcome.SKIPPED_ALREADY_SATISFIED:
            status = "[muted]SKIP[/muted]"
            message = result.message or ""
        else:
            status = "[error]FAIL[/error]"
            message = result.last_error or "Unknown error"

        table.add_row(
            status,
            _KIND_LABELS[result.action.kind],
            result.action.target,
            str(result.attempts),
            f"[muted]{message}[/muted]",
        )

    return table


def create_validation_table(validation: Mapping[str, ProbeOutcome]) -> Table:
    """Create a Rich table displaying validation probe outcomes.

    Args:
        validation: Probe outcomes keyed by package id.

    Returns:
        Rich Table configured for probe display.
    """
    table = _table("Validation")
    table.add_column("Tool", no_wrap=True)
    table.add_column("Status", width=8)
    table.add_column("Detail")

    for name, outcome in validation.items():
        if outcome.status == ProbeStatus.PRESENT:
            table.add_row(name, "[success]present[/success]", outcome.version or "")
        elif outcome.status == ProbeStatus.ABSENT:
            table.add_row(name, "[warning]absent[/warning]", "[muted]not on search path[/muted]")
        else:
            table.add_row(name, "[error]error[/error]", f"[muted]{outcome.message or ''}[/muted]")

    return table


def print_plan_summary(plan: ActionPlan) -> None:
    """Print counts of pending and satisfied steps."""
    pending = len(plan.pending)
    satisfied = len(plan) - pending
    if pending == 0:
        print_success(f"Nothing to do: all {satisfied} step(s) already satisfied.")
        return
    console.print(
        f"\nSummary: [warning]{pending} pending[/warning], [muted]{satisfied} satisfied[/muted]"
    )


def print_report_summary(report: RunReport) -> None:
    """Print a summary of a completed run.

    Shows a success message when nothing failed, or per-outcome counts
    when there are failures.

    Args:
        report: Report of the completed run.
    """
    succeeded = report.count(ActionOutcome.SUCCESS)
    skipped = report.count(ActionOutcome.SKIPPED_ALREADY_SATISFIED)
    failed = report.count(ActionOutcome.FAILED_AFTER_RETRIES)

    if failed == 0:
        print_success(
            f"Run completed in {report.duration_seconds:.1f}s: "
            f"{succeeded} changed, {skipped} already satisfied."
        )
    else:
        console.print(
            f"\n[success]{succeeded} succeeded[/success], [muted]{skipped} skipped[/muted], "
            f"[error]{failed} failed[/error]"
        )
