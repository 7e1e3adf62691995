"""Unit tests for the plan and apply commands.

The reconciler is replaced with a mock; these tests cover prompting,
dry-run handling, output and exit codes.
"""

import json
from collections.abc import Iterator
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from provctl.cli.main import app
from provctl.core.errors import PreconditionUnmetError
from provctl.models.action import Action, ActionKind, ActionOutcome, ActionPlan, ActionResult
from provctl.models.report import ProbeOutcome, RunReport

runner = CliRunner()

pytestmark = pytest.mark.usefixtures("isolated_dirs")

INSTALL_GIT = Action(ActionKind.INSTALL, "git", "Git is in the desired state but not installed")
INSTALL_TFLINT = Action(ActionKind.INSTALL, "tflint", "TFLint is in the desired state")

PLAN = ActionPlan(actions=(INSTALL_GIT, INSTALL_TFLINT), satisfied=frozenset({INSTALL_GIT}))


def _report(*results: ActionResult) -> RunReport:
    return RunReport(
        started=datetime(2026, 1, 26, 14, 30, tzinfo=UTC),
        finished=datetime(2026, 1, 26, 14, 32, tzinfo=UTC),
        results=results,
        validation={"git": ProbeOutcome.present("git version 2.45.1")},
        search_path=("/pf/Git/cmd",),
    )


SKIPPED = ActionResult(INSTALL_GIT, ActionOutcome.SKIPPED_ALREADY_SATISFIED, attempts=0)
INSTALLED = ActionResult(INSTALL_TFLINT, ActionOutcome.SUCCESS, attempts=1)
FAILED = ActionResult(
    INSTALL_TFLINT, ActionOutcome.FAILED_AFTER_RETRIES, attempts=3, last_error="503"
)


@pytest.fixture
def reconciler() -> Iterator[MagicMock]:
    """Mock reconciler returned by build_reconciler in both commands."""
    mock = MagicMock()
    mock.plan.return_value = PLAN
    mock.reconcile.return_value = _report(SKIPPED, INSTALLED)
    with (
        patch("provctl.cli.commands.apply.build_reconciler", return_value=mock),
        patch("provctl.cli.commands.plan.build_reconciler", return_value=mock),
    ):
        yield mock


@pytest.fixture
def side_effects() -> Iterator[tuple[MagicMock, MagicMock]]:
    """Mock the environment commit and history recording."""
    with (
        patch("provctl.cli.commands.apply.commit_search_path") as commit,
        patch("provctl.cli.commands.apply.record_run_to_history") as record,
    ):
        yield commit, record


class TestPlanCommand:
    """Tests for provctl plan."""

    def test_table(self, reconciler: MagicMock) -> None:
        """Pending and satisfied steps are both listed."""
        result = runner.invoke(app, ["plan"])

        assert result.exit_code == 0
        assert "git" in result.stdout
        assert "tflint" in result.stdout
        assert "1 pending" in result.stdout

    def test_json(self, reconciler: MagicMock) -> None:
        """--json prints the plan with satisfied markers."""
        result = runner.invoke(app, ["plan", "--sql-tools", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert (data["pending"], data["satisfied"]) == (1, 1)
        assert [a["satisfied"] for a in data["actions"]] == [True, False]
        flags = reconciler.plan.call_args[0][0]
        assert flags.sql_tools is True

    def test_precondition_exits_2(self, reconciler: MagicMock) -> None:
        """A missing package manager stops the command with code 2."""
        reconciler.plan.side_effect = PreconditionUnmetError("Chocolatey is not available")

        result = runner.invoke(app, ["plan"])

        assert result.exit_code == 2


class TestApplyCommand:
    """Tests for provctl apply."""

    def test_dry_run_does_not_reconcile(
        self, reconciler: MagicMock, side_effects: tuple[MagicMock, MagicMock]
    ) -> None:
        """--dry-run shows the plan and changes nothing."""
        result = runner.invoke(app, ["apply", "--dry-run"])

        assert result.exit_code == 0
        assert "Dry-run mode" in result.stdout
        reconciler.reconcile.assert_not_called()
        side_effects[0].assert_not_called()

    def test_confirmation_declined(
        self, reconciler: MagicMock, side_effects: tuple[MagicMock, MagicMock]
    ) -> None:
        """Answering no aborts with exit code 0."""
        result = runner.invoke(app, ["apply"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.stdout
        reconciler.reconcile.assert_not_called()

    def test_confirmation_accepted(
        self, reconciler: MagicMock, side_effects: tuple[MagicMock, MagicMock]
    ) -> None:
        """Answering yes runs the reconcile pass."""
        result = runner.invoke(app, ["apply"], input="y\n")

        assert result.exit_code == 0
        reconciler.reconcile.assert_called_once()

    def test_yes_skips_plan(
        self, reconciler: MagicMock, side_effects: tuple[MagicMock, MagicMock]
    ) -> None:
        """--yes runs without planning or prompting."""
        commit, record = side_effects

        result = runner.invoke(app, ["apply", "--yes"])

        assert result.exit_code == 0
        reconciler.plan.assert_not_called()
        report = reconciler.reconcile.return_value
        commit.assert_called_once_with(report.search_path)
        record.assert_called_once()
        assert record.call_args[0][0] is report
        assert "1 changed, 1 already satisfied" in result.stdout

    def test_failure_exits_1(
        self, reconciler: MagicMock, side_effects: tuple[MagicMock, MagicMock]
    ) -> None:
        """A failed step gives exit code 1 after the report is recorded."""
        reconciler.reconcile.return_value = _report(SKIPPED, FAILED)

        result = runner.invoke(app, ["apply", "--yes"])

        assert result.exit_code == 1
        side_effects[1].assert_called_once()
        assert "1 failed" in result.stdout

    def test_precondition_exits_2(
        self, reconciler: MagicMock, side_effects: tuple[MagicMock, MagicMock]
    ) -> None:
        """A failed precondition gives exit code 2 and records nothing."""
        reconciler.reconcile.side_effect = PreconditionUnmetError(
            "Administrative privileges are required"
        )

        result = runner.invoke(app, ["apply", "--yes"])

        assert result.exit_code == 2
        side_effects[1].assert_not_called()

    def test_json_report(
        self, reconciler: MagicMock, side_effects: tuple[MagicMock, MagicMock]
    ) -> None:
        """--json prints the run report."""
        result = runner.invoke(app, ["apply", "--yes", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["summary"]["success"] == 1
        assert data["validation"]["git"]["status"] == "present"

    def test_no_admin_check(self, side_effects: tuple[MagicMock, MagicMock]) -> None:
        """--no-admin-check disables the elevation precondition."""
        mock = MagicMock()
        mock.reconcile.return_value = _report(SKIPPED)
        with patch("provctl.cli.commands.apply.build_reconciler", return_value=mock) as build:
            result = runner.invoke(app, ["apply", "--yes", "--no-admin-check"])

        assert result.exit_code == 0
        assert build.call_args.kwargs["require_admin"] is False
