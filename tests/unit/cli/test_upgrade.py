"""Unit tests for the upgrade and validate commands."""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from provctl.cli.main import app
from provctl.core.errors import PreconditionUnmetError
from provctl.models.action import Action, ActionKind, ActionOutcome, ActionResult
from provctl.models.report import ProbeOutcome

runner = CliRunner()

pytestmark = pytest.mark.usefixtures("isolated_dirs")


def _maintenance(target: str, outcome: ActionOutcome = ActionOutcome.SUCCESS) -> ActionResult:
    return ActionResult(Action(ActionKind.MAINTENANCE, target), outcome, attempts=1)


class TestUpgradeCommand:
    """Tests for provctl upgrade."""

    @patch("provctl.cli.commands.upgrade.is_admin", return_value=True)
    @patch("provctl.cli.commands.upgrade.ChocolateyPackageManager")
    def test_runs_both_steps(self, mock_cls: MagicMock, _admin: MagicMock) -> None:
        """Sources are refreshed, then every package is upgraded."""
        manager = mock_cls.return_value
        manager.is_available.return_value = True
        manager.update_sources.return_value = _maintenance("sources")
        manager.upgrade_all.return_value = _maintenance("all")

        result = runner.invoke(app, ["upgrade", "--yes"])

        assert result.exit_code == 0
        assert "Upgrade completed." in result.stdout
        manager.update_sources.assert_called_once()
        manager.upgrade_all.assert_called_once()

    @patch("provctl.cli.commands.upgrade.is_admin", return_value=True)
    @patch("provctl.cli.commands.upgrade.ChocolateyPackageManager")
    def test_failure_still_runs_upgrade(self, mock_cls: MagicMock, _admin: MagicMock) -> None:
        """A failed refresh does not stop the upgrade; the exit code is 1."""
        manager = mock_cls.return_value
        manager.is_available.return_value = True
        manager.update_sources.return_value = _maintenance(
            "sources", ActionOutcome.FAILED_AFTER_RETRIES
        )
        manager.upgrade_all.return_value = _maintenance("all")

        result = runner.invoke(app, ["upgrade", "--yes"])

        assert result.exit_code == 1
        manager.upgrade_all.assert_called_once()

    @patch("provctl.cli.commands.upgrade.is_admin", return_value=False)
    @patch("provctl.cli.commands.upgrade.ChocolateyPackageManager")
    def test_requires_admin(self, mock_cls: MagicMock, _admin: MagicMock) -> None:
        """Without elevation the command exits 2 before doing anything."""
        result = runner.invoke(app, ["upgrade", "--yes"])

        assert result.exit_code == 2
        mock_cls.return_value.upgrade_all.assert_not_called()

    @patch("provctl.cli.commands.upgrade.is_admin", return_value=False)
    @patch("provctl.cli.commands.upgrade.ChocolateyPackageManager")
    def test_dry_run(self, mock_cls: MagicMock, _admin: MagicMock) -> None:
        """--dry-run builds a simulating manager and skips the prompt."""
        manager = mock_cls.return_value
        manager.is_available.return_value = True
        manager.update_sources.return_value = _maintenance("sources")
        manager.upgrade_all.return_value = _maintenance("all")

        result = runner.invoke(app, ["upgrade", "--dry-run", "--no-admin-check"])

        assert result.exit_code == 0
        assert mock_cls.call_args.kwargs["dry_run"] is True

    @patch("provctl.cli.commands.upgrade.is_admin", return_value=True)
    @patch("provctl.cli.commands.upgrade.ChocolateyPackageManager")
    def test_unavailable(self, mock_cls: MagicMock, _admin: MagicMock) -> None:
        """A missing package manager exits 2."""
        mock_cls.return_value.is_available.return_value = False

        result = runner.invoke(app, ["upgrade", "--yes"])

        assert result.exit_code == 2

    @patch("provctl.cli.commands.upgrade.check_preconditions")
    @patch("provctl.cli.commands.upgrade.ChocolateyPackageManager")
    def test_uses_shared_precondition_check(
        self, mock_cls: MagicMock, mock_check: MagicMock
    ) -> None:
        """upgrade applies the same preconditions as apply."""
        mock_check.side_effect = PreconditionUnmetError("elevation required")

        result = runner.invoke(app, ["upgrade", "--yes", "--no-admin-check"])

        assert result.exit_code == 2
        assert mock_check.call_args.args == (mock_cls.return_value,)
        assert mock_check.call_args.kwargs["require_admin"] is False
        mock_cls.return_value.update_sources.assert_not_called()


class TestValidateCommand:
    """Tests for provctl validate."""

    @patch("provctl.cli.commands.validate.Validator")
    def test_json(self, mock_cls: MagicMock) -> None:
        """--json prints one outcome per probe."""
        mock_cls.return_value.validate.return_value = {
            "git": ProbeOutcome.present("git version 2.45.1"),
            "tflint": ProbeOutcome.absent(),
        }

        result = runner.invoke(app, ["validate", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["git"] == {"status": "present", "version": "git version 2.45.1"}
        assert data["tflint"] == {"status": "absent"}

    @patch("provctl.cli.commands.validate.Validator")
    def test_absent_tools_do_not_fail(self, mock_cls: MagicMock) -> None:
        """Absent or erroring tools never change the exit code."""
        mock_cls.return_value.validate.return_value = {
            "tflint": ProbeOutcome.absent(),
            "docker": ProbeOutcome.error("daemon not running"),
        }

        result = runner.invoke(app, ["validate"])

        assert result.exit_code == 0
        assert "tflint" in result.stdout

    @patch("provctl.cli.commands.validate.Validator")
    def test_probes_from_catalogue(self, mock_cls: MagicMock) -> None:
        """The probe battery comes from the catalogue."""
        mock_cls.return_value.validate.return_value = {}

        runner.invoke(app, ["validate"])

        probes = mock_cls.return_value.validate.call_args[0][0]
        assert "git" in [p.name for p in probes]
