"""Unit tests for collaborator factories and history recording."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

from provctl.core.catalog import CatalogResolver
from provctl.core.executor import build_reconciler, build_runner, record_run_to_history
from provctl.core.settings import RunnerSettings, Settings
from provctl.models.report import RunReport

REPORT = RunReport(
    started=datetime(2026, 1, 26, 14, 30, tzinfo=UTC),
    finished=datetime(2026, 1, 26, 14, 31, tzinfo=UTC),
)


class TestFactories:
    """Tests for build_runner() and build_reconciler()."""

    def test_runner_uses_settings(self) -> None:
        """The retry policy comes from the runner settings."""
        settings = Settings(runner=RunnerSettings(retries=5, backoff_seconds=2, timeout_seconds=60))

        policy = build_runner(settings).policy

        assert (policy.retries, policy.backoff_seconds, policy.timeout_seconds) == (5, 2, 60)

    def test_reconciler_admin_override(self, resolver: CatalogResolver) -> None:
        """An explicit require_admin wins over the settings."""
        reconciler = build_reconciler(Settings(require_admin=True), resolver, require_admin=False)

        assert reconciler.resolver is resolver
        assert reconciler._require_admin is False

    def test_reconciler_admin_from_settings(self, resolver: CatalogResolver) -> None:
        """Without an override the settings decide."""
        reconciler = build_reconciler(Settings(require_admin=True), resolver)

        assert reconciler._require_admin is True


class TestRecordRunToHistory:
    """Tests for record_run_to_history()."""

    @patch("provctl.core.executor.StateManager")
    def test_records(self, mock_state_cls: MagicMock) -> None:
        """The report is appended when history is enabled."""
        record_run_to_history(REPORT, Settings())

        mock_state_cls.return_value.record_run.assert_called_once_with(REPORT)

    @patch("provctl.core.executor.StateManager")
    def test_disabled(self, mock_state_cls: MagicMock) -> None:
        """Nothing is written when history is disabled."""
        record_run_to_history(REPORT, Settings(record_history=False))

        mock_state_cls.assert_not_called()

    @patch("provctl.core.executor.print_warning")
    @patch("provctl.core.executor.StateManager")
    def test_failure_is_a_warning(self, mock_state_cls: MagicMock, mock_warn: MagicMock) -> None:
        """A write failure warns instead of raising."""
        mock_state_cls.return_value.record_run.side_effect = OSError("read-only filesystem")

        record_run_to_history(REPORT, Settings())

        mock_warn.assert_called_once()
        assert "read-only filesystem" in mock_warn.call_args[0][0]
