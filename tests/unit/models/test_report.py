"""Unit tests for run report and probe outcome models."""

import json
from datetime import UTC, datetime

import pytest

from provctl.models.action import (
    Action,
    ActionKind,
    ActionOutcome,
    ActionResult,
    failed_result,
    skipped_result,
)
from provctl.models.report import ProbeOutcome, ProbeStatus, RunReport


@pytest.fixture
def report() -> RunReport:
    """Report with one result of each outcome."""
    return RunReport(
        started=datetime(2026, 1, 26, 14, 30, tzinfo=UTC),
        finished=datetime(2026, 1, 26, 14, 32, 30, tzinfo=UTC),
        flags=("sql_tools",),
        results=(
            ActionResult(Action(ActionKind.INSTALL, "git"), ActionOutcome.SUCCESS, attempts=1),
            skipped_result(Action(ActionKind.INSTALL, "python"), "Already installed"),
            failed_result(Action(ActionKind.INSTALL, "tflint"), "exit 1", attempts=3),
        ),
        validation={
            "git": ProbeOutcome.present("git version 2.45.1"),
            "tflint": ProbeOutcome.absent(),
        },
        search_path=("C:\\Windows", "C:\\Program Files\\Git\\cmd"),
    )


class TestProbeOutcome:
    """Tests for ProbeOutcome."""

    def test_constructors(self) -> None:
        """Class constructors set status and the matching detail."""
        assert ProbeOutcome.present("1.0").version == "1.0"
        assert ProbeOutcome.absent().status == ProbeStatus.ABSENT
        error = ProbeOutcome.error("Exited with code 2")
        assert error.status == ProbeStatus.ERROR
        assert error.message == "Exited with code 2"

    def test_to_dict_absent_has_only_status(self) -> None:
        """An absent outcome serializes to its status alone."""
        assert ProbeOutcome.absent().to_dict() == {"status": "absent"}


class TestRunReport:
    """Tests for RunReport."""

    def test_failed_and_has_failures(self, report: RunReport) -> None:
        """failed lists only failed results."""
        assert report.has_failures is True
        assert [r.action.target for r in report.failed] == ["tflint"]

    def test_counts(self, report: RunReport) -> None:
        """count() tallies results per outcome."""
        assert report.count(ActionOutcome.SUCCESS) == 1
        assert report.count(ActionOutcome.SKIPPED_ALREADY_SATISFIED) == 1
        assert report.count(ActionOutcome.FAILED_AFTER_RETRIES) == 1

    def test_duration(self, report: RunReport) -> None:
        """duration_seconds is finished minus started."""
        assert report.duration_seconds == 150.0

    def test_to_dict_includes_summary(self, report: RunReport) -> None:
        """to_dict() includes per-outcome counts."""
        data = report.to_dict()

        assert data["summary"] == {
            "success": 1,
            "skipped_already_satisfied": 1,
            "failed_after_retries": 1,
        }
        assert data["validation"]["tflint"] == {"status": "absent"}

    def test_json_line_roundtrip(self, report: RunReport) -> None:
        """A report survives a JSON line with timestamps and outcomes intact."""
        line = report.to_json_line()

        assert "\n" not in line
        assert RunReport.from_json_line(line) == report

    def test_from_json_line_invalid(self) -> None:
        """Malformed lines raise instead of producing a partial report."""
        with pytest.raises(json.JSONDecodeError):
            RunReport.from_json_line("{not json")
        with pytest.raises(KeyError):
            RunReport.from_json_line('{"finished": "2026-01-26T14:30:00+00:00"}')
