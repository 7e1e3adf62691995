"""Run history persistence.

This module provides the StateManager class for appending and reading
run reports in a JSONL file.
"""

import json
import logging
from pathlib import Path

from provctl.core.paths import ensure_dir, get_state_dir
from provctl.models.report import RunReport

logger = logging.getLogger(__name__)


class StateManager:
    """Manages the run history in a JSONL file.

    Storage location: ~/.local/state/provctl/runs.jsonl

    Each line is one complete RunReport. The format allows append-only
    writes and line-by-line recovery when a line is corrupt.

    Attributes:
        state_dir: Directory containing the history file.
    """

    HISTORY_FILENAME = "runs.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize StateManager.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/provctl
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to the runs.jsonl file."""
        return self._state_dir / self.HISTORY_FILENAME

    def record_run(self, report: RunReport) -> None:
        """Append a run report to the history file.

        Args:
            report: The report to record.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        ensure_dir(self._state_dir, "state")

        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(report.to_json_line() + "\n")
            f.flush()

    def get_runs(self, limit: int | None = None) -> list[RunReport]:
        """Read recorded runs, newest first.

        Args:
            limit: Maximum number of runs to return. If None, returns all.

        Returns:
            List of RunReport, newest first. Empty if no history exists.
        """
        if not self.history_path.exists():
            return []

        runs: list[RunReport] = []

        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    runs.append(RunReport.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, str(e))

        runs.reverse()

        if limit is not None:
            return runs[:limit]
        return runs
