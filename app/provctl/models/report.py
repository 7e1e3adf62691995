"""Run report and probe outcome models.

This module defines the auditable record produced by one reconcile run,
and the classification of a post-install version probe.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from provctl.models.action import ActionOutcome, ActionResult


class ProbeStatus(str, Enum):
    """Classification of a validation probe.

    Attributes:
        PRESENT: Command found and reported a version.
        ABSENT: Command not found on the effective search path.
        ERROR: Command found but failed when executed.
    """

    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ProbeOutcome:
    """Outcome of a single validation probe.

    Attributes:
        status: Present, absent, or error.
        version: First line of version output (PRESENT only).
        message: Error description (ERROR only).
    """

    status: ProbeStatus
    version: str | None = None
    message: str | None = None

    @classmethod
    def present(cls, version: str) -> ProbeOutcome:
        return cls(status=ProbeStatus.PRESENT, version=version)

    @classmethod
    def absent(cls) -> ProbeOutcome:
        return cls(status=ProbeStatus.ABSENT)

    @classmethod
    def error(cls, message: str) -> ProbeOutcome:
        return cls(status=ProbeStatus.ERROR, message=message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        result: dict[str, Any] = {"status": self.status.value}
        if self.version is not None:
            result["version"] = self.version
        if self.message is not None:
            result["message"] = self.message
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProbeOutcome:
        """Deserialize from dictionary."""
        return cls(
            status=ProbeStatus(data["status"]),
            version=data.get("version"),
            message=data.get("message"),
        )


@dataclass(frozen=True, slots=True)
class RunReport:
    """Immutable record of one reconcile run.

    Attributes:
        started: When the run entered the reconciler.
        finished: When validation completed.
        flags: Names of the feature flags that were set.
        results: Every action result, in execution order.
        validation: Probe name to outcome.
        search_path: Effective search path after path additions; the
            caller commits it to the environment.
    """

    started: datetime
    finished: datetime
    flags: tuple[str, ...] = ()
    results: tuple[ActionResult, ...] = ()
    validation: dict[str, ProbeOutcome] = field(default_factory=lambda: {})
    search_path: tuple[str, ...] = ()

    @property
    def failed(self) -> tuple[ActionResult, ...]:
        """Results that failed after retries."""
        return tuple(r for r in self.results if r.failed)

    @property
    def has_failures(self) -> bool:
        """Check if any action failed."""
        return any(r.failed for r in self.results)

    @property
    def duration_seconds(self) -> float:
        """Wall-clock duration of the run."""
        return (self.finished - self.started).total_seconds()

    def count(self, outcome: ActionOutcome) -> int:
        """Count results with the given outcome."""
        return sum(1 for r in self.results if r.outcome == outcome)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "started": self.started.isoformat(),
            "finished": self.finished.isoformat(),
            "flags": list(self.flags),
            "summary": {outcome.value: self.count(outcome) for outcome in ActionOutcome},
            "results": [r.to_dict() for r in self.results],
            "validation": {name: p.to_dict() for name, p in self.validation.items()},
            "search_path": list(self.search_path),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunReport:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If a timestamp or enum value is invalid.
        """
        return cls(
            started=datetime.fromisoformat(data["started"]),
            finished=datetime.fromisoformat(data["finished"]),
            flags=tuple(data.get("flags", ())),
            results=tuple(ActionResult.from_dict(r) for r in data.get("results", ())),
            validation={
                name: ProbeOutcome.from_dict(p) for name, p in data.get("validation", {}).items()
            },
            search_path=tuple(data.get("search_path", ())),
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> RunReport:
        """Deserialize from a JSON line.

        Raises:
            json.JSONDecodeError: If the line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        return cls.from_dict(json.loads(line))
