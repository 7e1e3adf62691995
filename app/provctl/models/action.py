"""Action models for provisioning operations.

This module defines data structures for representing provisioning
actions (install, uninstall, extension install, config patch, path add),
the ordered plan they form, and their execution results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionKind(str, Enum):
    """Type of provisioning action.

    Attributes:
        INSTALL: Install a package through the package manager.
        UNINSTALL: Remove a package through the package manager.
        INSTALL_EXTENSION: Install an editor extension.
        CONFIG_PATCH: Set a missing key in a configuration artifact.
        PATH_ADD: Append a directory to the search path.
        MAINTENANCE: Package-manager housekeeping (source refresh, upgrade).
    """

    INSTALL = "install"
    UNINSTALL = "uninstall"
    INSTALL_EXTENSION = "install_extension"
    CONFIG_PATCH = "config_patch"
    PATH_ADD = "path_add"
    MAINTENANCE = "maintenance"


class ActionOutcome(str, Enum):
    """Outcome of an executed action.

    Attributes:
        SUCCESS: The action ran and changed the system.
        SKIPPED_ALREADY_SATISFIED: Nothing to do; the target is already in
            the desired state.
        FAILED_AFTER_RETRIES: Every attempt failed, or the action could not
            be attempted at all.
    """

    SUCCESS = "success"
    SKIPPED_ALREADY_SATISFIED = "skipped_already_satisfied"
    FAILED_AFTER_RETRIES = "failed_after_retries"


@dataclass(frozen=True, slots=True)
class Action:
    """A single provisioning step.

    Attributes:
        kind: The type of action.
        target: What the action operates on (package id, extension id,
            ``artifact:key`` or directory).
        rationale: Why this action is in the plan.
    """

    kind: ActionKind
    target: str
    rationale: str | None = None

    def __post_init__(self) -> None:
        """Validate action data after initialization."""
        if not self.target:
            msg = "Action target cannot be empty"
            raise ValueError(msg)

    @property
    def is_destructive(self) -> bool:
        """Check if this action removes something from the system."""
        return self.kind == ActionKind.UNINSTALL

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        result: dict[str, Any] = {"kind": self.kind.value, "target": self.target}
        if self.rationale is not None:
            result["rationale"] = self.rationale
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If kind is invalid.
        """
        return cls(
            kind=ActionKind(data["kind"]),
            target=data["target"],
            rationale=data.get("rationale"),
        )


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result of executing an action.

    Attributes:
        action: The action that was executed.
        outcome: Success, skipped, or failed.
        attempts: Number of times the underlying command was invoked.
        last_error: Captured error output of the last failed attempt.
        message: Optional informational message.
    """

    action: Action
    outcome: ActionOutcome
    attempts: int = 0
    last_error: str | None = None
    message: str | None = None

    @property
    def success(self) -> bool:
        """Check if the action succeeded or had nothing to do."""
        return self.outcome != ActionOutcome.FAILED_AFTER_RETRIES

    @property
    def failed(self) -> bool:
        """Check if the action failed."""
        return self.outcome == ActionOutcome.FAILED_AFTER_RETRIES

    @property
    def skipped(self) -> bool:
        """Check if the action was already satisfied."""
        return self.outcome == ActionOutcome.SKIPPED_ALREADY_SATISFIED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        result: dict[str, Any] = {
            "action": self.action.to_dict(),
            "outcome": self.outcome.value,
            "attempts": self.attempts,
        }
        if self.last_error is not None:
            result["last_error"] = self.last_error
        if self.message is not None:
            result["message"] = self.message
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionResult:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If outcome or kind is invalid.
        """
        return cls(
            action=Action.from_dict(data["action"]),
            outcome=ActionOutcome(data["outcome"]),
            attempts=int(data.get("attempts", 0)),
            last_error=data.get("last_error"),
            message=data.get("message"),
        )


@dataclass(frozen=True, slots=True)
class ActionPlan:
    """Ordered sequence of actions computed from a state diff.

    ``actions`` holds every step in execution order, including steps
    whose target is already satisfied; those are also listed in
    ``satisfied`` and are reported without being executed.

    Attributes:
        actions: All steps, in execution order.
        satisfied: Steps whose target already matches the desired state.
    """

    actions: tuple[Action, ...] = ()
    satisfied: frozenset[Action] = field(default_factory=frozenset)

    @property
    def pending(self) -> tuple[Action, ...]:
        """Steps that still need to run."""
        return tuple(a for a in self.actions if a not in self.satisfied)

    def is_satisfied(self, action: Action) -> bool:
        """Check whether an action's target is already in the desired state."""
        return action in self.satisfied

    def __add__(self, other: ActionPlan) -> ActionPlan:
        return ActionPlan(
            actions=self.actions + other.actions,
            satisfied=self.satisfied | other.satisfied,
        )

    def __len__(self) -> int:
        return len(self.actions)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "pending": len(self.pending),
            "satisfied": len(self.actions) - len(self.pending),
            "actions": [
                {**a.to_dict(), "satisfied": self.is_satisfied(a)} for a in self.actions
            ],
        }


def skipped_result(action: Action, message: str | None = None) -> ActionResult:
    """Create a result for an action whose target is already satisfied.

    Args:
        action: The action that needed no work.
        message: Optional explanation.

    Returns:
        ActionResult with outcome SKIPPED_ALREADY_SATISFIED and zero attempts.
    """
    return ActionResult(
        action=action,
        outcome=ActionOutcome.SKIPPED_ALREADY_SATISFIED,
        attempts=0,
        message=message,
    )


def failed_result(action: Action, error: str, attempts: int = 0) -> ActionResult:
    """Create a failure result.

    Args:
        action: The action that failed.
        error: Description of the failure.
        attempts: Number of attempts made before giving up.

    Returns:
        ActionResult with outcome FAILED_AFTER_RETRIES.
    """
    return ActionResult(
        action=action,
        outcome=ActionOutcome.FAILED_AFTER_RETRIES,
        attempts=attempts,
        last_error=error,
    )
