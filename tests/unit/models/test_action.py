"""Unit tests for action models.

Tests for Action, ActionResult, ActionPlan and the result helpers.
"""

import pytest

from provctl.models.action import (
    Action,
    ActionKind,
    ActionOutcome,
    ActionPlan,
    ActionResult,
    failed_result,
    skipped_result,
)


class TestAction:
    """Tests for Action dataclass."""

    def test_create_action(self) -> None:
        """Action can be created with kind, target and rationale."""
        action = Action(ActionKind.INSTALL, "git", "In catalogue but not installed")

        assert action.kind == ActionKind.INSTALL
        assert action.target == "git"
        assert action.rationale == "In catalogue but not installed"

    def test_empty_target_raises(self) -> None:
        """Action rejects an empty target."""
        with pytest.raises(ValueError, match="target cannot be empty"):
            Action(ActionKind.INSTALL, "")

    def test_is_destructive(self) -> None:
        """Only uninstall actions are destructive."""
        assert Action(ActionKind.UNINSTALL, "git").is_destructive is True
        assert Action(ActionKind.INSTALL, "git").is_destructive is False
        assert Action(ActionKind.CONFIG_PATCH, "sqlfluff:sqlfluff.dialect").is_destructive is False

    def test_action_is_immutable(self) -> None:
        """Action is frozen."""
        action = Action(ActionKind.INSTALL, "git")
        with pytest.raises(AttributeError):
            action.target = "other"  # type: ignore[misc]

    def test_to_dict_omits_missing_rationale(self) -> None:
        """to_dict() leaves out a rationale that was never set."""
        assert Action(ActionKind.PATH_ADD, "C:\\Tools").to_dict() == {
            "kind": "path_add",
            "target": "C:\\Tools",
        }

    def test_from_dict_invalid_kind(self) -> None:
        """from_dict() rejects unknown kinds."""
        with pytest.raises(ValueError):
            Action.from_dict({"kind": "reboot", "target": "host"})


class TestActionResult:
    """Tests for ActionResult dataclass."""

    def test_success_property(self) -> None:
        """Skipped results count as successful; failures do not."""
        action = Action(ActionKind.INSTALL, "git")

        assert ActionResult(action, ActionOutcome.SUCCESS, attempts=1).success is True
        assert skipped_result(action).success is True
        assert failed_result(action, "boom").success is False

    def test_skipped_result_has_zero_attempts(self) -> None:
        """skipped_result() never claims an attempt."""
        result = skipped_result(Action(ActionKind.INSTALL, "git"), "Already installed")

        assert result.outcome == ActionOutcome.SKIPPED_ALREADY_SATISFIED
        assert result.attempts == 0
        assert result.skipped is True
        assert result.message == "Already installed"

    def test_failed_result_records_error(self) -> None:
        """failed_result() keeps the error and attempt count."""
        result = failed_result(Action(ActionKind.INSTALL, "git"), "exit 1", attempts=3)

        assert result.failed is True
        assert result.last_error == "exit 1"
        assert result.attempts == 3

    def test_dict_roundtrip(self) -> None:
        """A result survives serialization with every field intact."""
        result = ActionResult(
            action=Action(ActionKind.INSTALL_EXTENSION, "ms-mssql.mssql", "SQL tools"),
            outcome=ActionOutcome.FAILED_AFTER_RETRIES,
            attempts=3,
            last_error="network unreachable",
        )

        assert ActionResult.from_dict(result.to_dict()) == result


class TestActionPlan:
    """Tests for ActionPlan dataclass."""

    @pytest.fixture
    def plan(self) -> ActionPlan:
        git = Action(ActionKind.INSTALL, "git")
        tflint = Action(ActionKind.INSTALL, "tflint")
        return ActionPlan(actions=(git, tflint), satisfied=frozenset({git}))

    def test_pending_excludes_satisfied(self, plan: ActionPlan) -> None:
        """pending lists only unsatisfied steps, in order."""
        assert [a.target for a in plan.pending] == ["tflint"]

    def test_len_counts_all_steps(self, plan: ActionPlan) -> None:
        """len() includes satisfied steps."""
        assert len(plan) == 2

    def test_satisfied_is_per_kind(self) -> None:
        """The same target under another kind is not satisfied."""
        install = Action(ActionKind.INSTALL, "git")
        uninstall = Action(ActionKind.UNINSTALL, "git")
        plan = ActionPlan(actions=(install, uninstall), satisfied=frozenset({install}))

        assert plan.is_satisfied(install) is True
        assert plan.is_satisfied(uninstall) is False

    def test_add_concatenates(self, plan: ActionPlan) -> None:
        """Adding plans keeps order and merges satisfied sets."""
        extra = Action(ActionKind.PATH_ADD, "/opt/bin")
        combined = plan + ActionPlan(actions=(extra,), satisfied=frozenset({extra}))

        assert [a.target for a in combined.actions] == ["git", "tflint", "/opt/bin"]
        assert combined.pending == (Action(ActionKind.INSTALL, "tflint"),)

    def test_to_dict_summary(self, plan: ActionPlan) -> None:
        """to_dict() reports pending and satisfied counts."""
        data = plan.to_dict()

        assert data["pending"] == 1
        assert data["satisfied"] == 1
        assert data["actions"][0] == {"kind": "install", "target": "git", "satisfied": True}
