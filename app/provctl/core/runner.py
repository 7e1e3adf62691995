"""Command execution with bounded retry.

The CommandRunner turns one external command into one ActionResult.
Execution failures never propagate as exceptions: a non-zero exit, a
timeout or an OS error is a failed attempt, and exhausting every
attempt yields FAILED_AFTER_RETRIES.
"""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass

from provctl.models.action import Action, ActionOutcome, ActionResult
from provctl.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)

# Predicate telling the runner a result means "target already in desired state"
NotApplicable = Callable[[CommandResult], bool]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retry bounds for one action.

    Attributes:
        retries: Total number of attempts (at least 1).
        backoff_seconds: Blocking wait between attempts.
        timeout_seconds: Per-attempt timeout.
    """

    retries: int = 3
    backoff_seconds: float = 5.0
    timeout_seconds: float = 1800.0

    def __post_init__(self) -> None:
        """Validate policy bounds after initialization."""
        if self.retries < 1:
            msg = f"Retries must be at least 1, got {self.retries}"
            raise ValueError(msg)
        if self.backoff_seconds < 0:
            msg = f"Backoff cannot be negative, got {self.backoff_seconds}"
            raise ValueError(msg)


class CommandRunner:
    """Runs external commands with retry, backoff and timeout.

    Example:
        >>> runner = CommandRunner(RetryPolicy(retries=2, backoff_seconds=0))
        >>> action = Action(kind=ActionKind.INSTALL, target="git")
        >>> result = runner.run(action, ["choco", "install", "git", "-y"])
        >>> result.outcome
        <ActionOutcome.SUCCESS: 'success'>
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the runner.

        Args:
            policy: Default retry policy. If None, uses RetryPolicy().
            sleep: Blocking wait used between attempts.
        """
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        """Default retry policy for this runner."""
        return self._policy

    def run(
        self,
        action: Action,
        args: list[str],
        *,
        policy: RetryPolicy | None = None,
        not_applicable: NotApplicable | None = None,
    ) -> ActionResult:
        """Execute a command for an action, retrying on failure.

        Args:
            action: The action being executed, recorded in the result.
            args: Command and arguments.
            policy: Override of the runner's default policy.
            not_applicable: Predicate identifying "already satisfied"
                results, which end the action without retrying.

        Returns:
            ActionResult describing the outcome and number of attempts.
        """
        effective = policy or self._policy
        last_error: str | None = None

        for attempt in range(1, effective.retries + 1):
            logger.info(
                "Running %s for %s (attempt %d/%d): %s",
                action.kind.value,
                action.target,
                attempt,
                effective.retries,
                " ".join(args),
            )
            try:
                result = run_command(args, timeout=effective.timeout_seconds)
            except subprocess.TimeoutExpired:
                last_error = f"Timed out after {effective.timeout_seconds:g}s"
            except OSError as e:
                last_error = str(e) or type(e).__name__
            else:
                if not_applicable is not None and not_applicable(result):
                    return ActionResult(
                        action=action,
                        outcome=ActionOutcome.SKIPPED_ALREADY_SATISFIED,
                        attempts=attempt,
                        message=_first_line(result.output) or "Not applicable",
                    )
                if result.success:
                    return ActionResult(
                        action=action,
                        outcome=ActionOutcome.SUCCESS,
                        attempts=attempt,
                        message=_first_line(result.stdout),
                    )
                last_error = (
                    result.stderr.strip()
                    or result.stdout.strip()
                    or f"Exited with code {result.returncode}"
                )

            if attempt < effective.retries:
                logger.warning(
                    "%s %s failed (attempt %d/%d), retrying in %gs: %s",
                    action.kind.value,
                    action.target,
                    attempt,
                    effective.retries,
                    effective.backoff_seconds,
                    _first_line(last_error),
                )
                self._sleep(effective.backoff_seconds)

        logger.warning(
            "%s %s failed after %d attempt(s)",
            action.kind.value,
            action.target,
            effective.retries,
        )
        return ActionResult(
            action=action,
            outcome=ActionOutcome.FAILED_AFTER_RETRIES,
            attempts=effective.retries,
            last_error=last_error,
        )


def _first_line(text: str | None) -> str | None:
    """Return the first non-empty line of text, or None."""
    if not text:
        return None
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return None
