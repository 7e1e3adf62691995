"""Post-install validation probes.

Each probe is a version query. Validation is purely observational: a
missing command is ABSENT, a failing one is ERROR, and no probe outcome
ever stops the remaining probes.
"""

import logging
import shutil
import subprocess
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from provctl.core.search_path import join_search_path
from provctl.models.report import ProbeOutcome
from provctl.utils.shell import run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Probe:
    """A named version command.

    Attributes:
        name: Probe name used as the key in the validation mapping.
        command: Command and arguments; the first element is looked up on
            the search path.
    """

    name: str
    command: tuple[str, ...]

    def __post_init__(self) -> None:
        """Validate probe data after initialization."""
        if not self.command:
            msg = f"Probe {self.name!r} has no command"
            raise ValueError(msg)


class Validator:
    """Runs a battery of probes and classifies each outcome."""

    def __init__(self, timeout_seconds: float = 60.0) -> None:
        """Initialize the validator.

        Args:
            timeout_seconds: Per-probe timeout.
        """
        self._timeout = timeout_seconds

    def validate(
        self,
        probes: Iterable[Probe],
        search_path: Sequence[str] | None = None,
    ) -> dict[str, ProbeOutcome]:
        """Run every probe.

        Args:
            probes: Probes to run, in order.
            search_path: Effective search path entries. If None, uses the
                process PATH.

        Returns:
            Probe name to outcome, in probe order.
        """
        path = join_search_path(search_path) if search_path is not None else None
        return {probe.name: self._run_probe(probe, path) for probe in probes}

    def _run_probe(self, probe: Probe, path: str | None) -> ProbeOutcome:
        """Run a single probe."""
        executable = shutil.which(probe.command[0], path=path)
        if executable is None:
            logger.debug("Probe %s: %s not found", probe.name, probe.command[0])
            return ProbeOutcome.absent()

        try:
            result = run_command([executable, *probe.command[1:]], timeout=self._timeout)
        except subprocess.TimeoutExpired:
            return ProbeOutcome.error(f"Timed out after {self._timeout:g}s")
        except OSError as e:
            return ProbeOutcome.error(str(e) or type(e).__name__)

        if not result.success:
            message = f"Exited with code {result.returncode}"
            detail = result.stderr.strip() or result.stdout.strip()
            if detail:
                message = f"{message}: {detail}"
            return ProbeOutcome.error(message)

        version = next((ln.strip() for ln in result.output.splitlines() if ln.strip()), "")
        logger.debug("Probe %s: %s", probe.name, version)
        return ProbeOutcome.present(version)
