"""Search path management.

The process search path is treated as an explicit ordered value: it is
passed into ensure(), a new value is returned, and the caller commits
it to the environment exactly once. Additions are append-only.

Candidate directories are best-effort guesses about where installers
put their executables; most of them will not exist on a given machine,
and that is expected.
"""

import logging
import os
from collections.abc import Callable, Iterable, Sequence

from provctl.core.runner import CommandRunner, RetryPolicy
from provctl.models.action import Action, ActionKind
from provctl.models.catalog import PathProbe

logger = logging.getLogger(__name__)

# Discovery probes are quick, read-only queries
_PROBE_POLICY = RetryPolicy(retries=1, backoff_seconds=0.0, timeout_seconds=30.0)


def _normalize(entry: str, case_insensitive: bool) -> str:
    """Normalize a path entry for containment checks."""
    stripped = entry.strip().rstrip("\\/") or entry.strip()
    return stripped.casefold() if case_insensitive else stripped


def ensure(
    candidate_dirs: Sequence[str],
    current_path: Sequence[str],
    exists: Callable[[str], bool] = os.path.isdir,
    case_insensitive: bool | None = None,
) -> list[str]:
    """Append existing, not-yet-present candidates to a search path.

    Args:
        candidate_dirs: Directories to add, in order.
        current_path: The current ordered search path entries.
        exists: Directory existence check.
        case_insensitive: Compare entries case-insensitively. If None,
            follows the host (True on Windows).

    Returns:
        ``current_path`` followed by each new candidate exactly once, in
        candidate order. Existing entries are never reordered or removed.
    """
    if case_insensitive is None:
        case_insensitive = os.name == "nt"

    result = list(current_path)
    seen = {_normalize(entry, case_insensitive) for entry in result if entry.strip()}

    for candidate in candidate_dirs:
        key = _normalize(candidate, case_insensitive)
        if not key or key in seen:
            continue
        if not exists(candidate):
            logger.debug("Skipping search path candidate that does not exist: %s", candidate)
            continue
        result.append(candidate)
        seen.add(key)

    return result


def discover(probes: Iterable[PathProbe], runner: CommandRunner) -> list[str]:
    """Run discovery probes and collect the directories they report.

    Each probe prints a directory on its first output line. Probes that
    fail are logged and ignored.

    Args:
        probes: Discovery commands from the catalogue.
        runner: CommandRunner used to execute them.

    Returns:
        Reported directories, in probe order.
    """
    found: list[str] = []
    for probe in probes:
        action = Action(kind=ActionKind.PATH_ADD, target=probe.name, rationale="Discovery probe")
        result = runner.run(action, list(probe.command), policy=_PROBE_POLICY)
        if result.failed or not result.message:
            logger.debug("Path probe %s found nothing: %s", probe.name, result.last_error)
            continue
        found.append(result.message)
    return found


def split_search_path(value: str | None, separator: str = os.pathsep) -> list[str]:
    """Split a PATH-style value into entries, dropping empty ones."""
    if not value:
        return []
    return [entry for entry in value.split(separator) if entry.strip()]


def join_search_path(entries: Sequence[str], separator: str = os.pathsep) -> str:
    """Join entries into a PATH-style value."""
    return separator.join(entries)


def current_search_path() -> list[str]:
    """Return the process search path as ordered entries."""
    return split_search_path(os.environ.get("PATH"))


def commit_search_path(entries: Sequence[str]) -> None:
    """Set the process search path.

    Persisting the value beyond this process is up to the caller.
    """
    os.environ["PATH"] = join_search_path(entries)
