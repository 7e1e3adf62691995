"""Collaborator factories and history recording.

Provides the functions shared by the ``apply``, ``plan`` and ``upgrade``
CLI commands to wire real collaborators together from user settings.
"""

from __future__ import annotations

import logging

from provctl.core.catalog import CatalogResolver
from provctl.core.filesystem import LocalFileSystem
from provctl.core.reconciler import Reconciler
from provctl.core.runner import CommandRunner, RetryPolicy
from provctl.core.settings import Settings
from provctl.core.state import StateManager
from provctl.extensions.vscode import VSCodeExtensionHost
from provctl.managers.chocolatey import ChocolateyPackageManager
from provctl.models.report import RunReport
from provctl.utils.formatting import print_warning

logger = logging.getLogger(__name__)


def build_runner(settings: Settings) -> CommandRunner:
    """Create a CommandRunner from the runner settings."""
    policy = RetryPolicy(
        retries=settings.runner.retries,
        backoff_seconds=settings.runner.backoff_seconds,
        timeout_seconds=settings.runner.timeout_seconds,
    )
    return CommandRunner(policy)


def build_reconciler(
    settings: Settings,
    resolver: CatalogResolver,
    *,
    require_admin: bool | None = None,
) -> Reconciler:
    """Wire a Reconciler to the host's package manager, editor and filesystem.

    Args:
        settings: Loaded user settings.
        resolver: Catalogue resolver to provision from.
        require_admin: Override for ``settings.require_admin``.

    Returns:
        Reconciler ready to plan or reconcile.
    """
    runner = build_runner(settings)
    return Reconciler(
        ChocolateyPackageManager(runner),
        VSCodeExtensionHost(runner),
        LocalFileSystem(),
        runner=runner,
        resolver=resolver,
        require_admin=settings.require_admin if require_admin is None else require_admin,
    )


def record_run_to_history(report: RunReport, settings: Settings) -> None:
    """Append a run report to the history file if enabled.

    A failure to record is reported as a warning and never fails the run.

    Args:
        report: Report of the completed run.
        settings: Loaded user settings.
    """
    if not settings.record_history:
        logger.debug("History recording disabled; not recording run")
        return

    try:
        StateManager().record_run(report)
    except (OSError, RuntimeError) as e:
        print_warning(f"Failed to record run history: {e}")
