"""Reconciliation of desired and observed state.

The Reconciler runs one linear pass:

    ResolveDesired -> FetchObserved -> DiffPackages -> ExecutePackageActions
    -> DiffExtensions -> ExecuteExtensionActions -> ApplyConfigEdits
    -> EnsurePath -> Validate -> Done

Actions run one at a time in plan order. A failed action is recorded
and the pass continues; only PreconditionUnmetError, raised before any
state is mutated, aborts a run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import UTC, datetime
from enum import Enum
from typing import TypeVar

from provctl.core import search_path
from provctl.core.catalog import CatalogResolver
from provctl.core.config_patcher import ConfigPatcher
from provctl.core.diff import (
    config_actions,
    diff_extensions,
    diff_packages,
    diff_removals,
    path_actions,
)
from provctl.core.errors import PreconditionUnmetError
from provctl.core.filesystem import FileSystem
from provctl.core.runner import CommandRunner
from provctl.core.validator import Validator
from provctl.extensions.base import ExtensionHost
from provctl.managers.base import PackageManager
from provctl.models.action import (
    Action,
    ActionOutcome,
    ActionPlan,
    ActionResult,
    failed_result,
    skipped_result,
)
from provctl.models.flags import FeatureFlags
from provctl.models.report import RunReport
from provctl.models.state import DesiredState, ObservedState
from provctl.utils.shell import is_admin

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
T = TypeVar("T")


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


def check_preconditions(
    package_manager: PackageManager,
    *,
    require_admin: bool = True,
    admin_check: Callable[[], bool] = is_admin,
) -> None:
    """Verify that mutating the workstation can start.

    Args:
        package_manager: Package manager that must be available.
        require_admin: Whether administrative rights are required.
        admin_check: Elevation check used when require_admin is set.

    Raises:
        PreconditionUnmetError: If administrative rights are required
            but missing, or the package manager is unavailable.
    """
    if require_admin and not admin_check():
        msg = "Administrative privileges are required; re-run from an elevated shell"
        raise PreconditionUnmetError(msg)
    if not package_manager.is_available():
        msg = f"Package manager {package_manager.name} is not available on this system"
        raise PreconditionUnmetError(msg)


class Stage(str, Enum):
    """Stages of a reconcile pass, in order."""

    RESOLVE_DESIRED = "resolve_desired"
    FETCH_OBSERVED = "fetch_observed"
    DIFF_PACKAGES = "diff_packages"
    EXECUTE_PACKAGE_ACTIONS = "execute_package_actions"
    DIFF_EXTENSIONS = "diff_extensions"
    EXECUTE_EXTENSION_ACTIONS = "execute_extension_actions"
    APPLY_CONFIG_EDITS = "apply_config_edits"
    ENSURE_PATH = "ensure_path"
    VALIDATE = "validate"
    DONE = "done"


class Reconciler:
    """Brings the workstation to the state described by a set of flags.

    The reconciler holds no state between runs; running it again is the
    repair and upgrade mechanism.

    Example:
        >>> runner = CommandRunner()
        >>> reconciler = Reconciler(
        ...     ChocolateyPackageManager(runner),
        ...     VSCodeExtensionHost(runner),
        ...     LocalFileSystem(),
        ...     runner=runner,
        ... )
        >>> report = reconciler.reconcile(FeatureFlags(sql_tools=True))
        >>> report.has_failures
        False
    """

    def __init__(
        self,
        package_manager: PackageManager,
        extension_host: ExtensionHost,
        file_system: FileSystem,
        *,
        runner: CommandRunner | None = None,
        clock: Clock = utc_now,
        resolver: CatalogResolver | None = None,
        validator: Validator | None = None,
        tokens: dict[str, str] | None = None,
        require_admin: bool = True,
        admin_check: Callable[[], bool] = is_admin,
    ) -> None:
        """Initialize the reconciler.

        Args:
            package_manager: Package manager collaborator.
            extension_host: Editor extension host collaborator.
            file_system: Filesystem collaborator for config and path checks.
            runner: CommandRunner for discovery probes.
            clock: Source of report timestamps.
            resolver: Catalogue resolver. If None, uses the bundled catalogue.
            validator: Probe runner. If None, a default Validator is used.
            tokens: Path token substitutions. If None, uses the host's.
            require_admin: Refuse to run without administrative rights.
            admin_check: Elevation check used when require_admin is set.
        """
        self._packages = package_manager
        self._extensions = extension_host
        self._fs = file_system
        self._runner = runner or CommandRunner()
        self._clock = clock
        self._resolver = resolver or CatalogResolver()
        self._validator = validator or Validator()
        self._tokens = tokens
        self._require_admin = require_admin
        self._admin_check = admin_check
        self._patcher = ConfigPatcher(file_system, tokens)

    @property
    def resolver(self) -> CatalogResolver:
        """Catalogue resolver used by this reconciler."""
        return self._resolver

    def check_preconditions(self, *, admin: bool = True) -> None:
        """Verify the run can start.

        Args:
            admin: Also check for administrative rights (when required).

        Raises:
            PreconditionUnmetError: If administrative rights are required
                but missing, or the package manager is unavailable.
        """
        check_preconditions(
            self._packages,
            require_admin=admin and self._require_admin,
            admin_check=self._admin_check,
        )

    def fetch_observed(self, *, include_extensions: bool = True) -> ObservedState:
        """Query installed packages and extensions.

        An unreachable extension host degrades to ``extensions_available``
        False; an unreadable package manager is fatal.

        Raises:
            PreconditionUnmetError: If installed packages cannot be listed.
        """
        try:
            packages = self._packages.list_installed()
        except RuntimeError as e:
            raise PreconditionUnmetError(str(e)) from e

        if not include_extensions:
            return ObservedState(packages=frozenset(packages))

        if not self._extensions.is_available():
            logger.warning(
                "Extension host %s is not available; extension steps will be skipped",
                self._extensions.name,
            )
            return ObservedState(packages=frozenset(packages), extensions_available=False)

        try:
            extensions = self._extensions.list_installed()
        except RuntimeError as e:
            logger.warning("Could not list extensions, skipping extension steps: %s", e)
            return ObservedState(packages=frozenset(packages), extensions_available=False)

        return ObservedState(packages=frozenset(packages), extensions=frozenset(extensions))

    def plan(self, flags: FeatureFlags, current_path: Sequence[str] | None = None) -> ActionPlan:
        """Compute the full action plan without executing anything.

        Args:
            flags: Feature flags for this run.
            current_path: Search path entries. If None, uses the process PATH.

        Returns:
            Packages, then extensions, then config, then path steps.
        """
        self.check_preconditions(admin=False)
        desired = self._resolver.resolve(flags)
        observed = self.fetch_observed(include_extensions=bool(desired.extensions))

        plan = self._package_plan(flags, desired, observed)
        plan += diff_extensions(desired, observed)
        plan += config_actions(desired.config_edits)
        existing, _new_path, added = self._compute_path(flags, current_path)
        return plan + path_actions(existing, added)

    def reconcile(
        self,
        flags: FeatureFlags,
        current_path: Sequence[str] | None = None,
    ) -> RunReport:
        """Run one reconcile pass.

        Args:
            flags: Feature flags for this run.
            current_path: Search path entries. If None, uses the process PATH.
                The caller commits ``RunReport.search_path``.

        Returns:
            RunReport with one result per planned step and the validation
            battery outcomes.

        Raises:
            PreconditionUnmetError: Before any mutation, if the run cannot start.
        """
        self.check_preconditions()
        started = self._clock()
        results: list[ActionResult] = []

        self._enter(Stage.RESOLVE_DESIRED)
        desired = self._resolver.resolve(flags)

        self._enter(Stage.FETCH_OBSERVED)
        observed = self.fetch_observed(include_extensions=bool(desired.extensions))

        self._enter(Stage.DIFF_PACKAGES)
        package_plan = self._package_plan(flags, desired, observed)

        self._enter(Stage.EXECUTE_PACKAGE_ACTIONS)
        if flags.uninstall:
            refs = {ref.id: ref for ref in self._resolver.removal_set()}
            results.extend(self._execute(package_plan, refs, self._packages.uninstall))
        else:
            refs = {ref.id: ref for ref in desired.packages}
            results.extend(self._execute(package_plan, refs, self._packages.install))

        self._enter(Stage.DIFF_EXTENSIONS)
        extension_plan = diff_extensions(desired, observed)

        self._enter(Stage.EXECUTE_EXTENSION_ACTIONS)
        if observed.extensions_available:
            ext_refs = {ref.id: ref for ref in desired.extensions}
            results.extend(self._execute(extension_plan, ext_refs, self._extensions.install))
        else:
            reason = f"Extension host {self._extensions.name} unavailable"
            results.extend(failed_result(action, reason) for action in extension_plan.actions)

        self._enter(Stage.APPLY_CONFIG_EDITS)
        results.extend(self._patcher.apply(edit) for edit in desired.config_edits)

        self._enter(Stage.ENSURE_PATH)
        existing, new_path, added = self._compute_path(flags, current_path)
        for action in path_actions(existing, added).actions:
            if action.target in added:
                results.append(
                    ActionResult(
                        action=action,
                        outcome=ActionOutcome.SUCCESS,
                        attempts=1,
                        message="Appended to search path",
                    )
                )
            else:
                results.append(skipped_result(action, action.rationale))

        self._enter(Stage.VALIDATE)
        validation = self._validator.validate(self._resolver.probes(), search_path=new_path)

        self._enter(Stage.DONE)
        return RunReport(
            started=started,
            finished=self._clock(),
            flags=tuple(sorted(flags.enabled())),
            results=tuple(results),
            validation=validation,
            search_path=tuple(new_path),
        )

    def _package_plan(
        self,
        flags: FeatureFlags,
        desired: DesiredState,
        observed: ObservedState,
    ) -> ActionPlan:
        """Installs for provisioning runs, the removal set for uninstall runs."""
        if flags.uninstall:
            return diff_removals(self._resolver.removal_set(), observed)
        return diff_packages(desired, observed)

    def _execute(
        self,
        plan: ActionPlan,
        refs: dict[str, T],
        operation: Callable[[T], ActionResult],
    ) -> list[ActionResult]:
        """Execute a plan step by step, never letting one step block the next."""
        results: list[ActionResult] = []
        for action in plan.actions:
            if plan.is_satisfied(action):
                results.append(skipped_result(action, action.rationale))
                continue
            results.append(self._execute_one(action, refs[action.target], operation))
        return results

    def _execute_one(
        self,
        action: Action,
        ref: T,
        operation: Callable[[T], ActionResult],
    ) -> ActionResult:
        """Execute a single step, recording unexpected collaborator errors."""
        try:
            result = operation(ref)
        except (OSError, RuntimeError) as e:
            logger.warning("%s %s raised: %s", action.kind.value, action.target, e)
            return failed_result(action, str(e))
        return replace(result, action=action)

    def _compute_path(
        self,
        flags: FeatureFlags,
        current_path: Sequence[str] | None,
    ) -> tuple[list[str], list[str], list[str]]:
        """Compute the search path additions.

        Uninstall runs leave the search path as it is.

        Returns:
            Tuple of (existing candidates, new search path, appended entries).
        """
        current = (
            list(current_path) if current_path is not None else search_path.current_search_path()
        )
        if flags.uninstall:
            return [], current, []

        candidates = self._resolver.path_candidates(self._tokens)
        candidates.extend(search_path.discover(self._resolver.path_probes, self._runner))

        existing: list[str] = []
        for candidate in dict.fromkeys(candidates):
            if self._fs.is_dir(candidate):
                existing.append(candidate)
            else:
                logger.debug("Search path candidate does not exist: %s", candidate)

        new_path = search_path.ensure(existing, current, exists=self._fs.is_dir)
        return existing, new_path, new_path[len(current) :]

    @staticmethod
    def _enter(stage: Stage) -> None:
        logger.debug("Reconcile stage: %s", stage.value)


def reconcile(
    flags: FeatureFlags,
    package_manager: PackageManager,
    extension_host: ExtensionHost,
    file_system: FileSystem,
    clock: Clock = utc_now,
    **options: object,
) -> RunReport:
    """Run one reconcile pass with the given collaborators.

    Convenience wrapper around Reconciler; ``options`` are passed to its
    constructor.
    """
    reconciler = Reconciler(
        package_manager,
        extension_host,
        file_system,
        clock=clock,
        **options,  # type: ignore[arg-type]
    )
    return reconciler.reconcile(flags)
