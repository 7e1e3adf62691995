"""Diffing desired state against observed state.

Pure functions that turn the two states into ActionPlans. Every desired
target becomes one step; targets that are already satisfied are marked
as such so that the report can account for them without running them.
"""

from collections.abc import Sequence

from provctl.models.action import Action, ActionKind, ActionPlan
from provctl.models.config_edit import ConfigEdit
from provctl.models.package import PackageRef
from provctl.models.state import DesiredState, ObservedState


def diff_packages(desired: DesiredState, observed: ObservedState) -> ActionPlan:
    """Plan installs: ``desired.packages - observed.packages``.

    A package counts as installed when its canonical id or any of its
    deprecated aliases is installed.

    Args:
        desired: Desired state from the catalogue resolver.
        observed: Installed state from the package manager.

    Returns:
        One INSTALL step per desired package, in catalogue order.
    """
    actions: list[Action] = []
    satisfied: set[Action] = set()

    for package in desired.packages:
        if package.matches(observed.packages):
            action = Action(ActionKind.INSTALL, package.id, "Already installed")
            satisfied.add(action)
        else:
            action = Action(ActionKind.INSTALL, package.id, "In catalogue but not installed")
        actions.append(action)

    return ActionPlan(actions=tuple(actions), satisfied=frozenset(satisfied))


def diff_removals(removal_set: Sequence[PackageRef], observed: ObservedState) -> ActionPlan:
    """Plan removals for every package in the removal set.

    Args:
        removal_set: Every package any catalogue revision shipped.
        observed: Installed state from the package manager.

    Returns:
        One UNINSTALL step per package, in removal-set order; packages
        that are not installed are already satisfied.
    """
    actions: list[Action] = []
    satisfied: set[Action] = set()

    for package in removal_set:
        if package.matches(observed.packages):
            action = Action(ActionKind.UNINSTALL, package.id, "Listed in the removal set")
        else:
            action = Action(ActionKind.UNINSTALL, package.id, "Not installed")
            satisfied.add(action)
        actions.append(action)

    return ActionPlan(actions=tuple(actions), satisfied=frozenset(satisfied))


def diff_extensions(desired: DesiredState, observed: ObservedState) -> ActionPlan:
    """Plan extension installs: ``desired.extensions - observed.extensions``.

    Args:
        desired: Desired state from the catalogue resolver.
        observed: Installed state from the extension host.

    Returns:
        One INSTALL_EXTENSION step per desired extension, in catalogue order.
    """
    actions: list[Action] = []
    satisfied: set[Action] = set()

    for extension in desired.extensions:
        if extension.key in observed.extensions:
            action = Action(ActionKind.INSTALL_EXTENSION, extension.id, "Already installed")
            satisfied.add(action)
        else:
            action = Action(
                ActionKind.INSTALL_EXTENSION, extension.id, "In catalogue but not installed"
            )
        actions.append(action)

    return ActionPlan(actions=tuple(actions), satisfied=frozenset(satisfied))


def config_actions(edits: Sequence[ConfigEdit]) -> ActionPlan:
    """Plan config edits; whether a key is already set is decided on apply."""
    return ActionPlan(
        actions=tuple(
            Action(ActionKind.CONFIG_PATCH, edit.target, f"Default for {edit.key}")
            for edit in edits
        )
    )


def path_actions(existing: Sequence[str], added: Sequence[str]) -> ActionPlan:
    """Plan search path additions.

    Args:
        existing: Candidate directories that exist, in candidate order.
        added: The subset of ``existing`` that ensure() appended.

    Returns:
        One PATH_ADD step per existing candidate; candidates that were
        already on the search path are satisfied.
    """
    appended = set(added)
    actions: list[Action] = []
    satisfied: set[Action] = set()

    for entry in existing:
        if entry in appended:
            action = Action(ActionKind.PATH_ADD, entry, "Directory exists but is not on the path")
        else:
            action = Action(ActionKind.PATH_ADD, entry, "Already on the search path")
            satisfied.add(action)
        actions.append(action)

    return ActionPlan(actions=tuple(actions), satisfied=frozenset(satisfied))
