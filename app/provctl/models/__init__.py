"""Data models for provctl.

This module exports the core data structures used throughout the application.
"""

from provctl.models.action import (
    Action,
    ActionKind,
    ActionOutcome,
    ActionPlan,
    ActionResult,
    failed_result,
    skipped_result,
)
from provctl.models.catalog import Catalog
from provctl.models.config_edit import ConfigEdit, ConfigFormat
from provctl.models.flags import FeatureFlags
from provctl.models.package import ExtensionRef, PackageRef
from provctl.models.report import ProbeOutcome, ProbeStatus, RunReport
from provctl.models.state import DesiredState, ObservedState

__all__ = [
    "Action",
    "ActionKind",
    "ActionOutcome",
    "ActionPlan",
    "ActionResult",
    "Catalog",
    "ConfigEdit",
    "ConfigFormat",
    "DesiredState",
    "ExtensionRef",
    "FeatureFlags",
    "ObservedState",
    "PackageRef",
    "ProbeOutcome",
    "ProbeStatus",
    "RunReport",
    "failed_result",
    "skipped_result",
]
