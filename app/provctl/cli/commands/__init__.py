"""CLI commands for provctl.

This package contains all subcommand implementations.
"""

from provctl.cli.commands import apply, catalog, config, history, plan, upgrade, validate

__all__ = ["apply", "catalog", "config", "history", "plan", "upgrade", "validate"]
