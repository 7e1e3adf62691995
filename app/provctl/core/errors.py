"""Exception hierarchy for provctl.

Only PreconditionUnmetError aborts a run. Every other failure during
reconciliation is captured into an ActionResult instead of propagating.
"""


class ProvctlError(Exception):
    """Base exception for provctl errors."""


class PreconditionUnmetError(ProvctlError):
    """Raised before any state mutation when a run cannot start.

    Missing administrative rights and a missing package manager are the
    only fatal conditions.
    """


class ConfigurationCorruptError(ProvctlError):
    """Raised when an existing configuration artifact cannot be parsed."""


class CatalogError(ProvctlError):
    """Base exception for catalogue-related errors."""


class CatalogNotFoundError(CatalogError):
    """Raised when the catalogue file is not found."""


class CatalogValidationError(CatalogError):
    """Raised when the catalogue is unparsable or does not match the schema."""


class SettingsError(ProvctlError):
    """Raised when the settings file cannot be read, parsed or written."""
