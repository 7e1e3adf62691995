"""Editor extension host implementations."""

from provctl.extensions.base import ExtensionHost
from provctl.extensions.vscode import VSCodeExtensionHost

__all__ = ["ExtensionHost", "VSCodeExtensionHost"]
