"""Package manager implementations.

Each manager lists, installs and removes packages for one system tool.
"""

from provctl.managers.base import PackageManager
from provctl.managers.chocolatey import ChocolateyPackageManager

__all__ = ["ChocolateyPackageManager", "PackageManager"]
