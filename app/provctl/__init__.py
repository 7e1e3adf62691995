"""provctl - declarative developer workstation provisioning."""

from importlib import metadata

try:
    __version__ = metadata.version("provctl")
except metadata.PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.0.0"

__all__ = ["__version__"]
