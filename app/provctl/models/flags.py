"""Feature flags selecting optional catalogue groups."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class FeatureFlags(BaseModel):
    """Immutable set of named booleans produced once at process start.

    Each conditional catalogue group is gated by exactly one of these
    flags. ``uninstall`` switches the run from provisioning to removal.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    azure_tools: Annotated[bool, Field(description="Cloud-focused editor extensions")] = False
    sql_tools: Annotated[bool, Field(description="SQL editor extensions and dialect config")] = (
        False
    )
    docker: Annotated[bool, Field(description="Container runtime")] = False
    power_bi: Annotated[bool, Field(description="BI desktop tool")] = False
    security_tools: Annotated[bool, Field(description="IaC security scanners")] = False
    uninstall: Annotated[bool, Field(description="Remove everything ever shipped")] = False

    def enabled(self) -> frozenset[str]:
        """Return the names of all flags that are set."""
        return frozenset(name for name, value in self.model_dump().items() if value)

    def is_set(self, name: str) -> bool:
        """Check a flag by name.

        Raises:
            KeyError: If ``name`` is not a known flag.
        """
        if name not in type(self).model_fields:
            raise KeyError(name)
        return bool(getattr(self, name))
