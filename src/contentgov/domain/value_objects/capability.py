"""Capabilities and capability modes."""

from dataclasses import dataclass
from enum import StrEnum


class Capability(StrEnum):
    """Permission actions applicable to content."""

    READ = "Read"
    FILTER = "Filter"
    VIEW_COMMENTS = "ViewComments"
    ADD_COMMENTS = "AddComments"
    EXPORT_IMAGE = "ExportImage"
    EXPORT_DATA = "ExportData"
    SHARE_VIEW = "ShareView"
    VIEW_UNDERLYING_DATA = "ViewUnderlyingData"
    WRITE = "Write"
    CREATE_REFRESH_METRICS = "CreateRefreshMetrics"
    OVERWRITE_REFRESH_METRICS = "OverwriteRefreshMetrics"
    DELETE_REFRESH_METRICS = "DeleteRefreshMetrics"
    CHANGE_HIERARCHY = "ChangeHierarchy"
    DELETE = "Delete"
    CHANGE_PERMISSIONS = "ChangePermissions"


class CapabilityMode(StrEnum):
    """Allow grants the capability, Deny records an explicit denial."""

    ALLOW = "Allow"
    DENY = "Deny"


@dataclass(frozen=True, order=True)
class CapabilityGrant:
    """One (capability, mode) pair."""

    capability: Capability
    mode: CapabilityMode = CapabilityMode.ALLOW

    def __post_init__(self) -> None:
        # Coerce raw strings; unknown names raise ValueError.
        object.__setattr__(self, "capability", Capability(self.capability))
        object.__setattr__(self, "mode", CapabilityMode(self.mode))

    def to_dict(self) -> dict[str, str]:
        return {"capability": self.capability.value, "mode": self.mode.value}
