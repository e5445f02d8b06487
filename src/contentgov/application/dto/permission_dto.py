"""Permission operation result DTOs."""

from dataclasses import dataclass, field

from contentgov.domain.entities import ContentRef, Grant, Grantee
from contentgov.domain.value_objects import Capability, CapabilityGrant, CopyMode


def _capability_dicts(capabilities: list[CapabilityGrant]) -> list[dict[str, str]]:
    return [c.to_dict() for c in capabilities]


@dataclass
class GrantResult:
    """Outcome of granting capabilities to one grantee on one content item."""

    content: ContentRef
    grantee: Grantee
    requested: list[CapabilityGrant]
    applied: list[CapabilityGrant]
    already_present: list[CapabilityGrant] = field(default_factory=list)
    replaced: list[CapabilityGrant] = field(default_factory=list)  # mode switched

    @property
    def changed(self) -> bool:
        return bool(self.applied)

    def to_dict(self) -> dict:
        return {
            "content": self.content.to_dict(),
            "grantee": self.grantee.to_dict(),
            "requested": _capability_dicts(self.requested),
            "applied": _capability_dicts(self.applied),
            "already_present": _capability_dicts(self.already_present),
            "replaced": _capability_dicts(self.replaced),
        }


@dataclass
class RevokeResult:
    """Outcome of revoking capabilities from one grantee on one content item."""

    content: ContentRef
    grantee: Grantee
    revoked: list[Capability]
    not_present: list[Capability] = field(default_factory=list)
    all_capabilities: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.revoked)

    def to_dict(self) -> dict:
        return {
            "content": self.content.to_dict(),
            "grantee": self.grantee.to_dict(),
            "revoked": [c.value for c in self.revoked],
            "not_present": [c.value for c in self.not_present],
            "all_capabilities": self.all_capabilities,
        }


@dataclass
class AppliedGrant:
    """Capabilities actually sent to the platform for one grantee."""

    grantee: Grantee
    capabilities: list[CapabilityGrant]

    def to_dict(self) -> dict:
        return {
            "grantee": self.grantee.to_dict(),
            "capabilities": _capability_dicts(self.capabilities),
        }


@dataclass
class SkippedGrantee:
    """Grantee left untouched, with the reason."""

    grantee: Grantee
    reason: str

    def to_dict(self) -> dict:
        return {"grantee": self.grantee.to_dict(), "reason": self.reason}


@dataclass
class FailedGrantee:
    """Grantee whose application was rejected."""

    grantee: Grantee
    reason: str
    detail: str = ""

    def to_dict(self) -> dict:
        return {
            "grantee": self.grantee.to_dict(),
            "reason": self.reason,
            "detail": self.detail,
        }


@dataclass
class CopyResult:
    """Outcome of copying grants from a source item to a target item."""

    source: ContentRef
    target: ContentRef
    mode: CopyMode
    applied: list[AppliedGrant] = field(default_factory=list)
    skipped: list[SkippedGrantee] = field(default_factory=list)
    failed: list[FailedGrantee] = field(default_factory=list)
    revoked: list[Grantee] = field(default_factory=list)
    source_grant_count: int = 0
    compatible_grant_count: int = 0
    filtered: bool = False

    @property
    def cross_type(self) -> bool:
        return self.source.content_type != self.target.content_type

    @property
    def capabilities_applied(self) -> int:
        return sum(len(a.capabilities) for a in self.applied)

    def to_dict(self) -> dict:
        return {
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
            "copy_mode": self.mode.value,
            "applied": [a.to_dict() for a in self.applied],
            "skipped": [s.to_dict() for s in self.skipped],
            "failed": [f.to_dict() for f in self.failed],
            "revoked": [g.to_dict() for g in self.revoked],
        }


@dataclass
class ContentPermissions:
    """Grants currently held on one content item."""

    content: ContentRef
    grants: list[Grant]

    def to_dict(self) -> dict:
        return {
            "content": self.content.to_dict(),
            "grants": [g.to_dict() for g in self.grants],
        }
