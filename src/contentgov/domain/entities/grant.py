"""Grant entity - capability set of one grantee on one content item."""

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from contentgov.domain.entities.grantee import Grantee
from contentgov.domain.value_objects import Capability, CapabilityGrant, CapabilityMode


def ensure_unique_capabilities(capabilities: Iterable[CapabilityGrant]) -> frozenset[CapabilityGrant]:
    """Return capabilities as a frozenset, rejecting two entries for one capability."""
    result = frozenset(capabilities)
    seen: set[Capability] = set()
    for item in result:
        if item.capability in seen:
            raise ValueError(f"Capability {item.capability.value} appears more than once")
        seen.add(item.capability)
    return result


@dataclass(frozen=True)
class Grant:
    """Grant - (capability, mode) pairs held by one grantee, unique per capability."""

    grantee: Grantee
    capabilities: frozenset[CapabilityGrant]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "capabilities", ensure_unique_capabilities(self.capabilities)
        )

    @property
    def capability_names(self) -> frozenset[Capability]:
        return frozenset(c.capability for c in self.capabilities)

    def mode_of(self, capability: Capability) -> CapabilityMode | None:
        for item in self.capabilities:
            if item.capability == capability:
                return item.mode
        return None

    def with_mode(self, mode: CapabilityMode) -> list[Capability]:
        """Capability names held with the given mode, sorted."""
        return sorted(c.capability for c in self.capabilities if c.mode == mode)

    def restricted_to(self, allowed: Collection[Capability]) -> "Grant":
        """Copy keeping only capabilities whose name is in ``allowed``."""
        return Grant(
            grantee=self.grantee,
            capabilities=frozenset(c for c in self.capabilities if c.capability in allowed),
        )

    def sorted_capabilities(self) -> list[CapabilityGrant]:
        return sorted(self.capabilities)

    def to_dict(self) -> dict:
        return {
            "grantee": self.grantee.to_dict(),
            "capabilities": [c.to_dict() for c in self.sorted_capabilities()],
        }


def find_grant(grants: Iterable[Grant], grantee: Grantee) -> Grant | None:
    """Grant of ``grantee`` among ``grants`` (matched on identity), if any."""
    for grant in grants:
        if grant.grantee == grantee:
            return grant
    return None
