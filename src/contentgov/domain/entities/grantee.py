"""Grantee entity - user or group receiving permissions."""

from dataclasses import dataclass, field, replace

from contentgov.domain.value_objects import GranteeType

UNKNOWN_GRANTEE_NAME = "Unknown"


@dataclass(frozen=True)
class Grantee:
    """Grantee - identity is (type, id), name is display only."""

    type: GranteeType
    id: str
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", GranteeType(self.type))

    def with_name(self, name: str) -> "Grantee":
        """Copy of this grantee with a display name."""
        return replace(self, name=name)

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "id": self.id, "name": self.name}
