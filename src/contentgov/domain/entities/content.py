"""Content reference entity."""

from dataclasses import dataclass, field

from contentgov.domain.value_objects import ContentType


@dataclass(frozen=True)
class ContentRef:
    """Content item - identity is (content_type, id), name is a cached label."""

    content_type: ContentType
    id: str
    name: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "content_type", ContentType(self.content_type))

    def to_dict(self) -> dict[str, str]:
        return {
            "content_type": self.content_type.value,
            "id": self.id,
            "name": self.name,
        }
