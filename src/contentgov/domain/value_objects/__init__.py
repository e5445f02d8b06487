"""Domain value objects."""

from contentgov.domain.value_objects.bulk_operation import BulkOperation, ImpactLevel
from contentgov.domain.value_objects.capability import (
    Capability,
    CapabilityGrant,
    CapabilityMode,
)
from contentgov.domain.value_objects.content_type import ContentType
from contentgov.domain.value_objects.copy_mode import CopyMode
from contentgov.domain.value_objects.grantee_type import GranteeType

__all__ = [
    "BulkOperation",
    "Capability",
    "CapabilityGrant",
    "CapabilityMode",
    "ContentType",
    "CopyMode",
    "GranteeType",
    "ImpactLevel",
]
