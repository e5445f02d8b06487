"""Bulk operation kinds and advisory impact levels."""

from enum import StrEnum


class BulkOperation(StrEnum):
    """Operation applied to every item of a bulk request."""

    GRANT = "grant"
    REVOKE = "revoke"
    COPY = "copy"


class ImpactLevel(StrEnum):
    """Advisory classification used in reports only."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
