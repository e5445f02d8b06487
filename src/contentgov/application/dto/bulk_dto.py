"""Bulk operation DTOs."""

from dataclasses import dataclass, field
from enum import StrEnum

from contentgov.domain.entities import Grantee
from contentgov.domain.value_objects import (
    BulkOperation,
    CapabilityGrant,
    ContentType,
    CopyMode,
)


class ItemState(StrEnum):
    """Lifecycle of one item in a bulk run."""

    PENDING = "pending"
    VALIDATING = "validating"
    APPLYING = "applying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class BulkRequest:
    """Input for a bulk permission operation over items of one content type."""

    operation: BulkOperation
    content_type: ContentType
    content_ids: list[str]
    grantee: Grantee | None = None
    capabilities: list[CapabilityGrant] | None = None
    template: str | None = None
    source_content_id: str | None = None
    source_content_type: ContentType | None = None  # defaults to content_type
    copy_mode: CopyMode = CopyMode.REPLACE

    def __post_init__(self) -> None:
        self.operation = BulkOperation(self.operation)
        self.content_type = ContentType(self.content_type)
        self.copy_mode = CopyMode(self.copy_mode)
        if self.source_content_type is not None:
            self.source_content_type = ContentType(self.source_content_type)


@dataclass
class BulkItemOutcome:
    """Final state of one bulk item."""

    content_id: str
    state: ItemState
    content_name: str = ""
    reason: str = ""
    detail: str = ""
    failed_during: ItemState | None = None
    capabilities_applied: int = 0

    def to_dict(self) -> dict:
        if self.state == ItemState.SUCCEEDED:
            return {
                "id": self.content_id,
                "name": self.content_name,
                "capabilities_applied": self.capabilities_applied,
            }
        data = {"id": self.content_id, "reason": self.reason}
        if self.detail:
            data["detail"] = self.detail
        if self.failed_during is not None:
            data["failed_during"] = self.failed_during.value
        return data


@dataclass
class BulkResult:
    """Per-item accounting of a bulk run, in input order within each bucket."""

    operation: BulkOperation
    content_type: ContentType
    successful: list[BulkItemOutcome] = field(default_factory=list)
    failed: list[BulkItemOutcome] = field(default_factory=list)
    skipped: list[BulkItemOutcome] = field(default_factory=list)

    @property
    def total_items(self) -> int:
        return len(self.successful) + len(self.failed) + len(self.skipped)

    def record(self, outcome: BulkItemOutcome) -> None:
        if outcome.state == ItemState.SUCCEEDED:
            self.successful.append(outcome)
        elif outcome.state == ItemState.SKIPPED:
            self.skipped.append(outcome)
        elif outcome.state == ItemState.FAILED:
            self.failed.append(outcome)
        else:
            raise ValueError(f"Bulk item {outcome.content_id} ended in state {outcome.state}")

    def to_dict(self) -> dict:
        return {
            "operation": self.operation.value,
            "content_type": self.content_type.value,
            "successful": [o.to_dict() for o in self.successful],
            "failed": [o.to_dict() for o in self.failed],
            "skipped": [o.to_dict() for o in self.skipped],
        }
