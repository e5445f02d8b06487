"""Advisory reporting over operation results.

Success rates, impact levels, permission levels and warnings computed here
are for reports only. Nothing in this module is consulted when deciding
whether an operation runs.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from contentgov.application.dto.bulk_dto import BulkResult
from contentgov.application.dto.permission_dto import CopyResult, GrantResult, RevokeResult
from contentgov.domain.capabilities import (
    ADMINISTRATIVE_CAPABILITIES,
    AUTHORING_CAPABILITIES,
    INTERACTION_CAPABILITIES,
    VIEW_CAPABILITIES,
)
from contentgov.domain.entities import Grant
from contentgov.domain.value_objects import (
    BulkOperation,
    Capability,
    CapabilityGrant,
    CapabilityMode,
    CopyMode,
    GranteeType,
    ImpactLevel,
)

DEFAULT_MEDIUM_IMPACT_THRESHOLD = 20
DEFAULT_HIGH_IMPACT_THRESHOLD = 50

_ADMIN_GRANT_CAPABILITIES = (Capability.DELETE, Capability.CHANGE_PERMISSIONS)


@dataclass(frozen=True)
class BulkSummary:
    """Summary statistics of a bulk run."""

    total_items: int
    successful: int
    failed: int
    skipped: int
    success_rate: float
    impact_level: ImpactLevel
    warnings: dict[str, str] = field(default_factory=dict)

    @property
    def success_percent(self) -> int:
        return round(self.success_rate * 100)

    def to_dict(self) -> dict:
        return {
            "total_items": self.total_items,
            "successful": self.successful,
            "failed": self.failed,
            "skipped": self.skipped,
            "success_rate": self.success_rate,
            "success_percent": self.success_percent,
            "impact_level": self.impact_level.value,
            "warnings": dict(self.warnings),
        }


def success_rate(successful: int, total: int) -> float:
    """successful / total, 0.0 for an empty run."""
    if total <= 0:
        return 0.0
    return successful / total


def classify_impact(
    total_items: int,
    medium_threshold: int = DEFAULT_MEDIUM_IMPACT_THRESHOLD,
    high_threshold: int = DEFAULT_HIGH_IMPACT_THRESHOLD,
) -> ImpactLevel:
    """Impact from batch size: > high -> High, > medium -> Medium, else Low."""
    if total_items > high_threshold:
        return ImpactLevel.HIGH
    if total_items > medium_threshold:
        return ImpactLevel.MEDIUM
    return ImpactLevel.LOW


def summarize_bulk(
    result: BulkResult,
    medium_threshold: int = DEFAULT_MEDIUM_IMPACT_THRESHOLD,
    high_threshold: int = DEFAULT_HIGH_IMPACT_THRESHOLD,
) -> BulkSummary:
    """Reduce a bulk result to summary statistics and warnings."""
    total = result.total_items
    impact = classify_impact(total, medium_threshold, high_threshold)
    warnings: dict[str, str] = {}
    if result.failed:
        warnings["failures"] = (
            f"{len(result.failed)} items failed - check individual error details"
        )
    if impact == ImpactLevel.HIGH:
        warnings["high_impact"] = (
            "Large-scale permission change may significantly impact user access"
        )
    if result.operation == BulkOperation.REVOKE:
        warnings["access_loss"] = (
            "Users may lose access to content - verify alternative access paths exist"
        )
    return BulkSummary(
        total_items=total,
        successful=len(result.successful),
        failed=len(result.failed),
        skipped=len(result.skipped),
        success_rate=success_rate(len(result.successful), total),
        impact_level=impact,
        warnings=warnings,
    )


def permission_level(capabilities: Iterable[CapabilityGrant]) -> str:
    """Level implied by the allowed capabilities of a grant request."""
    allowed = {c.capability for c in capabilities if c.mode == CapabilityMode.ALLOW}
    if allowed.intersection(_ADMIN_GRANT_CAPABILITIES):
        return "Administrative"
    if Capability.WRITE in allowed:
        return "Author/Editor"
    if Capability.READ in allowed:
        return "Viewer"
    return "Custom"


def access_level(grant: Grant) -> str:
    """Level of an existing grant by capability category (allowed only)."""
    allowed = set(grant.with_mode(CapabilityMode.ALLOW))
    if allowed.intersection(ADMINISTRATIVE_CAPABILITIES):
        return "Admin"
    if allowed.intersection(AUTHORING_CAPABILITIES):
        return "Author"
    if allowed.intersection(INTERACTION_CAPABILITIES):
        return "Interactor"
    if allowed.intersection(VIEW_CAPABILITIES):
        return "Viewer"
    return "None"


def revoke_impact(revoked: Iterable[Capability]) -> str:
    """Impact label for a set of revoked capabilities."""
    names = set(revoked)
    if Capability.READ in names:
        return "Critical - Access Removed"
    if names.intersection(_ADMIN_GRANT_CAPABILITIES):
        return "High - Administrative Access Reduced"
    if Capability.WRITE in names:
        return "Medium - Edit Access Removed"
    if not names:
        return "None - Nothing Revoked"
    return "Low - Feature Access Reduced"


def copy_complexity(result: CopyResult) -> ImpactLevel:
    """Complexity of a single copy from cross-typing, filtering, mode and size."""
    score = 0
    if result.cross_type:
        score += 2
    if result.filtered:
        score += 1
    if result.mode != CopyMode.REPLACE:
        score += 1
    if result.source_grant_count > 10:
        score += 1
    if score >= 4:
        return ImpactLevel.HIGH
    if score >= 2:
        return ImpactLevel.MEDIUM
    return ImpactLevel.LOW


def summarize_grant(result: GrantResult) -> dict:
    allowed = [c for c in result.requested if c.mode == CapabilityMode.ALLOW]
    denied = [c for c in result.requested if c.mode == CapabilityMode.DENY]
    warnings: dict[str, str] = {}
    if denied:
        warnings["explicit_denials"] = (
            "Explicit deny permissions are recorded but not reconciled against group grants"
        )
    level = permission_level(result.requested)
    if level == "Administrative":
        warnings["admin_access"] = "Administrative permissions granted"
    return {
        "permission_level": level,
        "allowed": [c.capability.value for c in allowed],
        "denied": [c.capability.value for c in denied],
        "applied_count": len(result.applied),
        "already_present_count": len(result.already_present),
        "warnings": warnings,
    }


def summarize_revoke(result: RevokeResult) -> dict:
    warnings = {
        "inherited_access": (
            "Grantee may still have access through group memberships or project permissions"
        )
    }
    if result.grantee.type == GranteeType.GROUP:
        warnings["group_impact"] = "All members of this group are affected"
    return {
        "impact_level": revoke_impact(result.revoked),
        "revoked_count": len(result.revoked),
        "not_present_count": len(result.not_present),
        "warnings": warnings,
    }


def summarize_copy(result: CopyResult) -> dict:
    attempted = len(result.applied) + len(result.failed)
    warnings: dict[str, str] = {}
    if result.cross_type:
        warnings["compatibility"] = "Cross-type operation - some permissions may not be compatible"
    if result.filtered:
        warnings["filtering"] = "Some permissions were filtered due to compatibility constraints"
    if result.failed:
        warnings["failures"] = f"{len(result.failed)} permission assignments failed"
    if result.mode == CopyMode.ADDITIVE:
        warnings["duplicates"] = "Additive mode may create duplicate permissions"
    return {
        "source_grants": result.source_grant_count,
        "compatible_grants": result.compatible_grant_count,
        "applied": len(result.applied),
        "skipped": len(result.skipped),
        "failed": len(result.failed),
        "capabilities_applied": result.capabilities_applied,
        "success_rate": success_rate(len(result.applied), attempted),
        "cross_type": result.cross_type,
        "filtered": result.filtered,
        "complexity": copy_complexity(result).value,
        "warnings": warnings,
    }
