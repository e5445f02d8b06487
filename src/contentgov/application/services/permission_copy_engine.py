"""Copy grants from a source content item onto a target content item.

``plan_copy`` is the pure part: it filters source grants by content type
compatibility and reconciles them with the target's current grants under
the requested copy mode. ``PermissionCopyEngine`` fetches state, runs the
plan and sends it to the platform.
"""

import logging
from dataclasses import dataclass, field

from contentgov.application.dto.permission_dto import (
    AppliedGrant,
    CopyResult,
    FailedGrantee,
    SkippedGrantee,
)
from contentgov.application.ports import PlatformSession
from contentgov.domain.capabilities import compatible_capabilities
from contentgov.domain.entities import ContentRef, Grant, Grantee, find_grant
from contentgov.domain.exceptions import (
    ContentGovError,
    NoCompatibleCapabilities,
    NothingToCopy,
    ValidationError,
)
from contentgov.domain.value_objects import ContentType, CopyMode

logger = logging.getLogger(__name__)

ALREADY_PRESENT = "already present"


@dataclass
class CopyPlan:
    """What a copy will send to the target."""

    mode: CopyMode
    revoke: list[Grantee] = field(default_factory=list)
    apply: list[Grant] = field(default_factory=list)
    skipped: list[SkippedGrantee] = field(default_factory=list)
    source_grant_count: int = 0
    compatible_grant_count: int = 0
    filtered: bool = False


def filter_compatible(
    source_grants: list[Grant],
    source_type: ContentType,
    target_type: ContentType,
) -> tuple[list[Grant], bool]:
    """Restrict grants to capabilities compatible with the target type.

    Grantees left with nothing are dropped. Returns the surviving grants and
    whether any capability was filtered out.

    Raises:
        NothingToCopy: ``source_grants`` is empty.
        NoCompatibleCapabilities: every grantee was dropped.
    """
    if not source_grants:
        raise NothingToCopy("Source has no permissions to copy")
    allowed = compatible_capabilities(source_type, target_type)
    filtered = False
    result: list[Grant] = []
    for grant in source_grants:
        restricted = grant.restricted_to(allowed)
        if len(restricted.capabilities) != len(grant.capabilities):
            filtered = True
        if restricted.capabilities:
            result.append(restricted)
    if not result:
        raise NoCompatibleCapabilities(
            f"No compatible permissions found between {ContentType(source_type).value} "
            f"and {ContentType(target_type).value}"
        )
    return result, filtered


def plan_copy(
    source_grants: list[Grant],
    source_type: ContentType,
    target_type: ContentType,
    target_grants: list[Grant],
    mode: CopyMode,
) -> CopyPlan:
    """Compute the grants to send to a target under ``mode``.

    - replace: every existing target grantee is revoked, then the filtered
      source grants are applied verbatim.
    - merge: grantees already on the target get only the capabilities whose
      name they do not hold yet; nothing new means skipped.
    - additive: filtered source grants are applied as they are.
    """
    mode = CopyMode(mode)
    compatible, filtered = filter_compatible(source_grants, source_type, target_type)
    plan = CopyPlan(
        mode=mode,
        source_grant_count=len(source_grants),
        compatible_grant_count=len(compatible),
        filtered=filtered,
    )
    if mode == CopyMode.REPLACE:
        plan.revoke = [g.grantee for g in target_grants if g.capabilities]
        plan.apply = compatible
    elif mode == CopyMode.MERGE:
        for grant in compatible:
            existing = find_grant(target_grants, grant.grantee)
            if existing is None:
                plan.apply.append(grant)
                continue
            held = existing.capability_names
            missing = frozenset(c for c in grant.capabilities if c.capability not in held)
            if missing:
                plan.apply.append(Grant(grantee=grant.grantee, capabilities=missing))
            else:
                plan.skipped.append(SkippedGrantee(grantee=grant.grantee, reason=ALREADY_PRESENT))
    else:
        plan.apply = compatible
    return plan


class PermissionCopyEngine:
    """Runs copy plans against the platform."""

    async def fetch_source(
        self, session: PlatformSession, source: ContentRef
    ) -> tuple[ContentRef, list[Grant]]:
        """Verify the source and return it with its grants.

        Raises:
            ContentNotFound: source does not exist.
            NothingToCopy: source has no grants.
        """
        source = await session.content.get_content(
            session.site_id, source.content_type, source.id
        )
        grants = await session.content.get_grants(
            session.site_id, source.content_type, source.id
        )
        if not grants:
            raise NothingToCopy(
                f"Source {source.content_type.value} '{source.name or source.id}' "
                "has no permissions to copy"
            )
        return source, grants

    async def copy(
        self,
        session: PlatformSession,
        source: ContentRef,
        target: ContentRef,
        mode: CopyMode,
    ) -> CopyResult:
        """Copy every compatible grant of ``source`` onto ``target``."""
        if source == target:
            raise ValidationError("Source and target must be different content items")
        source, source_grants = await self.fetch_source(session, source)
        target = await session.content.get_content(
            session.site_id, target.content_type, target.id
        )
        return await self.copy_resolved(session, source, source_grants, target, mode)

    async def copy_resolved(
        self,
        session: PlatformSession,
        source: ContentRef,
        source_grants: list[Grant],
        target: ContentRef,
        mode: CopyMode,
    ) -> CopyResult:
        """Copy pre-fetched source grants onto an already verified target."""
        mode = CopyMode(mode)
        if source == target:
            raise ValidationError("Source and target must be different content items")
        target_grants: list[Grant] = []
        if mode != CopyMode.ADDITIVE:
            target_grants = await session.content.get_grants(
                session.site_id, target.content_type, target.id
            )
        plan = plan_copy(
            source_grants, source.content_type, target.content_type, target_grants, mode
        )

        for grantee in plan.revoke:
            await session.content.revoke_all_for_grantee(
                session.site_id, target.content_type, target.id, grantee
            )

        result = CopyResult(
            source=source,
            target=target,
            mode=mode,
            skipped=plan.skipped,
            revoked=plan.revoke,
            source_grant_count=plan.source_grant_count,
            compatible_grant_count=plan.compatible_grant_count,
            filtered=plan.filtered,
        )
        for grant in plan.apply:
            capabilities = grant.sorted_capabilities()
            try:
                await session.content.apply_grant(
                    session.site_id,
                    target.content_type,
                    target.id,
                    grant.grantee,
                    capabilities,
                )
            except ContentGovError as exc:
                logger.warning(
                    "Copy to %s '%s' failed for %s '%s': %s",
                    target.content_type.value,
                    target.id,
                    grant.grantee.type.value,
                    grant.grantee.id,
                    exc,
                )
                result.failed.append(
                    FailedGrantee(grantee=grant.grantee, reason=exc.code, detail=str(exc))
                )
                continue
            result.applied.append(AppliedGrant(grantee=grant.grantee, capabilities=capabilities))

        logger.info(
            "Copied permissions %s '%s' -> %s '%s' (%s): %d applied, %d skipped, %d failed",
            source.content_type.value,
            source.id,
            target.content_type.value,
            target.id,
            mode.value,
            len(result.applied),
            len(result.skipped),
            len(result.failed),
        )
        return result
