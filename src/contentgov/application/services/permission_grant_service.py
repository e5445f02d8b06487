"""Grant and revoke capabilities for one (content, grantee) pair."""

import logging
from collections.abc import Iterable

from contentgov.application.dto.permission_dto import GrantResult, RevokeResult
from contentgov.application.ports import PlatformSession
from contentgov.application.services.grantee_resolver import GranteeResolver
from contentgov.domain.capabilities import invalid_capabilities
from contentgov.domain.entities import ContentRef, Grantee, ensure_unique_capabilities, find_grant
from contentgov.domain.exceptions import (
    ContentGovError,
    IncompatibleCapabilities,
    RepositoryError,
    ValidationError,
)
from contentgov.domain.value_objects import Capability, CapabilityGrant

logger = logging.getLogger(__name__)


def normalize_capabilities(capabilities: Iterable[CapabilityGrant]) -> frozenset[CapabilityGrant]:
    """Validate a requested capability set: non-empty, one entry per capability."""
    items = list(capabilities)
    if not items:
        raise ValidationError("At least one capability must be specified")
    try:
        result = ensure_unique_capabilities(items)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    if len(result) != len(items):
        raise ValidationError("Duplicate capability entries in request")
    return result


def check_valid_for(content: ContentRef, capabilities: Iterable[CapabilityGrant]) -> None:
    """Raise IncompatibleCapabilities if any capability does not apply to the content type."""
    invalid = invalid_capabilities(content.content_type, capabilities)
    if invalid:
        raise IncompatibleCapabilities(
            content.content_type.value, [c.value for c in invalid]
        )


class PermissionGrantService:
    """Atomic grant / revoke against one content item for one grantee.

    Public methods verify the content first (ContentNotFound propagates);
    the ``*_resolved`` variants assume an already verified content ref and
    resolved grantee, for callers that did that themselves.
    """

    def __init__(self, grantee_resolver: GranteeResolver | None = None) -> None:
        self._resolver = grantee_resolver or GranteeResolver()

    async def grant(
        self,
        session: PlatformSession,
        content: ContentRef,
        grantee: Grantee,
        capabilities: Iterable[CapabilityGrant],
    ) -> GrantResult:
        """Grant capabilities; already present (capability, mode) pairs are not resent."""
        requested = normalize_capabilities(capabilities)
        check_valid_for(content, requested)
        content = await session.content.get_content(
            session.site_id, content.content_type, content.id
        )
        grantee = await self._resolver.resolve(session, grantee)
        return await self.grant_resolved(session, content, grantee, requested)

    async def grant_resolved(
        self,
        session: PlatformSession,
        content: ContentRef,
        grantee: Grantee,
        requested: frozenset[CapabilityGrant],
    ) -> GrantResult:
        grants = await session.content.get_grants(
            session.site_id, content.content_type, content.id
        )
        existing = find_grant(grants, grantee)
        current = existing.capabilities if existing else frozenset()
        to_apply = requested - current
        already_present = requested & current

        # A capability held with the other mode must be removed first so the
        # grantee never holds Allow and Deny for the same capability.
        replaced = sorted(
            c for c in to_apply if existing and existing.mode_of(c.capability) is not None
        )
        if replaced:
            await session.content.revoke_capabilities(
                session.site_id,
                content.content_type,
                content.id,
                grantee,
                [c.capability for c in replaced],
            )
        if to_apply:
            try:
                await session.content.apply_grant(
                    session.site_id, content.content_type, content.id, grantee, to_apply
                )
            except ContentGovError as exc:
                if replaced and existing is not None:
                    names = {c.capability for c in replaced}
                    await self._restore(
                        session,
                        content,
                        grantee,
                        [c for c in existing.sorted_capabilities() if c.capability in names],
                        exc,
                    )
                raise
            logger.info(
                "Granted %d capabilities to %s '%s' on %s '%s'",
                len(to_apply),
                grantee.type.value,
                grantee.id,
                content.content_type.value,
                content.id,
            )
        else:
            logger.info(
                "All requested capabilities already present for %s '%s' on %s '%s'",
                grantee.type.value,
                grantee.id,
                content.content_type.value,
                content.id,
            )
        return GrantResult(
            content=content,
            grantee=grantee,
            requested=sorted(requested),
            applied=sorted(to_apply),
            already_present=sorted(already_present),
            replaced=replaced,
        )

    async def _restore(
        self,
        session: PlatformSession,
        content: ContentRef,
        grantee: Grantee,
        previous: list[CapabilityGrant],
        cause: ContentGovError,
    ) -> None:
        """Put back modes revoked ahead of a grant that then failed.

        Raises:
            RepositoryError: the previous modes could not be put back; the
                message names the capabilities the grantee no longer holds.
        """
        pairs = ", ".join(f"{c.capability.value}:{c.mode.value}" for c in previous)
        try:
            await session.content.apply_grant(
                session.site_id, content.content_type, content.id, grantee, previous
            )
        except ContentGovError as exc:
            logger.error(
                "Could not restore %s for %s '%s' on %s '%s': %s",
                pairs,
                grantee.type.value,
                grantee.id,
                content.content_type.value,
                content.id,
                exc,
            )
            raise RepositoryError(
                f"{cause}; revoked {pairs} could not be restored: {exc}"
            ) from cause
        logger.warning(
            "Grant failed; restored %s for %s '%s' on %s '%s'",
            pairs,
            grantee.type.value,
            grantee.id,
            content.content_type.value,
            content.id,
        )

    async def revoke_capabilities(
        self,
        session: PlatformSession,
        content: ContentRef,
        grantee: Grantee,
        capabilities: Iterable[Capability | str],
    ) -> RevokeResult:
        """Remove only the named capabilities; names not held are no-ops."""
        names = {Capability(c) for c in capabilities}
        if not names:
            raise ValidationError("At least one capability must be specified")
        content = await session.content.get_content(
            session.site_id, content.content_type, content.id
        )
        grantee = await self._resolver.resolve(session, grantee)
        grants = await session.content.get_grants(
            session.site_id, content.content_type, content.id
        )
        existing = find_grant(grants, grantee)
        held = existing.capability_names if existing else frozenset()
        present = sorted(names & held)
        not_present = sorted(names - held)
        if present:
            await session.content.revoke_capabilities(
                session.site_id, content.content_type, content.id, grantee, present
            )
            logger.info(
                "Revoked %s from %s '%s' on %s '%s'",
                ", ".join(c.value for c in present),
                grantee.type.value,
                grantee.id,
                content.content_type.value,
                content.id,
            )
        return RevokeResult(
            content=content,
            grantee=grantee,
            revoked=present,
            not_present=not_present,
            all_capabilities=False,
        )

    async def revoke_all(
        self,
        session: PlatformSession,
        content: ContentRef,
        grantee: Grantee,
    ) -> RevokeResult:
        """Remove every capability the grantee holds on the content item."""
        content = await session.content.get_content(
            session.site_id, content.content_type, content.id
        )
        grantee = await self._resolver.resolve(session, grantee)
        return await self.revoke_all_resolved(session, content, grantee)

    async def revoke_all_resolved(
        self,
        session: PlatformSession,
        content: ContentRef,
        grantee: Grantee,
    ) -> RevokeResult:
        grants = await session.content.get_grants(
            session.site_id, content.content_type, content.id
        )
        existing = find_grant(grants, grantee)
        if existing is None or not existing.capabilities:
            return RevokeResult(content=content, grantee=grantee, revoked=[], all_capabilities=True)
        await session.content.revoke_all_for_grantee(
            session.site_id, content.content_type, content.id, grantee
        )
        logger.info(
            "Revoked all %d capabilities from %s '%s' on %s '%s'",
            len(existing.capabilities),
            grantee.type.value,
            grantee.id,
            content.content_type.value,
            content.id,
        )
        return RevokeResult(
            content=content,
            grantee=grantee,
            revoked=sorted(existing.capability_names),
            all_capabilities=True,
        )
