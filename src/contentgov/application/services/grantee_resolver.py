"""Grantee display-name resolution (best-effort)."""

import logging

from contentgov.application.ports import PlatformSession
from contentgov.domain.entities import UNKNOWN_GRANTEE_NAME, Grantee
from contentgov.domain.exceptions import ContentGovError

logger = logging.getLogger(__name__)


class GranteeResolver:
    """Resolves grantees to display identities; lookup failures degrade to "Unknown"."""

    async def resolve(self, session: PlatformSession, grantee: Grantee) -> Grantee:
        """Return ``grantee`` with its display name, or "Unknown" if lookup fails."""
        try:
            name = await session.content.resolve_grantee(
                session.site_id, grantee.type, grantee.id
            )
        except ContentGovError as exc:
            logger.warning(
                "Could not resolve %s '%s' display name (%s): %s",
                grantee.type.value,
                grantee.id,
                exc.code,
                exc,
            )
            return grantee.with_name(UNKNOWN_GRANTEE_NAME)
        return grantee.with_name(name or UNKNOWN_GRANTEE_NAME)

    async def resolve_many(
        self, session: PlatformSession, grantees: list[Grantee]
    ) -> dict[Grantee, Grantee]:
        """Resolve each distinct grantee once; keys are the input identities."""
        resolved: dict[Grantee, Grantee] = {}
        for grantee in grantees:
            if grantee not in resolved:
                resolved[grantee] = await self.resolve(session, grantee)
        return resolved
