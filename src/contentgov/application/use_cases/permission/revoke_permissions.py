"""Revoke permissions use case."""

from contentgov.application.dto.permission_dto import RevokeResult
from contentgov.application.ports import PlatformSessionFactory
from contentgov.application.services.permission_grant_service import PermissionGrantService
from contentgov.domain.entities import ContentRef, Grantee
from contentgov.domain.value_objects import Capability, ContentType, GranteeType


class RevokePermissionsUseCase:
    """Revoke named capabilities, or every capability, of a grantee on one item."""

    def __init__(
        self,
        session_factory: PlatformSessionFactory,
        grant_service: PermissionGrantService,
    ) -> None:
        self._session_factory = session_factory
        self._grant_service = grant_service

    async def execute(
        self,
        content_type: ContentType,
        content_id: str,
        grantee_type: GranteeType,
        grantee_id: str,
        capabilities: list[Capability] | None = None,
    ) -> RevokeResult:
        """``capabilities=None`` removes the grantee entirely; a list removes only those names."""
        content = ContentRef(content_type, content_id)
        grantee = Grantee(grantee_type, grantee_id)
        async with self._session_factory() as session:
            if capabilities is None:
                return await self._grant_service.revoke_all(session, content, grantee)
            return await self._grant_service.revoke_capabilities(
                session, content, grantee, capabilities
            )
