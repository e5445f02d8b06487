"""Grant permissions use case."""

from contentgov.application.dto.permission_dto import GrantResult
from contentgov.application.ports import PlatformSessionFactory
from contentgov.application.services.permission_grant_service import PermissionGrantService
from contentgov.domain.capabilities import TEMPLATES, template_capabilities
from contentgov.domain.entities import ContentRef, Grantee
from contentgov.domain.exceptions import ValidationError
from contentgov.domain.value_objects import CapabilityGrant, ContentType, GranteeType


class GrantPermissionsUseCase:
    """Grant an explicit capability list or a template to a grantee on one item."""

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
        capabilities: list[CapabilityGrant] | None = None,
        template: str | None = None,
    ) -> GrantResult:
        """Grant capabilities. Exactly one of capabilities or template is required."""
        if capabilities and template:
            raise ValidationError("Specify either capabilities or a template, not both")
        if template:
            if template not in TEMPLATES:
                raise ValidationError(f"Unknown permission template: {template}")
            requested = list(template_capabilities(template))
        else:
            requested = list(capabilities or [])

        async with self._session_factory() as session:
            return await self._grant_service.grant(
                session,
                ContentRef(content_type, content_id),
                Grantee(grantee_type, grantee_id),
                requested,
            )
