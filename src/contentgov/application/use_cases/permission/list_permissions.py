"""List content permissions use case."""

from contentgov.application.dto.permission_dto import ContentPermissions
from contentgov.application.ports import PlatformSessionFactory
from contentgov.application.services.grantee_resolver import GranteeResolver
from contentgov.domain.entities import ContentRef, Grant
from contentgov.domain.value_objects import ContentType


class ListContentPermissionsUseCase:
    """List grants on a content item with grantee display names."""

    def __init__(
        self,
        session_factory: PlatformSessionFactory,
        grantee_resolver: GranteeResolver,
    ) -> None:
        self._session_factory = session_factory
        self._resolver = grantee_resolver

    async def execute(self, content_type: ContentType, content_id: str) -> ContentPermissions:
        async with self._session_factory() as session:
            content = await session.content.get_content(
                session.site_id, ContentType(content_type), content_id
            )
            grants = await session.content.get_grants(
                session.site_id, content.content_type, content.id
            )
            names = await self._resolver.resolve_many(session, [g.grantee for g in grants])
        return ContentPermissions(
            content=content,
            grants=[Grant(grantee=names[g.grantee], capabilities=g.capabilities) for g in grants],
        )
