"""Copy permissions use case."""

from contentgov.application.dto.permission_dto import CopyResult
from contentgov.application.ports import PlatformSessionFactory
from contentgov.application.services.permission_copy_engine import PermissionCopyEngine
from contentgov.domain.entities import ContentRef
from contentgov.domain.value_objects import ContentType, CopyMode


class CopyPermissionsUseCase:
    """Copy grants from one content item to another."""

    def __init__(
        self,
        session_factory: PlatformSessionFactory,
        copy_engine: PermissionCopyEngine,
        default_mode: CopyMode = CopyMode.REPLACE,
    ) -> None:
        self._session_factory = session_factory
        self._copy_engine = copy_engine
        self._default_mode = CopyMode(default_mode)

    async def execute(
        self,
        source_type: ContentType,
        source_id: str,
        target_type: ContentType,
        target_id: str,
        copy_mode: CopyMode | None = None,
    ) -> CopyResult:
        async with self._session_factory() as session:
            return await self._copy_engine.copy(
                session,
                ContentRef(source_type, source_id),
                ContentRef(target_type, target_id),
                copy_mode or self._default_mode,
            )
