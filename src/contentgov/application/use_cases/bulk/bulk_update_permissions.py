"""Bulk update permissions use case."""

from contentgov.application.dto.bulk_dto import BulkRequest, BulkResult
from contentgov.application.ports import PlatformSessionFactory
from contentgov.application.services.bulk_executor import BulkOperationExecutor


class BulkUpdatePermissionsUseCase:
    """Grant, revoke or copy permissions across many items of one content type."""

    def __init__(
        self,
        session_factory: PlatformSessionFactory,
        executor: BulkOperationExecutor,
    ) -> None:
        self._session_factory = session_factory
        self._executor = executor

    async def execute(self, request: BulkRequest) -> BulkResult:
        # Parameter problems surface before a session is opened.
        self._executor.validate(request)
        async with self._session_factory() as session:
            return await self._executor.execute(session, request)
