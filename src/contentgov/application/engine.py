"""Permission engine - the single entry point for every permission operation.

Each call opens one platform session, runs one use case and returns an
``OperationResult``. Domain errors never escape: they become failure
results carrying the error code. Success payloads combine the operation
result with its advisory summary.
"""

from uuid import uuid4

from contentgov.application.dto.bulk_dto import BulkRequest
from contentgov.application.dto.operation_result import OperationResult
from contentgov.application.ports import PlatformSessionFactory
from contentgov.application.services import result_aggregator
from contentgov.application.services.bulk_executor import DEFAULT_MAX_ITEMS, BulkOperationExecutor
from contentgov.application.services.grantee_resolver import GranteeResolver
from contentgov.application.services.permission_copy_engine import PermissionCopyEngine
from contentgov.application.services.permission_grant_service import PermissionGrantService
from contentgov.application.use_cases.bulk.bulk_update_permissions import (
    BulkUpdatePermissionsUseCase,
)
from contentgov.application.use_cases.permission.copy_permissions import CopyPermissionsUseCase
from contentgov.application.use_cases.permission.grant_permissions import GrantPermissionsUseCase
from contentgov.application.use_cases.permission.list_permissions import (
    ListContentPermissionsUseCase,
)
from contentgov.application.use_cases.permission.revoke_permissions import (
    RevokePermissionsUseCase,
)
from contentgov.domain.exceptions import ContentGovError
from contentgov.domain.value_objects import (
    Capability,
    CapabilityGrant,
    CapabilityMode,
    ContentType,
    CopyMode,
    GranteeType,
)
from contentgov.logging_config import get_request_logger


class PermissionEngine:
    """Grant, revoke, copy, bulk-update and list content permissions."""

    def __init__(
        self,
        session_factory: PlatformSessionFactory,
        default_copy_mode: CopyMode = CopyMode.REPLACE,
        medium_impact_threshold: int = result_aggregator.DEFAULT_MEDIUM_IMPACT_THRESHOLD,
        high_impact_threshold: int = result_aggregator.DEFAULT_HIGH_IMPACT_THRESHOLD,
        max_items: int = DEFAULT_MAX_ITEMS,
    ) -> None:
        resolver = GranteeResolver()
        grant_service = PermissionGrantService(resolver)
        copy_engine = PermissionCopyEngine()
        self._grant = GrantPermissionsUseCase(session_factory, grant_service)
        self._revoke = RevokePermissionsUseCase(session_factory, grant_service)
        self._copy = CopyPermissionsUseCase(session_factory, copy_engine, default_copy_mode)
        self._list = ListContentPermissionsUseCase(session_factory, resolver)
        self._bulk = BulkUpdatePermissionsUseCase(
            session_factory,
            BulkOperationExecutor(grant_service, copy_engine, resolver, max_items),
        )
        self._medium_threshold = medium_impact_threshold
        self._high_threshold = high_impact_threshold

    async def grant(
        self,
        content_type: ContentType,
        content_id: str,
        grantee_type: GranteeType,
        grantee_id: str,
        capabilities: list[CapabilityGrant] | None = None,
        template: str | None = None,
    ) -> OperationResult:
        log = get_request_logger(__name__, uuid4().hex)
        try:
            result = await self._grant.execute(
                content_type, content_id, grantee_type, grantee_id, capabilities, template
            )
        except ContentGovError as exc:
            log.warning("grant on %s '%s' failed: %s", content_type, content_id, exc)
            return OperationResult.failure("grant", exc)
        log.info("grant on %s '%s' applied %d", content_type, content_id, len(result.applied))
        data = result.to_dict()
        data["summary"] = result_aggregator.summarize_grant(result)
        return OperationResult.success("grant", data)

    async def revoke(
        self,
        content_type: ContentType,
        content_id: str,
        grantee_type: GranteeType,
        grantee_id: str,
        capabilities: list[Capability] | None = None,
    ) -> OperationResult:
        """Revoke named capabilities, or all of them when ``capabilities`` is None."""
        log = get_request_logger(__name__, uuid4().hex)
        try:
            result = await self._revoke.execute(
                content_type, content_id, grantee_type, grantee_id, capabilities
            )
        except ContentGovError as exc:
            log.warning("revoke on %s '%s' failed: %s", content_type, content_id, exc)
            return OperationResult.failure("revoke", exc)
        log.info("revoke on %s '%s' removed %d", content_type, content_id, len(result.revoked))
        data = result.to_dict()
        data["summary"] = result_aggregator.summarize_revoke(result)
        return OperationResult.success("revoke", data)

    async def copy(
        self,
        source_type: ContentType,
        source_id: str,
        target_type: ContentType,
        target_id: str,
        copy_mode: CopyMode | None = None,
    ) -> OperationResult:
        log = get_request_logger(__name__, uuid4().hex)
        try:
            result = await self._copy.execute(
                source_type, source_id, target_type, target_id, copy_mode
            )
        except ContentGovError as exc:
            log.warning(
                "copy %s '%s' -> %s '%s' failed: %s",
                source_type, source_id, target_type, target_id, exc,
            )
            return OperationResult.failure("copy", exc)
        log.info(
            "copy %s '%s' -> %s '%s' applied %d grants",
            source_type, source_id, target_type, target_id, len(result.applied),
        )
        data = result.to_dict()
        data["summary"] = result_aggregator.summarize_copy(result)
        return OperationResult.success("copy", data)

    async def bulk(self, request: BulkRequest) -> OperationResult:
        log = get_request_logger(__name__, uuid4().hex)
        try:
            result = await self._bulk.execute(request)
        except ContentGovError as exc:
            log.warning("bulk %s failed: %s", request.operation, exc)
            return OperationResult.failure("bulk", exc)
        summary = result_aggregator.summarize_bulk(
            result, self._medium_threshold, self._high_threshold
        )
        log.info(
            "bulk %s finished: %d/%d successful",
            request.operation, summary.successful, summary.total_items,
        )
        data = result.to_dict()
        data["summary"] = summary.to_dict()
        return OperationResult.success("bulk", data)

    async def list_permissions(
        self, content_type: ContentType, content_id: str
    ) -> OperationResult:
        log = get_request_logger(__name__, uuid4().hex)
        try:
            permissions = await self._list.execute(content_type, content_id)
        except ContentGovError as exc:
            log.warning("listing %s '%s' failed: %s", content_type, content_id, exc)
            return OperationResult.failure("list_permissions", exc)
        data = permissions.to_dict()
        for item, grant in zip(data["grants"], permissions.grants, strict=True):
            item["allowed"] = [c.value for c in grant.with_mode(CapabilityMode.ALLOW)]
            item["denied"] = [c.value for c in grant.with_mode(CapabilityMode.DENY)]
            item["access_level"] = result_aggregator.access_level(grant)
        return OperationResult.success("list_permissions", data)
