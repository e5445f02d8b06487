"""Sequential bulk execution of grant / revoke / copy over many content items."""

import logging
from dataclasses import dataclass

from contentgov.application.dto.bulk_dto import BulkItemOutcome, BulkRequest, BulkResult, ItemState
from contentgov.application.ports import PlatformSession
from contentgov.application.services.grantee_resolver import GranteeResolver
from contentgov.application.services.permission_copy_engine import (
    ALREADY_PRESENT,
    PermissionCopyEngine,
)
from contentgov.application.services.permission_grant_service import (
    PermissionGrantService,
    check_valid_for,
    normalize_capabilities,
)
from contentgov.domain.capabilities import TEMPLATES, template_capabilities
from contentgov.domain.entities import ContentRef, Grant, Grantee
from contentgov.domain.exceptions import ContentGovError, ValidationError
from contentgov.domain.value_objects import BulkOperation, CapabilityGrant, CopyMode

logger = logging.getLogger(__name__)

NOTHING_TO_REVOKE = "nothing to revoke"

DEFAULT_MAX_ITEMS = 1000


def _advance(content_id: str, current: ItemState, new: ItemState) -> ItemState:
    logger.debug("Bulk item '%s': %s -> %s", content_id, current.value, new.value)
    return new


@dataclass
class _Prepared:
    """Per-batch state resolved once before the item loop."""

    grantee: Grantee | None = None
    capabilities: frozenset[CapabilityGrant] | None = None
    source: ContentRef | None = None
    source_grants: list[Grant] | None = None

    def require_grantee(self) -> Grantee:
        if self.grantee is None:
            raise ValidationError("Operation requires a grantee")
        return self.grantee

    def require_capabilities(self) -> frozenset[CapabilityGrant]:
        if self.capabilities is None:
            raise ValidationError("Operation requires capabilities")
        return self.capabilities

    def require_source(self) -> tuple[ContentRef, list[Grant]]:
        if self.source is None or self.source_grants is None:
            raise ValidationError("Operation requires a copy source")
        return self.source, self.source_grants


class BulkOperationExecutor:
    """Applies one operation to a list of content ids, one at a time.

    Items are processed in input order. A failing item is recorded and the
    loop moves on; nothing is retried or reordered. Batch-level parameter
    problems fail the whole request before any item is touched.
    """

    def __init__(
        self,
        grant_service: PermissionGrantService | None = None,
        copy_engine: PermissionCopyEngine | None = None,
        grantee_resolver: GranteeResolver | None = None,
        max_items: int = DEFAULT_MAX_ITEMS,
    ) -> None:
        self._resolver = grantee_resolver or GranteeResolver()
        self._grant_service = grant_service or PermissionGrantService(self._resolver)
        self._copy_engine = copy_engine or PermissionCopyEngine()
        self._max_items = max_items

    def validate(self, request: BulkRequest) -> None:
        """Check operation-specific parameters.

        Raises:
            ValidationError: the request cannot run as a whole.
        """
        if not request.content_ids:
            raise ValidationError("At least one content ID is required")
        if len(request.content_ids) > self._max_items:
            raise ValidationError(
                f"Bulk requests are limited to {self._max_items} items, got {len(request.content_ids)}"
            )
        if any(not content_id for content_id in request.content_ids):
            raise ValidationError("Content IDs must not be empty")
        operation = BulkOperation(request.operation)
        if operation in (BulkOperation.GRANT, BulkOperation.REVOKE) and request.grantee is None:
            raise ValidationError("Grant and revoke operations require a grantee")
        if operation == BulkOperation.GRANT:
            if not request.capabilities and not request.template:
                raise ValidationError("Grant operation requires either capabilities or a template")
            if request.capabilities and request.template:
                raise ValidationError("Specify either capabilities or a template, not both")
            if request.template and request.template not in TEMPLATES:
                raise ValidationError(f"Unknown permission template: {request.template}")
        if operation == BulkOperation.COPY and not request.source_content_id:
            raise ValidationError("Copy operation requires a source content ID")

    async def execute(self, session: PlatformSession, request: BulkRequest) -> BulkResult:
        """Run the bulk request and return the per-item accounting."""
        self.validate(request)
        prepared = await self._prepare(session, request)
        result = BulkResult(operation=request.operation, content_type=request.content_type)
        for content_id in request.content_ids:
            outcome = await self._process_item(session, request, prepared, content_id)
            result.record(outcome)
        logger.info(
            "Bulk %s on %d %s items: %d successful, %d failed, %d skipped",
            request.operation.value,
            result.total_items,
            request.content_type.value,
            len(result.successful),
            len(result.failed),
            len(result.skipped),
        )
        return result

    async def _prepare(self, session: PlatformSession, request: BulkRequest) -> _Prepared:
        prepared = _Prepared()
        if request.grantee is not None:
            prepared.grantee = await self._resolver.resolve(session, request.grantee)
        if request.operation == BulkOperation.GRANT:
            if request.template:
                prepared.capabilities = template_capabilities(request.template)
            else:
                prepared.capabilities = normalize_capabilities(request.capabilities or [])
        elif request.operation == BulkOperation.COPY:
            source = ContentRef(
                request.source_content_type or request.content_type,
                request.source_content_id or "",
            )
            prepared.source, prepared.source_grants = await self._copy_engine.fetch_source(
                session, source
            )
        return prepared

    async def _process_item(
        self,
        session: PlatformSession,
        request: BulkRequest,
        prepared: _Prepared,
        content_id: str,
    ) -> BulkItemOutcome:
        state = ItemState.PENDING
        try:
            state = _advance(content_id, state, ItemState.VALIDATING)
            content = await session.content.get_content(
                session.site_id, request.content_type, content_id
            )
            if request.operation == BulkOperation.GRANT:
                check_valid_for(content, prepared.require_capabilities())
            elif request.operation == BulkOperation.COPY and content == prepared.source:
                raise ValidationError("Target is the copy source")

            state = _advance(content_id, state, ItemState.APPLYING)
            if request.operation == BulkOperation.GRANT:
                return await self._grant_item(session, prepared, content)
            if request.operation == BulkOperation.REVOKE:
                return await self._revoke_item(session, prepared, content)
            return await self._copy_item(session, request.copy_mode, prepared, content)
        except ContentGovError as exc:
            logger.warning(
                "Bulk %s failed for %s '%s' while %s: %s",
                request.operation.value,
                request.content_type.value,
                content_id,
                state.value,
                exc,
            )
            return BulkItemOutcome(
                content_id=content_id,
                state=ItemState.FAILED,
                reason=exc.code,
                detail=str(exc),
                failed_during=state,
            )

    async def _grant_item(
        self, session: PlatformSession, prepared: _Prepared, content: ContentRef
    ) -> BulkItemOutcome:
        result = await self._grant_service.grant_resolved(
            session, content, prepared.require_grantee(), prepared.require_capabilities()
        )
        if not result.applied:
            return BulkItemOutcome(
                content_id=content.id,
                state=ItemState.SKIPPED,
                content_name=content.name,
                reason=ALREADY_PRESENT,
            )
        return BulkItemOutcome(
            content_id=content.id,
            state=ItemState.SUCCEEDED,
            content_name=content.name,
            capabilities_applied=len(result.applied),
        )

    async def _revoke_item(
        self, session: PlatformSession, prepared: _Prepared, content: ContentRef
    ) -> BulkItemOutcome:
        result = await self._grant_service.revoke_all_resolved(
            session, content, prepared.require_grantee()
        )
        if not result.revoked:
            return BulkItemOutcome(
                content_id=content.id,
                state=ItemState.SKIPPED,
                content_name=content.name,
                reason=NOTHING_TO_REVOKE,
            )
        return BulkItemOutcome(
            content_id=content.id,
            state=ItemState.SUCCEEDED,
            content_name=content.name,
            capabilities_applied=len(result.revoked),
        )

    async def _copy_item(
        self,
        session: PlatformSession,
        mode: CopyMode,
        prepared: _Prepared,
        content: ContentRef,
    ) -> BulkItemOutcome:
        source, source_grants = prepared.require_source()
        result = await self._copy_engine.copy_resolved(
            session, source, source_grants, content, mode
        )
        if result.failed:
            first = result.failed[0]
            return BulkItemOutcome(
                content_id=content.id,
                state=ItemState.FAILED,
                content_name=content.name,
                reason=first.reason,
                detail="; ".join(
                    f"{f.grantee.type.value} '{f.grantee.id}': {f.detail}" for f in result.failed
                ),
                failed_during=ItemState.APPLYING,
                capabilities_applied=result.capabilities_applied,
            )
        if not result.applied:
            return BulkItemOutcome(
                content_id=content.id,
                state=ItemState.SKIPPED,
                content_name=content.name,
                reason=ALREADY_PRESENT,
            )
        return BulkItemOutcome(
            content_id=content.id,
            state=ItemState.SUCCEEDED,
            content_name=content.name,
            capabilities_applied=result.capabilities_applied,
        )
