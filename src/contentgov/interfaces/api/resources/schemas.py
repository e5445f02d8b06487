"""Request body models and request parsing helpers."""

from enum import StrEnum
from typing import TypeVar

import falcon.asgi
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from contentgov.application.dto.bulk_dto import BulkRequest
from contentgov.domain.entities import Grantee
from contentgov.domain.value_objects import (
    BulkOperation,
    Capability,
    CapabilityGrant,
    CapabilityMode,
    ContentType,
    CopyMode,
    GranteeType,
)

ModelT = TypeVar("ModelT", bound=BaseModel)
EnumT = TypeVar("EnumT", bound=StrEnum)


class RequestError(Exception):
    """Request could not be parsed; carries the 400 response body."""

    def __init__(self, body: dict) -> None:
        self.body = body
        super().__init__(body.get("error", "Bad request"))


class _Body(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CapabilityIn(_Body):
    capability: Capability
    mode: CapabilityMode = CapabilityMode.ALLOW

    def to_domain(self) -> CapabilityGrant:
        return CapabilityGrant(self.capability, self.mode)


class GranteeIn(_Body):
    type: GranteeType
    id: str = Field(min_length=1)

    def to_domain(self) -> Grantee:
        return Grantee(self.type, self.id)


class GrantRequest(_Body):
    """PUT /v1/content/{content_type}/{content_id}/permissions"""

    grantee_type: GranteeType
    grantee_id: str = Field(min_length=1)
    capabilities: list[CapabilityIn] | None = None
    template: str | None = None

    def capability_grants(self) -> list[CapabilityGrant] | None:
        if self.capabilities is None:
            return None
        return [c.to_domain() for c in self.capabilities]


class CopyRequest(_Body):
    """POST /v1/permissions/copy"""

    source_type: ContentType
    source_id: str = Field(min_length=1)
    target_type: ContentType
    target_id: str = Field(min_length=1)
    copy_mode: CopyMode | None = None


class BulkRequestBody(_Body):
    """POST /v1/permissions/bulk"""

    operation: BulkOperation
    content_type: ContentType
    content_ids: list[str]
    grantee: GranteeIn | None = None
    capabilities: list[CapabilityIn] | None = None
    template: str | None = None
    source_content_id: str | None = None
    source_content_type: ContentType | None = None
    copy_mode: CopyMode | None = None

    def to_domain(self, default_copy_mode: CopyMode) -> BulkRequest:
        return BulkRequest(
            operation=self.operation,
            content_type=self.content_type,
            content_ids=list(self.content_ids),
            grantee=self.grantee.to_domain() if self.grantee else None,
            capabilities=[c.to_domain() for c in self.capabilities] if self.capabilities else None,
            template=self.template,
            source_content_id=self.source_content_id,
            source_content_type=self.source_content_type,
            copy_mode=self.copy_mode or default_copy_mode,
        )


async def parse_body(req: falcon.asgi.Request, model: type[ModelT]) -> ModelT:
    """Validate the JSON body against ``model``.

    Raises:
        RequestError: missing or invalid body.
    """
    media = await req.get_media(default_when_empty=None)
    if media is None:
        raise RequestError({"error": "Request body is required"})
    try:
        return model.model_validate(media)
    except PydanticValidationError as e:
        raise RequestError(
            {
                "error": "Invalid request body",
                "details": e.errors(include_url=False, include_context=False),
            }
        ) from e


def parse_enum(enum_cls: type[EnumT], value: str, field: str) -> EnumT:
    """Parse a path or query value into ``enum_cls``.

    Raises:
        RequestError: ``value`` is not a member.
    """
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise RequestError({"error": f"Invalid {field}: {value!r} (expected one of {allowed})"}) from None
