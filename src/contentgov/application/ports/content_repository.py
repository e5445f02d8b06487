"""Content repository port - permission storage on the content platform."""

from collections.abc import Collection
from typing import Protocol

from contentgov.domain.entities import ContentRef, Grant, Grantee
from contentgov.domain.value_objects import (
    Capability,
    CapabilityGrant,
    ContentType,
    GranteeType,
)


class ContentRepository(Protocol):
    """Port for content lookup and grant mutation.

    Every call names its site explicitly; implementations hold no
    "current site" of their own.
    """

    async def get_content(
        self, site_id: str, content_type: ContentType, content_id: str
    ) -> ContentRef: ...

    async def get_grants(
        self, site_id: str, content_type: ContentType, content_id: str
    ) -> list[Grant]: ...

    async def apply_grant(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
        capabilities: Collection[CapabilityGrant],
    ) -> None: ...

    async def revoke_capabilities(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
        capabilities: list[Capability],
    ) -> None: ...

    async def revoke_all_for_grantee(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
    ) -> None: ...

    async def resolve_grantee(
        self, site_id: str, grantee_type: GranteeType, grantee_id: str
    ) -> str: ...
