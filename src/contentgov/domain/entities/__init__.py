"""Domain entities."""

from contentgov.domain.entities.content import ContentRef
from contentgov.domain.entities.grant import Grant, ensure_unique_capabilities, find_grant
from contentgov.domain.entities.grantee import UNKNOWN_GRANTEE_NAME, Grantee

__all__ = [
    "UNKNOWN_GRANTEE_NAME",
    "ContentRef",
    "Grant",
    "Grantee",
    "ensure_unique_capabilities",
    "find_grant",
]
