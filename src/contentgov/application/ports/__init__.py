"""Application ports - interfaces for external adapters."""

from contentgov.application.ports.content_repository import ContentRepository
from contentgov.application.ports.platform_session import (
    PlatformSession,
    PlatformSessionFactory,
)

__all__ = [
    "ContentRepository",
    "PlatformSession",
    "PlatformSessionFactory",
]
