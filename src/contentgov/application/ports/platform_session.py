"""Platform session port - one authenticated connection to one site."""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from contentgov.application.ports.content_repository import ContentRepository


class PlatformSession(Protocol):
    """Signed-in session - site id plus repository access."""

    @property
    def site_id(self) -> str: ...

    @property
    def content(self) -> ContentRepository: ...


class PlatformSessionFactory(Protocol):
    """Factory opening a session for the duration of one operation."""

    def __call__(self) -> AbstractAsyncContextManager[PlatformSession]: ...
