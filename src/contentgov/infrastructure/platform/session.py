"""Platform session - personal access token sign-in per operation."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from contentgov.config import Settings
from contentgov.domain.exceptions import RepositoryError
from contentgov.infrastructure.platform.content_repository import RestContentRepository

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Tableau-Auth"


class RestPlatformSession:
    """Signed-in site id plus the repository bound to its client."""

    def __init__(self, site_id: str, content: RestContentRepository) -> None:
        self._site_id = site_id
        self._content = content

    @property
    def site_id(self) -> str:
        return self._site_id

    @property
    def content(self) -> RestContentRepository:
        return self._content


def api_base_url(settings: Settings) -> str:
    return f"{settings.platform_url.rstrip('/')}/api/{settings.platform_api_version}"


async def sign_in(client: httpx.AsyncClient, settings: Settings) -> tuple[str, str]:
    """Sign in with the personal access token; return (token, site id)."""
    body = {
        "credentials": {
            "personalAccessTokenName": settings.platform_pat_name,
            "personalAccessTokenSecret": settings.platform_pat_secret,
            "site": {"contentUrl": settings.platform_site_content_url},
        }
    }
    try:
        response = await client.post("/auth/signin", json=body)
    except httpx.HTTPError as exc:
        raise RepositoryError(f"Sign-in failed: {exc}") from exc
    if response.is_error:
        raise RepositoryError(
            f"Sign-in rejected with status {response.status_code}",
            status_code=response.status_code,
        )
    credentials = response.json().get("credentials", {})
    token = credentials.get("token")
    site_id = credentials.get("site", {}).get("id")
    if not token or not site_id:
        raise RepositoryError("Sign-in response is missing the token or site id")
    return token, site_id


def create_session_factory(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
):
    """Create a PlatformSessionFactory (async context manager per operation).

    ``transport`` replaces the network transport, e.g. ``httpx.MockTransport``.
    """

    @asynccontextmanager
    async def factory() -> AsyncIterator[RestPlatformSession]:
        async with httpx.AsyncClient(
            base_url=api_base_url(settings),
            headers={"Accept": "application/json"},
            timeout=settings.platform_timeout_seconds,
            transport=transport,
        ) as client:
            token, site_id = await sign_in(client, settings)
            client.headers[AUTH_HEADER] = token
            logger.debug("Signed in to site %s", site_id)
            try:
                yield RestPlatformSession(site_id, RestContentRepository(client))
            finally:
                try:
                    await client.post("/auth/signout")
                except httpx.HTTPError as exc:
                    logger.warning("Sign-out from site %s failed: %s", site_id, exc)

    return factory
