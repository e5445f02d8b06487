"""Content repository over the platform REST API (JSON)."""

import logging
from collections.abc import Callable, Collection
from typing import Any

import httpx

from contentgov.domain.entities import ContentRef, Grant, Grantee
from contentgov.domain.exceptions import (
    ContentGovError,
    ContentNotFound,
    GranteeNotFound,
    RepositoryError,
)
from contentgov.domain.value_objects import (
    Capability,
    CapabilityGrant,
    CapabilityMode,
    ContentType,
    GranteeType,
)

logger = logging.getLogger(__name__)

# ContentType -> (collection path, singular JSON key)
ENDPOINTS: dict[ContentType, tuple[str, str]] = {
    ContentType.WORKBOOK: ("workbooks", "workbook"),
    ContentType.DATASOURCE: ("datasources", "datasource"),
    ContentType.PROJECT: ("projects", "project"),
    ContentType.VIEW: ("views", "view"),
    ContentType.FLOW: ("flows", "flow"),
}

# Projects have no single-item GET; they are looked up through a filtered listing.
_LISTED_BY_FILTER = frozenset({ContentType.PROJECT})

_GRANTEE_KEYS: dict[GranteeType, str] = {
    GranteeType.USER: "user",
    GranteeType.GROUP: "group",
}


def _error_message(response: httpx.Response) -> str:
    try:
        error = response.json().get("error", {})
    except ValueError:
        error = {}
    summary = error.get("summary") or response.reason_phrase
    detail = error.get("detail")
    return f"{summary}: {detail}" if detail else summary


def _grantee_entries(payload: dict[str, Any]) -> list[tuple[Grantee, list[tuple[str, str]]]]:
    """Raw ``(grantee, [(name, mode), ...])`` pairs from a ``permissions`` body.

    Raises:
        RepositoryError: the body does not have the expected shape.
    """
    result: list[tuple[Grantee, list[tuple[str, str]]]] = []
    try:
        entries = payload.get("permissions", {}).get("granteeCapabilities", [])
        for entry in entries:
            grantee: Grantee | None = None
            for grantee_type, key in _GRANTEE_KEYS.items():
                if key in entry:
                    grantee = Grantee(grantee_type, entry[key]["id"])
                    break
            if grantee is None:
                logger.warning("Skipping grantee entry without user or group: %s", entry)
                continue
            raw = entry.get("capabilities", {}).get("capability", [])
            result.append((grantee, [(c["name"], c["mode"]) for c in raw]))
    except (AttributeError, KeyError, TypeError) as exc:
        raise RepositoryError(f"Malformed permissions payload: {exc!r}") from exc
    return result


def parse_grants(payload: dict[str, Any]) -> list[Grant]:
    """Build grants from a ``permissions`` response body.

    Capability names this service does not manage are skipped with a warning.
    """
    grants: list[Grant] = []
    for grantee, raw in _grantee_entries(payload):
        capabilities: set[CapabilityGrant] = set()
        for name, mode in raw:
            try:
                capability = Capability(name)
            except ValueError:
                logger.warning(
                    "Skipping unmanaged capability %s:%s for %s '%s'",
                    name,
                    mode,
                    grantee.type.value,
                    grantee.id,
                )
                continue
            try:
                capabilities.add(CapabilityGrant(capability, CapabilityMode(mode)))
            except ValueError as exc:
                raise RepositoryError(f"Unknown capability mode '{mode}' for {name}") from exc
        if not capabilities:
            continue
        try:
            grants.append(Grant(grantee=grantee, capabilities=frozenset(capabilities)))
        except ValueError as exc:
            raise RepositoryError(f"Conflicting capabilities for {grantee.id}: {exc}") from exc
    return grants


def grant_body(grantee: Grantee, capabilities: Collection[CapabilityGrant]) -> dict[str, Any]:
    """Request body adding ``capabilities`` for ``grantee``."""
    return {
        "permissions": {
            "granteeCapabilities": [
                {
                    _GRANTEE_KEYS[grantee.type]: {"id": grantee.id},
                    "capabilities": {
                        "capability": [
                            {"name": c.capability.value, "mode": c.mode.value}
                            for c in sorted(capabilities)
                        ]
                    },
                }
            ]
        }
    }


class RestContentRepository:
    """ContentRepository implementation backed by ``httpx.AsyncClient``.

    The client must already carry the base URL ``{server}/api/{version}``
    and the session's auth header. Content-type dispatch happens only here,
    through ``ENDPOINTS``.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        not_found: Callable[[], ContentGovError] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise RepositoryError(f"{method} {path} failed: {exc}") from exc
        if response.status_code == 404 and not_found is not None:
            raise not_found()
        if response.is_error:
            raise RepositoryError(
                f"{method} {path} returned {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise RepositoryError(
                f"{method} {path} returned a non-JSON body", status_code=response.status_code
            ) from exc
        if not isinstance(data, dict):
            raise RepositoryError(
                f"{method} {path} returned an unexpected body", status_code=response.status_code
            )
        return data

    def _permissions_path(self, site_id: str, content_type: ContentType, content_id: str) -> str:
        collection, _ = ENDPOINTS[ContentType(content_type)]
        return f"/sites/{site_id}/{collection}/{content_id}/permissions"

    async def get_content(
        self, site_id: str, content_type: ContentType, content_id: str
    ) -> ContentRef:
        content_type = ContentType(content_type)
        collection, key = ENDPOINTS[content_type]

        def missing() -> ContentGovError:
            return ContentNotFound(content_type.value, content_id)

        if content_type in _LISTED_BY_FILTER:
            data = await self._request(
                "GET",
                f"/sites/{site_id}/{collection}",
                params={"filter": f"id:eq:{content_id}"},
                not_found=missing,
            )
            items = data.get(collection, {}).get(key, [])
            if not items:
                raise missing()
            item = items[0]
        else:
            data = await self._request(
                "GET", f"/sites/{site_id}/{collection}/{content_id}", not_found=missing
            )
            item = data.get(key) or {}
        return ContentRef(content_type, item.get("id", content_id), item.get("name", ""))

    async def get_grants(
        self, site_id: str, content_type: ContentType, content_id: str
    ) -> list[Grant]:
        content_type = ContentType(content_type)
        data = await self._request(
            "GET",
            self._permissions_path(site_id, content_type, content_id),
            not_found=lambda: ContentNotFound(content_type.value, content_id),
        )
        return parse_grants(data)

    async def apply_grant(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
        capabilities: Collection[CapabilityGrant],
    ) -> None:
        await self._request(
            "PUT",
            self._permissions_path(site_id, content_type, content_id),
            json=grant_body(grantee, capabilities),
            not_found=lambda: GranteeNotFound(grantee.type.value, grantee.id),
        )

    async def revoke_capabilities(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
        capabilities: list[Capability],
    ) -> None:
        """DELETE each named capability in the mode the grantee holds it."""
        names = {Capability(c) for c in capabilities}
        grants = await self.get_grants(site_id, content_type, content_id)
        held = [
            (c.capability.value, c.mode.value)
            for grant in grants
            if grant.grantee == grantee
            for c in grant.sorted_capabilities()
            if c.capability in names
        ]
        await self._delete_capabilities(site_id, content_type, content_id, grantee, held)

    async def revoke_all_for_grantee(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
    ) -> None:
        """DELETE every capability the grantee holds, unmanaged names included."""
        content_type = ContentType(content_type)
        data = await self._request(
            "GET",
            self._permissions_path(site_id, content_type, content_id),
            not_found=lambda: ContentNotFound(content_type.value, content_id),
        )
        held = [
            pair
            for entry_grantee, raw in _grantee_entries(data)
            if entry_grantee == grantee
            for pair in raw
        ]
        await self._delete_capabilities(site_id, content_type, content_id, grantee, held)

    async def _delete_capabilities(
        self,
        site_id: str,
        content_type: ContentType,
        content_id: str,
        grantee: Grantee,
        capabilities: list[tuple[str, str]],
    ) -> None:
        base = self._permissions_path(site_id, content_type, content_id)
        segment = f"{_GRANTEE_KEYS[grantee.type]}s"
        for name, mode in capabilities:
            await self._request("DELETE", f"{base}/{segment}/{grantee.id}/{name}/{mode}")

    async def resolve_grantee(
        self, site_id: str, grantee_type: GranteeType, grantee_id: str
    ) -> str:
        grantee_type = GranteeType(grantee_type)

        def missing() -> ContentGovError:
            return GranteeNotFound(grantee_type.value, grantee_id)

        if grantee_type == GranteeType.USER:
            data = await self._request(
                "GET", f"/sites/{site_id}/users/{grantee_id}", not_found=missing
            )
            return data.get("user", {}).get("name", "")
        data = await self._request(
            "GET",
            f"/sites/{site_id}/groups",
            params={"filter": f"id:eq:{grantee_id}"},
            not_found=missing,
        )
        groups = data.get("groups", {}).get("group", [])
        if not groups:
            raise missing()
        return groups[0].get("name", "")


__all__ = ["ENDPOINTS", "RestContentRepository", "grant_body", "parse_grants"]
