"""Unit tests for the REST content repository and session factory."""

import json
import logging

import httpx
import pytest

from contentgov.application.dto.bulk_dto import BulkRequest
from contentgov.application.engine import PermissionEngine
from contentgov.config import Settings
from contentgov.domain.entities import Grant, Grantee
from contentgov.domain.exceptions import (
    ContentNotFound,
    GranteeNotFound,
    RepositoryError,
)
from contentgov.domain.value_objects import Capability, CapabilityGrant, ContentType
from contentgov.infrastructure.platform.content_repository import (
    RestContentRepository,
    grant_body,
    parse_grants,
)
from contentgov.infrastructure.platform.session import create_session_factory

BASE = "https://bi.example.com/api/3.21"
SITE = "site-abc"

PERMISSIONS = {
    "permissions": {
        "workbook": {"id": "wb-1"},
        "granteeCapabilities": [
            {
                "user": {"id": "user-9"},
                "capabilities": {
                    "capability": [
                        {"name": "Read", "mode": "Allow"},
                        {"name": "Write", "mode": "Deny"},
                    ]
                },
            },
            {
                "group": {"id": "group-1"},
                "capabilities": {"capability": [{"name": "Filter", "mode": "Allow"}]},
            },
        ],
    }
}


class Recorder:
    """MockTransport handler that records requests and serves canned routes."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.routes:
            return self.routes[key]
        return httpx.Response(404, json={"error": {"summary": "Not Found", "detail": key[1]}})


def _repo(recorder: Recorder) -> RestContentRepository:
    client = httpx.AsyncClient(base_url=BASE, transport=httpx.MockTransport(recorder))
    return RestContentRepository(client)


def _path(suffix: str) -> str:
    return f"/api/3.21/sites/{SITE}{suffix}"


def test_parse_grants() -> None:
    grants = parse_grants(PERMISSIONS)
    assert [g.grantee for g in grants] == [Grantee("user", "user-9"), Grantee("group", "group-1")]
    assert grants[0].capabilities == frozenset(
        {CapabilityGrant("Read"), CapabilityGrant("Write", "Deny")}
    )


def test_grant_body_shape() -> None:
    body = grant_body(Grantee("group", "g-1"), [CapabilityGrant("Write"), CapabilityGrant("Read")])
    entry = body["permissions"]["granteeCapabilities"][0]
    assert entry["group"] == {"id": "g-1"}
    assert entry["capabilities"]["capability"] == [
        {"name": "Read", "mode": "Allow"},
        {"name": "Write", "mode": "Allow"},
    ]


@pytest.mark.asyncio
async def test_get_content_by_id() -> None:
    recorder = Recorder(
        {("GET", _path("/workbooks/wb-1")): httpx.Response(200, json={"workbook": {"id": "wb-1", "name": "Sales"}})}
    )
    content = await _repo(recorder).get_content(SITE, ContentType.WORKBOOK, "wb-1")
    assert content.name == "Sales"
    assert content.content_type == ContentType.WORKBOOK


@pytest.mark.asyncio
async def test_get_project_uses_filtered_listing() -> None:
    recorder = Recorder(
        {
            ("GET", _path("/projects")): httpx.Response(
                200, json={"projects": {"project": [{"id": "p-1", "name": "Finance"}]}}
            )
        }
    )
    content = await _repo(recorder).get_content(SITE, "project", "p-1")
    assert content.name == "Finance"
    assert recorder.requests[0].url.params["filter"] == "id:eq:p-1"


@pytest.mark.asyncio
async def test_get_project_empty_listing_is_not_found() -> None:
    recorder = Recorder(
        {("GET", _path("/projects")): httpx.Response(200, json={"projects": {"project": []}})}
    )
    with pytest.raises(ContentNotFound):
        await _repo(recorder).get_content(SITE, "project", "p-404")


@pytest.mark.asyncio
async def test_get_content_404() -> None:
    with pytest.raises(ContentNotFound, match="datasource 'ds-9'"):
        await _repo(Recorder({})).get_content(SITE, "datasource", "ds-9")


@pytest.mark.asyncio
async def test_server_error_is_repository_error() -> None:
    recorder = Recorder(
        {
            ("GET", _path("/views/v-1/permissions")): httpx.Response(
                500, json={"error": {"summary": "Internal Error", "detail": "boom"}}
            )
        }
    )
    with pytest.raises(RepositoryError) as exc_info:
        await _repo(recorder).get_grants(SITE, "view", "v-1")
    assert exc_info.value.status_code == 500
    assert "boom" in str(exc_info.value)


@pytest.mark.asyncio
async def test_transport_error_is_repository_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    repo = RestContentRepository(
        httpx.AsyncClient(base_url=BASE, transport=httpx.MockTransport(handler))
    )
    with pytest.raises(RepositoryError, match="connection refused"):
        await repo.get_content(SITE, "flow", "fl-1")


@pytest.mark.asyncio
async def test_apply_grant_puts_body() -> None:
    recorder = Recorder(
        {("PUT", _path("/workbooks/wb-1/permissions")): httpx.Response(200, json=PERMISSIONS)}
    )
    await _repo(recorder).apply_grant(
        SITE, "workbook", "wb-1", Grantee("user", "user-9"), [CapabilityGrant("Read")]
    )
    body = json.loads(recorder.requests[0].content)
    assert body == grant_body(Grantee("user", "user-9"), [CapabilityGrant("Read")])


@pytest.mark.asyncio
async def test_apply_grant_404_is_grantee_not_found() -> None:
    with pytest.raises(GranteeNotFound):
        await _repo(Recorder({})).apply_grant(
            SITE, "workbook", "wb-1", Grantee("user", "ghost"), [CapabilityGrant("Read")]
        )


@pytest.mark.asyncio
async def test_revoke_capabilities_deletes_in_held_mode() -> None:
    perms = _path("/workbooks/wb-1/permissions")
    recorder = Recorder(
        {
            ("GET", perms): httpx.Response(200, json=PERMISSIONS),
            ("DELETE", f"{perms}/users/user-9/Write/Deny"): httpx.Response(204),
        }
    )
    await _repo(recorder).revoke_capabilities(
        SITE, "workbook", "wb-1", Grantee("user", "user-9"), [Capability.WRITE, Capability.DELETE]
    )
    deletes = [r.url.path for r in recorder.requests if r.method == "DELETE"]
    assert deletes == [f"{perms}/users/user-9/Write/Deny"]


@pytest.mark.asyncio
async def test_revoke_all_for_group() -> None:
    perms = _path("/workbooks/wb-1/permissions")
    recorder = Recorder(
        {
            ("GET", perms): httpx.Response(200, json=PERMISSIONS),
            ("DELETE", f"{perms}/groups/group-1/Filter/Allow"): httpx.Response(204),
        }
    )
    await _repo(recorder).revoke_all_for_grantee(
        SITE, "workbook", "wb-1", Grantee("group", "group-1")
    )
    assert [r.method for r in recorder.requests] == ["GET", "DELETE"]


@pytest.mark.asyncio
async def test_resolve_user_and_group() -> None:
    recorder = Recorder(
        {
            ("GET", _path("/users/user-9")): httpx.Response(200, json={"user": {"name": "Ann"}}),
            ("GET", _path("/groups")): httpx.Response(
                200, json={"groups": {"group": [{"id": "group-1", "name": "Analysts"}]}}
            ),
        }
    )
    repo = _repo(recorder)
    assert await repo.resolve_grantee(SITE, "user", "user-9") == "Ann"
    assert await repo.resolve_grantee(SITE, "group", "group-1") == "Analysts"
    with pytest.raises(GranteeNotFound):
        await repo.resolve_grantee(SITE, "user", "ghost")


@pytest.mark.asyncio
async def test_session_factory_signs_in_and_out() -> None:
    seen: list[tuple[str, str, str | None]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.headers.get("X-Tableau-Auth")))
        if request.url.path.endswith("/auth/signin"):
            body = json.loads(request.content)
            assert body["credentials"]["personalAccessTokenName"] == "bot"
            return httpx.Response(
                200, json={"credentials": {"token": "tok-1", "site": {"id": SITE}}}
            )
        if request.url.path.endswith("/auth/signout"):
            return httpx.Response(204)
        return httpx.Response(200, json={"workbook": {"id": "wb-1", "name": "Sales"}})

    settings = Settings(
        _env_file=None,
        platform_url="https://bi.example.com/",
        platform_pat_name="bot",
        platform_pat_secret="secret",
    )
    factory = create_session_factory(settings, transport=httpx.MockTransport(handler))

    async with factory() as session:
        assert session.site_id == SITE
        content = await session.content.get_content(session.site_id, "workbook", "wb-1")

    assert content.name == "Sales"
    assert [s[1] for s in seen] == [
        "/api/3.21/auth/signin",
        _path("/workbooks/wb-1"),
        "/api/3.21/auth/signout",
    ]
    assert seen[1][2] == "tok-1"


@pytest.mark.asyncio
async def test_session_factory_rejected_sign_in() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(401))
    factory = create_session_factory(Settings(_env_file=None), transport=transport)
    with pytest.raises(RepositoryError) as exc_info:
        async with factory():
            pass
    assert exc_info.value.status_code == 401


DATASOURCE_PERMISSIONS = {
    "permissions": {
        "datasource": {"id": "ds-1"},
        "granteeCapabilities": [
            {
                "user": {"id": "user-9"},
                "capabilities": {
                    "capability": [
                        {"name": "Read", "mode": "Allow"},
                        {"name": "Connect", "mode": "Allow"},
                    ]
                },
            },
            {
                "group": {"id": "group-2"},
                "capabilities": {"capability": [{"name": "ExtractRefresh", "mode": "Allow"}]},
            },
        ],
    }
}


def test_parse_grants_skips_unmanaged_capabilities(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        grants = parse_grants(DATASOURCE_PERMISSIONS)
    assert grants == [
        Grant(grantee=Grantee("user", "user-9"), capabilities=frozenset({CapabilityGrant("Read")}))
    ]
    assert "Connect" in caplog.text
    assert "ExtractRefresh" in caplog.text


def test_parse_grants_missing_grantee_id() -> None:
    payload = {"permissions": {"granteeCapabilities": [{"user": {}, "capabilities": {}}]}}
    with pytest.raises(RepositoryError, match="Malformed"):
        parse_grants(payload)


def test_parse_grants_unknown_mode() -> None:
    payload = {
        "permissions": {
            "granteeCapabilities": [
                {
                    "user": {"id": "user-9"},
                    "capabilities": {"capability": [{"name": "Read", "mode": "Maybe"}]},
                }
            ]
        }
    }
    with pytest.raises(RepositoryError, match="Maybe"):
        parse_grants(payload)


@pytest.mark.asyncio
async def test_get_grants_datasource_with_connect() -> None:
    recorder = Recorder(
        {
            ("GET", _path("/datasources/ds-1/permissions")): httpx.Response(
                200, json=DATASOURCE_PERMISSIONS
            )
        }
    )
    grants = await _repo(recorder).get_grants(SITE, "datasource", "ds-1")
    assert [g.grantee for g in grants] == [Grantee("user", "user-9")]


@pytest.mark.asyncio
async def test_non_json_body_is_repository_error() -> None:
    recorder = Recorder(
        {
            ("GET", _path("/workbooks/wb-1/permissions")): httpx.Response(
                200, content=b"<html>maintenance</html>"
            )
        }
    )
    with pytest.raises(RepositoryError, match="non-JSON") as exc_info:
        await _repo(recorder).get_grants(SITE, "workbook", "wb-1")
    assert exc_info.value.status_code == 200


@pytest.mark.asyncio
async def test_revoke_all_deletes_unmanaged_capabilities() -> None:
    perms = _path("/datasources/ds-1/permissions")
    recorder = Recorder(
        {
            ("GET", perms): httpx.Response(200, json=DATASOURCE_PERMISSIONS),
            ("DELETE", f"{perms}/users/user-9/Read/Allow"): httpx.Response(204),
            ("DELETE", f"{perms}/users/user-9/Connect/Allow"): httpx.Response(204),
        }
    )
    await _repo(recorder).revoke_all_for_grantee(
        SITE, "datasource", "ds-1", Grantee("user", "user-9")
    )
    deletes = [r.url.path for r in recorder.requests if r.method == "DELETE"]
    assert deletes == [f"{perms}/users/user-9/Read/Allow", f"{perms}/users/user-9/Connect/Allow"]


@pytest.mark.asyncio
async def test_engine_bulk_revoke_over_rest_accounts_for_every_item() -> None:
    deleted: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/auth/signin"):
            return httpx.Response(
                200, json={"credentials": {"token": "tok-1", "site": {"id": SITE}}}
            )
        if path.endswith("/auth/signout"):
            return httpx.Response(204)
        if path == _path("/users/user-9"):
            return httpx.Response(200, json={"user": {"name": "Ann"}})
        if request.method == "DELETE":
            deleted.append(path)
            return httpx.Response(204)
        if path == _path("/datasources/ds-1/permissions"):
            return httpx.Response(200, json=DATASOURCE_PERMISSIONS)
        if path == _path("/datasources/ds-2/permissions"):
            return httpx.Response(200, content=b"not json")
        content_id = path.rsplit("/", 1)[-1]
        return httpx.Response(200, json={"datasource": {"id": content_id, "name": content_id}})

    factory = create_session_factory(
        Settings(_env_file=None, platform_url="https://bi.example.com"),
        transport=httpx.MockTransport(handler),
    )
    engine = PermissionEngine(factory)

    result = await engine.bulk(
        BulkRequest(
            operation="revoke",
            content_type="datasource",
            content_ids=["ds-1", "ds-2"],
            grantee=Grantee("user", "user-9"),
        )
    )

    assert result.ok
    assert [o["id"] for o in result.data["successful"]] == ["ds-1"]
    assert result.data["failed"][0]["id"] == "ds-2"
    assert result.data["failed"][0]["reason"] == "RepositoryError"
    assert len(deleted) == 2


@pytest.mark.asyncio
async def test_engine_lists_datasource_with_unmanaged_capability() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/auth/signin"):
            return httpx.Response(
                200, json={"credentials": {"token": "tok-1", "site": {"id": SITE}}}
            )
        if path.endswith("/auth/signout"):
            return httpx.Response(204)
        if path == _path("/users/user-9"):
            return httpx.Response(200, json={"user": {"name": "Ann"}})
        if path == _path("/groups"):
            return httpx.Response(200, json={"groups": {"group": []}})
        if path == _path("/datasources/ds-1/permissions"):
            return httpx.Response(200, json=DATASOURCE_PERMISSIONS)
        return httpx.Response(200, json={"datasource": {"id": "ds-1", "name": "Orders"}})

    factory = create_session_factory(
        Settings(_env_file=None, platform_url="https://bi.example.com"),
        transport=httpx.MockTransport(handler),
    )

    result = await PermissionEngine(factory).list_permissions("datasource", "ds-1")

    assert result.ok
    assert result.error is None
