"""Content permissions API resources."""

import falcon.asgi

from contentgov.application.engine import PermissionEngine
from contentgov.domain.value_objects import Capability, ContentType, GranteeType
from contentgov.interfaces.api.errors import send_result
from contentgov.interfaces.api.resources.schemas import (
    GrantRequest,
    RequestError,
    parse_body,
    parse_enum,
)


class ContentPermissionsResource:
    """GET/PUT /v1/content/{content_type}/{content_id}/permissions - list and grant."""

    def __init__(self, engine: PermissionEngine) -> None:
        self._engine = engine

    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        content_type: str,
        content_id: str,
    ) -> None:
        """List grants with grantee names and access levels."""
        try:
            ctype = parse_enum(ContentType, content_type, "content type")
        except RequestError as e:
            resp.status = falcon.HTTP_400
            resp.media = e.body
            return
        send_result(resp, await self._engine.list_permissions(ctype, content_id))

    async def on_put(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        content_type: str,
        content_id: str,
    ) -> None:
        """Grant capabilities or a template to one grantee."""
        try:
            ctype = parse_enum(ContentType, content_type, "content type")
            body = await parse_body(req, GrantRequest)
        except RequestError as e:
            resp.status = falcon.HTTP_400
            resp.media = e.body
            return

        result = await self._engine.grant(
            ctype,
            content_id,
            body.grantee_type,
            body.grantee_id,
            capabilities=body.capability_grants(),
            template=body.template,
        )
        send_result(resp, result)


class GranteePermissionsResource:
    """DELETE /v1/content/{content_type}/{content_id}/permissions/{grantee_type}/{grantee_id}"""

    def __init__(self, engine: PermissionEngine) -> None:
        self._engine = engine

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        content_type: str,
        content_id: str,
        grantee_type: str,
        grantee_id: str,
    ) -> None:
        """Revoke ``?capability=`` names, or everything when none are given."""
        try:
            ctype = parse_enum(ContentType, content_type, "content type")
            gtype = parse_enum(GranteeType, grantee_type, "grantee type")
            names = req.get_param_as_list("capability") or []
            capabilities = [parse_enum(Capability, n, "capability") for n in names] or None
        except RequestError as e:
            resp.status = falcon.HTTP_400
            resp.media = e.body
            return

        result = await self._engine.revoke(ctype, content_id, gtype, grantee_id, capabilities)
        send_result(resp, result)
