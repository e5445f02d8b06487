"""Bulk permissions API resource."""

import falcon.asgi

from contentgov.application.engine import PermissionEngine
from contentgov.domain.value_objects import CopyMode
from contentgov.interfaces.api.errors import send_result
from contentgov.interfaces.api.resources.schemas import BulkRequestBody, RequestError, parse_body


class BulkPermissionsResource:
    """POST /v1/permissions/bulk - grant, revoke or copy across many items.

    Per-item failures are part of a 200 response; only batch-level
    problems produce an error status.
    """

    def __init__(self, engine: PermissionEngine, default_copy_mode: CopyMode = CopyMode.REPLACE) -> None:
        self._engine = engine
        self._default_copy_mode = default_copy_mode

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await parse_body(req, BulkRequestBody)
        except RequestError as e:
            resp.status = falcon.HTTP_400
            resp.media = e.body
            return

        result = await self._engine.bulk(body.to_domain(self._default_copy_mode))
        send_result(resp, result)
