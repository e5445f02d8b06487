"""Copy permissions API resource."""

import falcon.asgi

from contentgov.application.engine import PermissionEngine
from contentgov.interfaces.api.errors import send_result
from contentgov.interfaces.api.resources.schemas import CopyRequest, RequestError, parse_body


class CopyPermissionsResource:
    """POST /v1/permissions/copy - copy grants from one item to another."""

    def __init__(self, engine: PermissionEngine) -> None:
        self._engine = engine

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await parse_body(req, CopyRequest)
        except RequestError as e:
            resp.status = falcon.HTTP_400
            resp.media = e.body
            return

        result = await self._engine.copy(
            body.source_type,
            body.source_id,
            body.target_type,
            body.target_id,
            body.copy_mode,
        )
        send_result(resp, result)
