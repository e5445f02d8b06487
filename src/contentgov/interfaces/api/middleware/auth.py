"""Auth middleware - static bearer token check."""

import hmac

import falcon.asgi

PUBLIC_PATHS = frozenset({"/v1/health", "/v1/health/ready"})


class ApiTokenMiddleware:
    """Rejects requests without ``Authorization: Bearer <api_token>``.

    An empty token disables the check. Health endpoints are always public.
    """

    def __init__(self, api_token: str = "") -> None:
        self._token = api_token

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        if not self._token or req.path in PUBLIC_PATHS:
            return
        auth = req.get_header("Authorization") or ""
        scheme, _, token = auth.partition(" ")
        if scheme.lower() != "bearer" or not hmac.compare_digest(token, self._token):
            resp.status = falcon.HTTP_401
            resp.media = {"error": "Unauthorized"}
            resp.complete = True
