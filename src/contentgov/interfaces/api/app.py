"""Falcon ASGI application."""

import logging

import falcon
import falcon.asgi
from falcon.asgi import App

from contentgov.application.engine import PermissionEngine
from contentgov.domain.value_objects import CopyMode
from contentgov.interfaces.api.middleware.auth import ApiTokenMiddleware
from contentgov.interfaces.api.resources.bulk import BulkPermissionsResource
from contentgov.interfaces.api.resources.copy import CopyPermissionsResource
from contentgov.interfaces.api.resources.health import HealthResource
from contentgov.interfaces.api.resources.permissions import (
    ContentPermissionsResource,
    GranteePermissionsResource,
)

logger = logging.getLogger(__name__)


async def _log_exception(req, resp, ex, params) -> None:
    logger.error("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "500 Internal Server Error"}


def create_app(
    engine: PermissionEngine,
    api_token: str = "",
    default_copy_mode: CopyMode = CopyMode.REPLACE,
    platform_url: str | None = None,
) -> App:
    """Create Falcon ASGI app with routes."""
    health = HealthResource(platform_url)
    content_permissions = ContentPermissionsResource(engine)
    grantee_permissions = GranteePermissionsResource(engine)

    app = falcon.asgi.App(middleware=[ApiTokenMiddleware(api_token)])
    app.add_error_handler(Exception, _log_exception)
    app.add_route("/v1/health", health)
    app.add_route("/v1/health/ready", health, suffix="ready")
    app.add_route(
        "/v1/content/{content_type}/{content_id}/permissions", content_permissions
    )
    app.add_route(
        "/v1/content/{content_type}/{content_id}/permissions/{grantee_type}/{grantee_id}",
        grantee_permissions,
    )
    app.add_route("/v1/permissions/copy", CopyPermissionsResource(engine))
    app.add_route(
        "/v1/permissions/bulk", BulkPermissionsResource(engine, default_copy_mode)
    )
    return app
