"""Application entry point and composition root."""

import logging

import uvicorn

from contentgov import __version__
from contentgov.application.engine import PermissionEngine
from contentgov.application.ports import PlatformSessionFactory
from contentgov.config import Settings, get_settings
from contentgov.infrastructure.platform.session import create_session_factory
from contentgov.interfaces.api.app import create_app
from contentgov.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_engine(
    settings: Settings, session_factory: PlatformSessionFactory | None = None
) -> PermissionEngine:
    """Build the permission engine; the REST session factory is the default."""
    return PermissionEngine(
        session_factory or create_session_factory(settings),
        default_copy_mode=settings.default_copy_mode,
        medium_impact_threshold=settings.bulk_medium_impact_threshold,
        high_impact_threshold=settings.bulk_high_impact_threshold,
        max_items=settings.bulk_max_items,
    )


def create_contentgov_app(
    settings: Settings | None = None,
    session_factory: PlatformSessionFactory | None = None,
):
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    engine = create_engine(settings, session_factory)
    return create_app(
        engine,
        api_token=settings.api_token,
        default_copy_mode=settings.default_copy_mode,
        platform_url=settings.platform_url,
    )


def main() -> None:
    """CLI entry point - run the HTTP server."""
    settings = get_settings()
    setup_logging(settings)
    logger.info("contentgov v%s starting (%s)", __version__, settings.environment)
    uvicorn.run(
        create_contentgov_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
