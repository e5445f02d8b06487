"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from contentgov.application.engine import PermissionEngine
from contentgov.interfaces.api.app import create_app

API_TOKEN = "test-token"


@pytest.fixture
def engine(session_factory) -> PermissionEngine:
    return PermissionEngine(session_factory, max_items=10)


@pytest.fixture
def app(engine: PermissionEngine):
    """Falcon ASGI app over the in-memory platform session."""
    return create_app(engine, platform_url="https://bi.example.com")


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client."""
    return TestClient(app)


@pytest.fixture
def secured_client(engine: PermissionEngine) -> TestClient:
    """Test client for an app that requires the bearer token."""
    return TestClient(create_app(engine, api_token=API_TOKEN))
