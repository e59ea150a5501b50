import os

import httpx
import pytest
from fastapi.testclient import TestClient

# Pin configuration before the service packages read the environment.
os.environ["RESOLVER_BASE_URL"] = "http://resolver.test"
os.environ["RESOLVER_TIMEOUT_S"] = "2.0"
os.environ["LOG_JSON"] = "false"
os.environ["ENABLE_METRICS"] = "true"

from gateway_service.config import GatewaySettings  # noqa: E402
from gateway_service.main import create_app as create_gateway_app  # noqa: E402
from resolver_service.main import create_app as create_resolver_app  # noqa: E402


@pytest.fixture
def resolver_app():
    return create_resolver_app()


@pytest.fixture
def resolver_client(resolver_app) -> TestClient:
    return TestClient(resolver_app)


@pytest.fixture
def gateway_settings() -> GatewaySettings:
    return GatewaySettings(resolver_base_url="http://resolver.test", resolver_timeout_s=2.0)


@pytest.fixture
def gateway_client(resolver_app, gateway_settings) -> TestClient:
    """Gateway wired to an in-process resolver over ASGI."""
    transport = httpx.ASGITransport(app=resolver_app)
    return TestClient(create_gateway_app(gateway_settings, resolver_transport=transport))


@pytest.fixture
def make_gateway_client(gateway_settings):
    def _make(handler, app_settings: GatewaySettings | None = None) -> TestClient:
        app = create_gateway_app(
            app_settings or gateway_settings,
            resolver_transport=httpx.MockTransport(handler),
        )
        return TestClient(app)

    return _make
