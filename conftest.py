# Ensure tests import modules from this service directory first,
# so `import app.server` and `from app import ...` behave consistently.
import os
import sys

import pytest
from fastapi.testclient import TestClient

SERVICE_ROOT = os.path.dirname(__file__)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from app.server import create_app  # noqa: E402
from app.settings import ProxySettings  # noqa: E402
from app.utils_tests.upstream_mock import UpstreamMock  # noqa: E402


@pytest.fixture
def settings():
    """Settings with a fake credential and no proxy-local rate limit."""
    return ProxySettings(
        api_key="test-api-key",
        environment="test",
        upstream_base_url="https://upstream.test/v1",
        upstream_timeout=1.0,
        rate_limit_enabled=False,
    )


@pytest.fixture
def upstream():
    return UpstreamMock(body={"ok": True})


@pytest.fixture
def client(settings, upstream):
    app = create_app(settings, transport=upstream.transport, instrument=False)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
