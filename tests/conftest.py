import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.handlers.describe_handler import get_inference_provider
from app.main import create_app
from tests.helpers import StubProvider


@pytest.fixture
def settings():
    return Settings(
        inference_provider="cloudflare",
        cloudflare_account_id="test_account",
        cloudflare_api_token="test_token",
    )


@pytest.fixture
def stub_provider():
    return StubProvider()


@pytest.fixture
def make_client(settings):
    """Build a TestClient whose inference backend is the given provider."""

    def _make(provider, raise_server_exceptions=True):
        app = create_app(settings)
        app.dependency_overrides[get_inference_provider] = lambda: provider
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return _make


@pytest.fixture
def client(make_client, stub_provider):
    return make_client(stub_provider)
