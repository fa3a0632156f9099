"""
Pytest Configuration

Shared fixtures for the IoT Hub service client test suite.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest

from iothubservice.apis import ApiClient
from iothubservice.auth import StaticTokenProvider
from iothubservice.client import IoTHubServiceClient
from iothubservice.config import IoTHubServiceSettings
from tests.constants import BASE_URL, CONNECTION_STRING, STATIC_TOKEN


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: fast tests with mocked transport")


@pytest.fixture
def settings() -> IoTHubServiceSettings:
    """Settings independent of the developer's environment and .env file."""
    return IoTHubServiceSettings(
        _env_file=None,
        CONNECTION_STRING=CONNECTION_STRING,
    )


@pytest.fixture
async def api_client() -> AsyncIterator[ApiClient]:
    """ApiClient over a real httpx client for respx mocking."""
    async with httpx.AsyncClient() as http_client:
        yield ApiClient(
            http_client,
            base_url=BASE_URL,
            token_provider=StaticTokenProvider(STATIC_TOKEN),
            api_version="2020-05-31-preview",
        )


@pytest.fixture
async def hub(settings: IoTHubServiceSettings) -> AsyncIterator[IoTHubServiceClient]:
    """Facade over a real httpx client for respx mocking."""
    async with httpx.AsyncClient() as http_client:
        yield IoTHubServiceClient(
            base_url=BASE_URL,
            token_provider=StaticTokenProvider(STATIC_TOKEN),
            http_client=http_client,
            settings=settings,
        )
