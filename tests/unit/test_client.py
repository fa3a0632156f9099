"""Tests for the IoTHubServiceClient facade and its construction paths."""

from __future__ import annotations

import httpx
import pytest
import respx

from iothubservice.auth import SasTokenProvider
from iothubservice.client import IoTHubServiceClient, build_http_client, build_token_provider
from iothubservice.config import IoTHubServiceSettings
from iothubservice.exceptions import ConfigurationError
from tests.constants import BASE_URL, CONNECTION_STRING


async def test_from_connection_string_signs_requests(
    settings: IoTHubServiceSettings, respx_mock: respx.MockRouter
) -> None:
    route = respx_mock.get(f"{BASE_URL}/statistics/service").mock(
        return_value=httpx.Response(200, json={"connectedDeviceCount": 1})
    )

    async with IoTHubServiceClient.from_connection_string(
        CONNECTION_STRING, settings=settings
    ) as hub:
        assert hub.base_url == BASE_URL
        await hub.statistics.get_service_statistics()

    request = route.calls.last.request
    assert request.headers["Authorization"].startswith("SharedAccessSignature sr=")
    assert request.headers["User-Agent"] == settings.USER_AGENT


async def test_from_connection_string_honours_base_url_override() -> None:
    settings = IoTHubServiceSettings(_env_file=None, BASE_URL="http://localhost:8080")

    async with IoTHubServiceClient.from_connection_string(
        CONNECTION_STRING, settings=settings
    ) as hub:
        assert hub.base_url == "http://localhost:8080"


async def test_from_settings(settings: IoTHubServiceSettings) -> None:
    async with IoTHubServiceClient.from_settings(settings) as hub:
        assert hub.base_url == BASE_URL
        assert hub.api_client.api_version == settings.API_VERSION


def test_from_settings_requires_credentials() -> None:
    settings = IoTHubServiceSettings(_env_file=None, HOST_NAME="hub.azure-devices.net")

    with pytest.raises(ConfigurationError, match="CONNECTION_STRING"):
        IoTHubServiceClient.from_settings(settings)


def test_build_token_provider(settings: IoTHubServiceSettings) -> None:
    assert isinstance(build_token_provider(settings), SasTokenProvider)


async def test_build_http_client_applies_timeouts() -> None:
    settings = IoTHubServiceSettings(
        _env_file=None, HTTP_CLIENT_TIMEOUT_SECONDS=12.0, HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS=3.0
    )

    async with build_http_client(settings) as http_client:
        assert http_client.timeout.read == 12.0
        assert http_client.timeout.connect == 3.0


async def test_owned_http_client_is_closed(settings: IoTHubServiceSettings) -> None:
    hub = IoTHubServiceClient.from_settings(settings)

    await hub.aclose()

    assert hub._http_client.is_closed


async def test_injected_http_client_stays_open(settings: IoTHubServiceSettings) -> None:
    async with httpx.AsyncClient() as http_client:
        async with IoTHubServiceClient.from_settings(settings, http_client=http_client):
            pass

        assert not http_client.is_closed
