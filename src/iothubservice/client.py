"""IoT Hub service client facade.

Composes every operation area over one httpx connection pool and one token
provider.
"""

from __future__ import annotations

from types import TracebackType

import httpx

from iothubservice.apis import (
    ApiClient,
    ConfigurationApi,
    MethodsApi,
    QueryApi,
    RegistryApi,
    StatisticsApi,
    TwinApi,
)
from iothubservice.auth import ConnectionString, SasTokenProvider
from iothubservice.config import IoTHubServiceSettings
from iothubservice.exceptions import ConfigurationError
from iothubservice.logging_utils import create_service_logger
from iothubservice.protocols import TokenProviderProtocol

logger = create_service_logger("iothubservice.client")


def build_http_client(settings: IoTHubServiceSettings) -> httpx.AsyncClient:
    """Create the shared AsyncClient with timeouts from settings."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            settings.HTTP_CLIENT_TIMEOUT_SECONDS,
            connect=settings.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS,
        ),
        headers={"User-Agent": settings.USER_AGENT},
    )


def build_token_provider(settings: IoTHubServiceSettings) -> SasTokenProvider:
    """SAS token provider signed with the configured connection string.

    Raises:
        ConfigurationError: If no connection string is configured
    """
    connection_string = settings.get_connection_string()
    if not connection_string:
        raise ConfigurationError(
            "IOTHUB_SERVICE_CONNECTION_STRING is required to sign requests"
        )
    return SasTokenProvider.from_connection_string(
        connection_string,
        ttl_seconds=settings.SAS_TOKEN_TTL_SECONDS,
        renewal_margin_seconds=settings.SAS_TOKEN_RENEWAL_MARGIN_SECONDS,
    )


class IoTHubServiceClient:
    """Async client for the IoT Hub service REST API.

    Usage::

        async with IoTHubServiceClient.from_connection_string(conn_str) as hub:
            device = await hub.registry.get_device("sensor-1")

    The client closes the httpx.AsyncClient it created; an injected
    ``http_client`` stays open and remains the caller's responsibility.
    """

    def __init__(
        self,
        *,
        base_url: str,
        token_provider: TokenProviderProtocol | None,
        http_client: httpx.AsyncClient | None = None,
        settings: IoTHubServiceSettings | None = None,
    ) -> None:
        self._settings = settings or IoTHubServiceSettings()
        self._owns_http_client = http_client is None
        self._http_client = http_client or build_http_client(self._settings)

        self.api_client = ApiClient(
            self._http_client,
            base_url=base_url,
            token_provider=token_provider,
            api_version=self._settings.API_VERSION,
            user_agent=self._settings.USER_AGENT,
        )
        self.registry = RegistryApi(self.api_client)
        self.twins = TwinApi(self.api_client)
        self.methods = MethodsApi(self.api_client)
        self.configurations = ConfigurationApi(self.api_client)
        self.statistics = StatisticsApi(self.api_client)
        self.query = QueryApi(self.api_client)

    @classmethod
    def from_connection_string(
        cls,
        connection_string: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        settings: IoTHubServiceSettings | None = None,
    ) -> IoTHubServiceClient:
        """Client for the hub named in a shared access policy connection string."""
        settings = settings or IoTHubServiceSettings()
        parsed = ConnectionString.parse(connection_string)
        token_provider = SasTokenProvider.from_connection_string(
            parsed,
            ttl_seconds=settings.SAS_TOKEN_TTL_SECONDS,
            renewal_margin_seconds=settings.SAS_TOKEN_RENEWAL_MARGIN_SECONDS,
        )
        base_url = settings.BASE_URL or f"https://{parsed.host_name}"
        return cls(
            base_url=base_url,
            token_provider=token_provider,
            http_client=http_client,
            settings=settings,
        )

    @classmethod
    def from_settings(
        cls,
        settings: IoTHubServiceSettings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> IoTHubServiceClient:
        """Client configured entirely from IOTHUB_SERVICE_* settings.

        Raises:
            ConfigurationError: If the hub address or credentials are missing
        """
        settings = settings or IoTHubServiceSettings()
        return cls(
            base_url=settings.resolve_base_url(),
            token_provider=build_token_provider(settings),
            http_client=http_client,
            settings=settings,
        )

    @property
    def base_url(self) -> str:
        return self.api_client.base_url

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()
            logger.debug("Closed IoT Hub HTTP client")

    async def __aenter__(self) -> IoTHubServiceClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
