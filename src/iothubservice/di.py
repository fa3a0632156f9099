"""Dependency Injection providers for applications embedding the client.

Provides a Dishka provider with APP-scoped settings, HTTP client, token
provider and IoTHubServiceClient.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from dishka import Provider, Scope, provide

from iothubservice.client import IoTHubServiceClient, build_http_client, build_token_provider
from iothubservice.config import IoTHubServiceSettings
from iothubservice.protocols import TokenProviderProtocol


class IoTHubServiceProvider(Provider):
    """Infrastructure provider for the IoT Hub service client.

    Pass ``settings`` to override environment-based configuration.
    """

    scope = Scope.APP

    def __init__(self, settings: IoTHubServiceSettings | None = None) -> None:
        super().__init__()
        self._settings = settings

    @provide
    def get_config(self) -> IoTHubServiceSettings:
        """Provide settings singleton."""
        return self._settings or IoTHubServiceSettings()

    @provide
    async def get_http_client(
        self, config: IoTHubServiceSettings
    ) -> AsyncIterator[httpx.AsyncClient]:
        """Provide shared HTTP client with connection pooling."""
        async with build_http_client(config) as client:
            yield client

    @provide
    def get_token_provider(self, config: IoTHubServiceSettings) -> TokenProviderProtocol:
        """Provide SAS token provider from the configured connection string."""
        return build_token_provider(config)

    @provide
    def get_iothub_client(
        self,
        config: IoTHubServiceSettings,
        http_client: httpx.AsyncClient,
        token_provider: TokenProviderProtocol,
    ) -> IoTHubServiceClient:
        """Provide the client over the container-owned HTTP client."""
        return IoTHubServiceClient(
            base_url=config.resolve_base_url(),
            token_provider=token_provider,
            http_client=http_client,
            settings=config,
        )
