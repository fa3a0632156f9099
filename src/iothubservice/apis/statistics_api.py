"""Registry and service statistics."""

from __future__ import annotations

from uuid import UUID

from iothubservice.apis import operations as ops
from iothubservice.apis.client import ApiClient
from iothubservice.models import RegistryStatistics, ServiceStatistics


class StatisticsApi:
    def __init__(self, api_client: ApiClient) -> None:
        self._api = api_client

    async def get_registry_statistics(
        self, *, correlation_id: UUID | None = None
    ) -> RegistryStatistics:
        """Device counts of the identity registry."""
        return await self._api.execute(
            ops.GET_REGISTRY_STATISTICS, correlation_id=correlation_id
        )

    async def get_service_statistics(
        self, *, correlation_id: UUID | None = None
    ) -> ServiceStatistics:
        """Live service statistics, e.g. the number of connected devices."""
        return await self._api.execute(ops.GET_SERVICE_STATISTICS, correlation_id=correlation_id)
