"""Automatic device configuration and edge deployment operations."""

from __future__ import annotations

from uuid import UUID

from iothubservice.apis import operations as ops
from iothubservice.apis.client import ApiClient, format_etag
from iothubservice.models import Configuration, ConfigurationContent


class ConfigurationApi:
    """Manages configurations and applies deployment content to edge devices."""

    def __init__(self, api_client: ApiClient) -> None:
        self._api = api_client

    async def get_configuration(
        self, configuration_id: str, *, correlation_id: UUID | None = None
    ) -> Configuration:
        return await self._api.execute(
            ops.GET_CONFIGURATION,
            path_params={"configuration_id": configuration_id},
            correlation_id=correlation_id,
        )

    async def list_configurations(
        self, *, top: int | None = None, correlation_id: UUID | None = None
    ) -> list[Configuration]:
        return await self._api.execute(
            ops.LIST_CONFIGURATIONS,
            query={"top": top},
            correlation_id=correlation_id,
        )

    async def create_or_update_configuration(
        self,
        configuration: Configuration,
        *,
        etag: str | None = None,
        correlation_id: UUID | None = None,
    ) -> Configuration:
        """Create a configuration, or update it when ``etag`` is given.

        Only labels and metrics of an existing configuration can be updated;
        the service rejects content changes.
        """
        headers = {"If-Match": format_etag(etag)} if etag else None
        return await self._api.execute(
            ops.CREATE_OR_UPDATE_CONFIGURATION,
            path_params={"configuration_id": configuration.id},
            headers=headers,
            body=configuration,
            correlation_id=correlation_id,
        )

    async def delete_configuration(
        self,
        configuration_id: str,
        *,
        etag: str | None = None,
        correlation_id: UUID | None = None,
    ) -> None:
        await self._api.execute(
            ops.DELETE_CONFIGURATION,
            path_params={"configuration_id": configuration_id},
            headers={"If-Match": format_etag(etag)},
            correlation_id=correlation_id,
        )

    async def apply_configuration_on_edge_device(
        self,
        device_id: str,
        content: ConfigurationContent,
        *,
        correlation_id: UUID | None = None,
    ) -> None:
        """Apply a deployment manifest (``modules_content``) to one edge device."""
        await self._api.execute(
            ops.APPLY_CONFIGURATION_ON_EDGE_DEVICE,
            path_params={"device_id": device_id},
            body=content,
            correlation_id=correlation_id,
        )
