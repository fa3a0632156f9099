"""Device and module twin operations."""

from __future__ import annotations

from uuid import UUID

from iothubservice.apis import operations as ops
from iothubservice.apis.client import ApiClient, format_etag
from iothubservice.models import Twin


class TwinApi:
    """Reads, patches and replaces device and module twins.

    Updates send a partial Twin (tags and/or desired properties) and are
    merged by the service; replaces overwrite tags and desired properties.
    Reported properties are owned by the device and ignored on write.
    """

    def __init__(self, api_client: ApiClient) -> None:
        self._api = api_client

    @staticmethod
    def _if_match(etag: str | None) -> dict[str, str] | None:
        return {"If-Match": format_etag(etag)} if etag else None

    async def get_device_twin(
        self, device_id: str, *, correlation_id: UUID | None = None
    ) -> Twin:
        return await self._api.execute(
            ops.GET_DEVICE_TWIN,
            path_params={"device_id": device_id},
            correlation_id=correlation_id,
        )

    async def update_device_twin(
        self,
        device_id: str,
        patch: Twin,
        *,
        etag: str | None = None,
        correlation_id: UUID | None = None,
    ) -> Twin:
        return await self._api.execute(
            ops.UPDATE_DEVICE_TWIN,
            path_params={"device_id": device_id},
            headers=self._if_match(etag),
            body=patch,
            correlation_id=correlation_id,
        )

    async def replace_device_twin(
        self,
        device_id: str,
        twin: Twin,
        *,
        etag: str | None = None,
        correlation_id: UUID | None = None,
    ) -> Twin:
        return await self._api.execute(
            ops.REPLACE_DEVICE_TWIN,
            path_params={"device_id": device_id},
            headers=self._if_match(etag),
            body=twin,
            correlation_id=correlation_id,
        )

    async def get_module_twin(
        self, device_id: str, module_id: str, *, correlation_id: UUID | None = None
    ) -> Twin:
        return await self._api.execute(
            ops.GET_MODULE_TWIN,
            path_params={"device_id": device_id, "module_id": module_id},
            correlation_id=correlation_id,
        )

    async def update_module_twin(
        self,
        device_id: str,
        module_id: str,
        patch: Twin,
        *,
        etag: str | None = None,
        correlation_id: UUID | None = None,
    ) -> Twin:
        return await self._api.execute(
            ops.UPDATE_MODULE_TWIN,
            path_params={"device_id": device_id, "module_id": module_id},
            headers=self._if_match(etag),
            body=patch,
            correlation_id=correlation_id,
        )

    async def replace_module_twin(
        self,
        device_id: str,
        module_id: str,
        twin: Twin,
        *,
        etag: str | None = None,
        correlation_id: UUID | None = None,
    ) -> Twin:
        return await self._api.execute(
            ops.REPLACE_MODULE_TWIN,
            path_params={"device_id": device_id, "module_id": module_id},
            headers=self._if_match(etag),
            body=twin,
            correlation_id=correlation_id,
        )
