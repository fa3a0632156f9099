"""Identity registry operations: device and module identities."""

from __future__ import annotations

from uuid import UUID

from iothubservice.apis import operations as ops
from iothubservice.apis.client import ApiClient, format_etag
from iothubservice.models import Device, Module


class RegistryApi:
    """Device and module identity CRUD against the IoT Hub identity registry."""

    def __init__(self, api_client: ApiClient) -> None:
        """Initialize with the shared operation executor.

        Args:
            api_client: ApiClient bound to the target hub
        """
        self._api = api_client

    async def get_device(self, device_id: str, *, correlation_id: UUID | None = None) -> Device:
        """Retrieve a device identity.

        Raises:
            ServiceError: 404 if the device does not exist
        """
        return await self._api.execute(
            ops.GET_DEVICE,
            path_params={"device_id": device_id},
            correlation_id=correlation_id,
        )

    async def list_devices(
        self, *, top: int | None = None, correlation_id: UUID | None = None
    ) -> list[Device]:
        """List device identities.

        Args:
            top: Maximum number of devices to return (service default when None)
            correlation_id: Request correlation ID
        """
        return await self._api.execute(
            ops.LIST_DEVICES,
            query={"top": top},
            correlation_id=correlation_id,
        )

    async def create_or_update_device(
        self, device: Device, *, etag: str | None = None, correlation_id: UUID | None = None
    ) -> Device:
        """Create a device identity, or update it when ``etag`` is given.

        Args:
            device: Device to store; ``device_id`` addresses the identity
            etag: ETag of the stored device for an optimistic update, ``"*"``
                to overwrite unconditionally, None to create
            correlation_id: Request correlation ID

        Returns:
            The stored device, including service-generated keys and etag

        Raises:
            ServiceError: 409 if creating an existing device, 412 on etag mismatch
        """
        headers = {"If-Match": format_etag(etag)} if etag else None
        return await self._api.execute(
            ops.CREATE_OR_UPDATE_DEVICE,
            path_params={"device_id": device.device_id},
            headers=headers,
            body=device,
            correlation_id=correlation_id,
        )

    async def delete_device(
        self, device_id: str, *, etag: str | None = None, correlation_id: UUID | None = None
    ) -> None:
        """Delete a device identity; unconditional when ``etag`` is None."""
        await self._api.execute(
            ops.DELETE_DEVICE,
            path_params={"device_id": device_id},
            headers={"If-Match": format_etag(etag)},
            correlation_id=correlation_id,
        )

    async def get_module(
        self, device_id: str, module_id: str, *, correlation_id: UUID | None = None
    ) -> Module:
        """Retrieve a module identity on a device."""
        return await self._api.execute(
            ops.GET_MODULE,
            path_params={"device_id": device_id, "module_id": module_id},
            correlation_id=correlation_id,
        )

    async def list_modules(
        self, device_id: str, *, correlation_id: UUID | None = None
    ) -> list[Module]:
        """List all module identities on a device."""
        return await self._api.execute(
            ops.LIST_MODULES,
            path_params={"device_id": device_id},
            correlation_id=correlation_id,
        )

    async def create_or_update_module(
        self, module: Module, *, etag: str | None = None, correlation_id: UUID | None = None
    ) -> Module:
        """Create a module identity, or update it when ``etag`` is given.

        The module is addressed by its ``device_id`` and ``module_id``.
        """
        headers = {"If-Match": format_etag(etag)} if etag else None
        return await self._api.execute(
            ops.CREATE_OR_UPDATE_MODULE,
            path_params={"device_id": module.device_id, "module_id": module.module_id},
            headers=headers,
            body=module,
            correlation_id=correlation_id,
        )

    async def delete_module(
        self,
        device_id: str,
        module_id: str,
        *,
        etag: str | None = None,
        correlation_id: UUID | None = None,
    ) -> None:
        """Delete a module identity; unconditional when ``etag`` is None."""
        await self._api.execute(
            ops.DELETE_MODULE,
            path_params={"device_id": device_id, "module_id": module_id},
            headers={"If-Match": format_etag(etag)},
            correlation_id=correlation_id,
        )
