"""Registry and service statistics models."""

from __future__ import annotations

from iothubservice.models.base import IoTHubModel


class RegistryStatistics(IoTHubModel):
    total_device_count: int | None = None
    enabled_device_count: int | None = None
    disabled_device_count: int | None = None


class ServiceStatistics(IoTHubModel):
    connected_device_count: int | None = None
