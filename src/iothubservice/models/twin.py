"""Device and module twin models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from iothubservice.models.base import IoTHubModel
from iothubservice.models.device import (
    AuthenticationType,
    ConnectionState,
    DeviceCapabilities,
    DeviceStatus,
    X509Thumbprint,
)


class TwinProperties(IoTHubModel):
    """Desired and reported property documents.

    Both documents are free-form JSON; the service adds ``$version`` and
    ``$metadata`` keys which are kept as-is.
    """

    desired: dict[str, Any] | None = None
    reported: dict[str, Any] | None = None


class Twin(IoTHubModel):
    """Twin document of a device, or of a module when ``module_id`` is set.

    Every field is optional so the same type can be sent as a partial patch.
    """

    device_id: str | None = None
    module_id: str | None = None
    etag: str | None = None
    device_etag: str | None = None
    version: int | None = None
    tags: dict[str, Any] | None = None
    properties: TwinProperties | None = None
    status: DeviceStatus | None = None
    status_reason: str | None = None
    status_update_time: datetime | None = None
    connection_state: ConnectionState | None = None
    last_activity_time: datetime | None = None
    cloud_to_device_message_count: int | None = None
    authentication_type: AuthenticationType | None = None
    x509_thumbprint: X509Thumbprint | None = None
    capabilities: DeviceCapabilities | None = None
    device_scope: str | None = None
    model_id: str | None = None
