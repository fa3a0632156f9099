"""Device and module identity models of the IoT Hub identity registry."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from iothubservice.models.base import IoTHubModel


class AuthenticationType(str, Enum):
    SAS = "sas"
    SELF_SIGNED = "selfSigned"
    CERTIFICATE_AUTHORITY = "certificateAuthority"
    NONE = "none"


class ConnectionState(str, Enum):
    CONNECTED = "Connected"
    DISCONNECTED = "Disconnected"


class DeviceStatus(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class SymmetricKey(IoTHubModel):
    primary_key: str | None = None
    secondary_key: str | None = None


class X509Thumbprint(IoTHubModel):
    primary_thumbprint: str | None = None
    secondary_thumbprint: str | None = None


class AuthenticationMechanism(IoTHubModel):
    """Credentials of a device or module identity."""

    symmetric_key: SymmetricKey | None = None
    x509_thumbprint: X509Thumbprint | None = None
    type: AuthenticationType | None = None


class DeviceCapabilities(IoTHubModel):
    iot_edge: bool = False


class Device(IoTHubModel):
    """Device identity as stored in the identity registry.

    Used both as the body of create/update requests and as the decoded
    response of registry reads.
    """

    device_id: str
    generation_id: str | None = None
    etag: str | None = None
    connection_state: ConnectionState | None = None
    status: DeviceStatus | None = None
    status_reason: str | None = None
    connection_state_updated_time: datetime | None = None
    status_updated_time: datetime | None = None
    last_activity_time: datetime | None = None
    cloud_to_device_message_count: int | None = None
    authentication: AuthenticationMechanism | None = None
    capabilities: DeviceCapabilities | None = None
    device_scope: str | None = None
    parent_scopes: list[str] | None = None


class Module(IoTHubModel):
    """Module identity on a device.

    ``managed_by`` is set to ``"IotEdge"`` for modules owned by the edge runtime.
    """

    device_id: str
    module_id: str
    managed_by: str | None = None
    generation_id: str | None = None
    etag: str | None = None
    connection_state: ConnectionState | None = None
    connection_state_updated_time: datetime | None = None
    last_activity_time: datetime | None = None
    cloud_to_device_message_count: int | None = None
    authentication: AuthenticationMechanism | None = None
