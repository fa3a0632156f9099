"""IoT Hub service data transfer objects.

One value type per service schema, serialized with camelCase wire names.
"""

from iothubservice.models.base import IoTHubModel
from iothubservice.models.configuration import (
    Configuration,
    ConfigurationContent,
    ConfigurationMetrics,
)
from iothubservice.models.device import (
    AuthenticationMechanism,
    AuthenticationType,
    ConnectionState,
    Device,
    DeviceCapabilities,
    DeviceStatus,
    Module,
    SymmetricKey,
    X509Thumbprint,
)
from iothubservice.models.errors import ErrorResponse
from iothubservice.models.methods import CloudToDeviceMethod, CloudToDeviceMethodResult
from iothubservice.models.query import QueryResult, QuerySpecification
from iothubservice.models.statistics import RegistryStatistics, ServiceStatistics
from iothubservice.models.twin import Twin, TwinProperties

__all__ = [
    "AuthenticationMechanism",
    "AuthenticationType",
    "CloudToDeviceMethod",
    "CloudToDeviceMethodResult",
    "Configuration",
    "ConfigurationContent",
    "ConfigurationMetrics",
    "ConnectionState",
    "Device",
    "DeviceCapabilities",
    "DeviceStatus",
    "ErrorResponse",
    "IoTHubModel",
    "Module",
    "QueryResult",
    "QuerySpecification",
    "RegistryStatistics",
    "ServiceStatistics",
    "SymmetricKey",
    "Twin",
    "TwinProperties",
    "X509Thumbprint",
]
