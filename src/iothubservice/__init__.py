"""
IoT Hub Service Client Package.

Typed asynchronous client for the Azure IoT Hub service REST API: identity
registry, twins, direct methods, configurations, statistics and queries.
"""

from iothubservice.auth import ConnectionString, SasTokenProvider, StaticTokenProvider
from iothubservice.client import IoTHubServiceClient
from iothubservice.config import IoTHubServiceSettings
from iothubservice.exceptions import (
    ConfigurationError,
    DecodeError,
    IoTHubServiceError,
    ServiceError,
    TransportError,
)
from iothubservice.version import __version__

__all__ = [
    "ConfigurationError",
    "ConnectionString",
    "DecodeError",
    "IoTHubServiceClient",
    "IoTHubServiceError",
    "IoTHubServiceSettings",
    "SasTokenProvider",
    "ServiceError",
    "StaticTokenProvider",
    "TransportError",
    "__version__",
]

# Dependency injection providers should be imported directly from:
# - iothubservice.di
