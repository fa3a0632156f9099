"""IoT Hub service operation bindings.

One method per REST operation, grouped by area, all executed through ApiClient.
"""

from iothubservice.apis.client import ApiClient, ApiResponse
from iothubservice.apis.configuration_api import ConfigurationApi
from iothubservice.apis.methods_api import MethodsApi
from iothubservice.apis.operations import OPERATIONS, OperationDescriptor
from iothubservice.apis.query_api import QueryApi
from iothubservice.apis.registry_api import RegistryApi
from iothubservice.apis.statistics_api import StatisticsApi
from iothubservice.apis.twin_api import TwinApi

__all__ = [
    "OPERATIONS",
    "ApiClient",
    "ApiResponse",
    "ConfigurationApi",
    "MethodsApi",
    "OperationDescriptor",
    "QueryApi",
    "RegistryApi",
    "StatisticsApi",
    "TwinApi",
]
