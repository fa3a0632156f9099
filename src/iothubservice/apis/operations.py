"""Declarative table of the IoT Hub service REST operations.

Each endpoint is described once, as data: HTTP method, path template, the
type a 2xx body decodes into and the error model of non-2xx bodies. The API
classes bind these descriptors to typed methods; ApiClient executes them.
"""

from __future__ import annotations

import string
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from iothubservice.models import (
    CloudToDeviceMethodResult,
    Configuration,
    Device,
    ErrorResponse,
    Module,
    RegistryStatistics,
    ServiceStatistics,
    Twin,
)

_formatter = string.Formatter()


@dataclass(frozen=True)
class OperationDescriptor:
    """One REST endpoint.

    ``response_type`` is None for operations whose success response carries
    no body worth decoding (deletes, apply-content).
    """

    name: str
    method: str
    path: str
    response_type: Any = None
    error_model: type[ErrorResponse] | None = ErrorResponse
    path_parameters: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        names = tuple(name for _, name, _, _ in _formatter.parse(self.path) if name)
        object.__setattr__(self, "path_parameters", names)

    @property
    def endpoint(self) -> tuple[str, str]:
        return self.method, self.path

    def render_path(self, path_params: Mapping[str, str] | None = None) -> str:
        """Substitute percent-encoded path parameters into the template.

        Raises:
            ValueError: If a parameter is missing or empty
        """
        path_params = path_params or {}
        values: dict[str, str] = {}
        for name in self.path_parameters:
            value = path_params.get(name)
            if value is None or str(value) == "":
                raise ValueError(f"{self.name}: path parameter '{name}' is required")
            values[name] = quote(str(value), safe="")
        return self.path.format(**values)


class OperationRegistry:
    """Registry enforcing exactly one descriptor per endpoint and per name."""

    def __init__(self) -> None:
        self._by_name: dict[str, OperationDescriptor] = {}
        self._by_endpoint: dict[tuple[str, str], OperationDescriptor] = {}

    def register(self, descriptor: OperationDescriptor) -> OperationDescriptor:
        if descriptor.name in self._by_name:
            raise ValueError(f"Operation '{descriptor.name}' is already registered")
        if descriptor.endpoint in self._by_endpoint:
            existing = self._by_endpoint[descriptor.endpoint]
            raise ValueError(
                f"Endpoint {descriptor.method} {descriptor.path} is already bound to "
                f"'{existing.name}'"
            )
        self._by_name[descriptor.name] = descriptor
        self._by_endpoint[descriptor.endpoint] = descriptor
        return descriptor

    def get(self, name: str) -> OperationDescriptor:
        return self._by_name[name]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[OperationDescriptor]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


OPERATIONS = OperationRegistry()
_register = OPERATIONS.register

# Identity registry: devices
GET_DEVICE = _register(OperationDescriptor("get_device", "GET", "/devices/{device_id}", Device))
LIST_DEVICES = _register(OperationDescriptor("list_devices", "GET", "/devices", list[Device]))
CREATE_OR_UPDATE_DEVICE = _register(
    OperationDescriptor("create_or_update_device", "PUT", "/devices/{device_id}", Device)
)
DELETE_DEVICE = _register(OperationDescriptor("delete_device", "DELETE", "/devices/{device_id}"))

# Identity registry: modules
GET_MODULE = _register(
    OperationDescriptor("get_module", "GET", "/devices/{device_id}/modules/{module_id}", Module)
)
LIST_MODULES = _register(
    OperationDescriptor("list_modules", "GET", "/devices/{device_id}/modules", list[Module])
)
CREATE_OR_UPDATE_MODULE = _register(
    OperationDescriptor(
        "create_or_update_module", "PUT", "/devices/{device_id}/modules/{module_id}", Module
    )
)
DELETE_MODULE = _register(
    OperationDescriptor("delete_module", "DELETE", "/devices/{device_id}/modules/{module_id}")
)

# Twins
GET_DEVICE_TWIN = _register(
    OperationDescriptor("get_device_twin", "GET", "/twins/{device_id}", Twin)
)
UPDATE_DEVICE_TWIN = _register(
    OperationDescriptor("update_device_twin", "PATCH", "/twins/{device_id}", Twin)
)
REPLACE_DEVICE_TWIN = _register(
    OperationDescriptor("replace_device_twin", "PUT", "/twins/{device_id}", Twin)
)
GET_MODULE_TWIN = _register(
    OperationDescriptor("get_module_twin", "GET", "/twins/{device_id}/modules/{module_id}", Twin)
)
UPDATE_MODULE_TWIN = _register(
    OperationDescriptor(
        "update_module_twin", "PATCH", "/twins/{device_id}/modules/{module_id}", Twin
    )
)
REPLACE_MODULE_TWIN = _register(
    OperationDescriptor(
        "replace_module_twin", "PUT", "/twins/{device_id}/modules/{module_id}", Twin
    )
)

# Direct methods
INVOKE_DEVICE_METHOD = _register(
    OperationDescriptor(
        "invoke_device_method", "POST", "/twins/{device_id}/methods", CloudToDeviceMethodResult
    )
)
INVOKE_MODULE_METHOD = _register(
    OperationDescriptor(
        "invoke_module_method",
        "POST",
        "/twins/{device_id}/modules/{module_id}/methods",
        CloudToDeviceMethodResult,
    )
)

# Configurations
GET_CONFIGURATION = _register(
    OperationDescriptor(
        "get_configuration", "GET", "/configurations/{configuration_id}", Configuration
    )
)
LIST_CONFIGURATIONS = _register(
    OperationDescriptor("list_configurations", "GET", "/configurations", list[Configuration])
)
CREATE_OR_UPDATE_CONFIGURATION = _register(
    OperationDescriptor(
        "create_or_update_configuration",
        "PUT",
        "/configurations/{configuration_id}",
        Configuration,
    )
)
DELETE_CONFIGURATION = _register(
    OperationDescriptor("delete_configuration", "DELETE", "/configurations/{configuration_id}")
)
APPLY_CONFIGURATION_ON_EDGE_DEVICE = _register(
    OperationDescriptor(
        "apply_configuration_on_edge_device",
        "POST",
        "/devices/{device_id}/applyConfigurationContent",
    )
)

# Statistics
GET_REGISTRY_STATISTICS = _register(
    OperationDescriptor(
        "get_registry_statistics", "GET", "/statistics/devices", RegistryStatistics
    )
)
GET_SERVICE_STATISTICS = _register(
    OperationDescriptor("get_service_statistics", "GET", "/statistics/service", ServiceStatistics)
)

# Query
QUERY_IOT_HUB = _register(
    OperationDescriptor("query_iot_hub", "POST", "/devices/query", list[dict[str, Any]])
)
