"""Direct method invocation on devices and modules."""

from __future__ import annotations

from uuid import UUID

from iothubservice.apis import operations as ops
from iothubservice.apis.client import ApiClient
from iothubservice.models import CloudToDeviceMethod, CloudToDeviceMethodResult

# Service defaults when the request leaves the timeouts unset
DEFAULT_RESPONSE_TIMEOUT_SECONDS = 30
DEFAULT_CONNECT_TIMEOUT_SECONDS = 0
# Extra time the HTTP call waits beyond the service-side method timeouts
TIMEOUT_MARGIN_SECONDS = 5


def method_call_timeout(method: CloudToDeviceMethod) -> float:
    """HTTP timeout for a method call: the service waits for the device first."""
    response_timeout = method.response_timeout_in_seconds
    if response_timeout is None:
        response_timeout = DEFAULT_RESPONSE_TIMEOUT_SECONDS
    connect_timeout = method.connect_timeout_in_seconds
    if connect_timeout is None:
        connect_timeout = DEFAULT_CONNECT_TIMEOUT_SECONDS
    return float(response_timeout + connect_timeout + TIMEOUT_MARGIN_SECONDS)


class MethodsApi:
    """Invokes direct methods and returns the device's response.

    A non-2xx response means the service could not deliver the call (device
    offline, timeout); the handler's own status is in the result's ``status``.
    """

    def __init__(self, api_client: ApiClient) -> None:
        self._api = api_client

    async def invoke_device_method(
        self,
        device_id: str,
        method: CloudToDeviceMethod,
        *,
        correlation_id: UUID | None = None,
    ) -> CloudToDeviceMethodResult:
        return await self._api.execute(
            ops.INVOKE_DEVICE_METHOD,
            path_params={"device_id": device_id},
            body=method,
            correlation_id=correlation_id,
            timeout=method_call_timeout(method),
        )

    async def invoke_module_method(
        self,
        device_id: str,
        module_id: str,
        method: CloudToDeviceMethod,
        *,
        correlation_id: UUID | None = None,
    ) -> CloudToDeviceMethodResult:
        return await self._api.execute(
            ops.INVOKE_MODULE_METHOD,
            path_params={"device_id": device_id, "module_id": module_id},
            body=method,
            correlation_id=correlation_id,
            timeout=method_call_timeout(method),
        )
