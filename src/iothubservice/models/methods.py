"""Direct method invocation models."""

from __future__ import annotations

from typing import Any

from iothubservice.models.base import IoTHubModel


class CloudToDeviceMethod(IoTHubModel):
    """Direct method request sent to a device or module."""

    method_name: str
    payload: Any = None
    response_timeout_in_seconds: int | None = None
    connect_timeout_in_seconds: int | None = None


class CloudToDeviceMethodResult(IoTHubModel):
    """Status and payload returned by the device's method handler."""

    status: int
    payload: Any = None
