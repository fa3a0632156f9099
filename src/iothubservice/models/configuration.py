"""Automatic device configuration and edge deployment models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from iothubservice.models.base import IoTHubModel


class ConfigurationContent(IoTHubModel):
    """Content applied by a configuration.

    ``modules_content`` carries an edge deployment manifest keyed by module
    name (``$edgeAgent``, ``$edgeHub``, ...). ``device_content`` and
    ``module_content`` carry twin property paths for device/module targeting.
    """

    device_content: dict[str, Any] | None = None
    modules_content: dict[str, dict[str, Any]] | None = None
    module_content: dict[str, Any] | None = None


class ConfigurationMetrics(IoTHubModel):
    results: dict[str, int] | None = None
    queries: dict[str, str] | None = None


class Configuration(IoTHubModel):
    """Configuration targeting devices that match ``target_condition``."""

    id: str
    schema_version: str | None = None
    labels: dict[str, str] | None = None
    content: ConfigurationContent | None = None
    target_condition: str | None = None
    created_time_utc: datetime | None = None
    last_updated_time_utc: datetime | None = None
    priority: int | None = None
    system_metrics: ConfigurationMetrics | None = None
    metrics: ConfigurationMetrics | None = None
    etag: str | None = None
