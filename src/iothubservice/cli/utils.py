"""Utilities for the CLI."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import typer
from pydantic import ValidationError

from iothubservice.client import IoTHubServiceClient
from iothubservice.config import IoTHubServiceSettings
from iothubservice.exceptions import IoTHubServiceError, ServiceError
from iothubservice.logging_utils import configure_service_logging
from iothubservice.models import IoTHubModel

T = TypeVar("T")


def run_operation(operation: Callable[[IoTHubServiceClient], Awaitable[T]]) -> T:
    """Run one client operation with a client built from environment settings.

    Invalid settings and client errors are reported on stderr and end the
    command with exit code 1.
    """
    try:
        settings = IoTHubServiceSettings()
    except ValidationError as exc:
        typer.secho(f"Invalid configuration: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    configure_service_logging(
        settings.SERVICE_NAME,
        environment=settings.ENVIRONMENT.value,
        log_level=settings.LOG_LEVEL,
    )

    async def _run() -> T:
        async with IoTHubServiceClient.from_settings(settings) as hub:
            return await operation(hub)

    try:
        return asyncio.run(_run())
    except IoTHubServiceError as exc:
        typer.secho(f"Request failed: {exc}", fg=typer.colors.RED, err=True)
        if isinstance(exc, ServiceError) and exc.error is None and exc.body:
            typer.secho(exc.body, err=True)
        raise typer.Exit(code=1) from exc


def to_jsonable(value: Any) -> Any:
    if isinstance(value, IoTHubModel):
        return value.to_wire()
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    return value


def echo_json(value: Any) -> None:
    """Print models (or lists of models) as indented JSON using wire names."""
    typer.echo(json.dumps(to_jsonable(value), indent=2))


def parse_json_option(raw: str | None, option_name: str) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"not valid JSON: {exc.msg}", param_hint=option_name) from exc
