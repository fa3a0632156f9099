"""Main entrypoint for the CLI."""

from __future__ import annotations

from typing import Any

import typer

from iothubservice.cli.utils import echo_json, parse_json_option, run_operation
from iothubservice.client import IoTHubServiceClient
from iothubservice.models import CloudToDeviceMethod, Twin

app = typer.Typer(help="IoT Hub service CLI")

devices_app = typer.Typer(help="Device identities")
modules_app = typer.Typer(help="Module identities")
twins_app = typer.Typer(help="Device and module twins")
methods_app = typer.Typer(help="Direct methods")
query_app = typer.Typer(help="Twin queries")

app.add_typer(devices_app, name="devices")
app.add_typer(modules_app, name="modules")
app.add_typer(twins_app, name="twins")
app.add_typer(methods_app, name="methods")
app.add_typer(query_app, name="query")


@devices_app.command("show")
def show_device(device_id: str = typer.Argument(..., help="Device ID")) -> None:
    """Print a device identity."""

    echo_json(run_operation(lambda hub: hub.registry.get_device(device_id)))


@devices_app.command("list")
def list_devices(
    top: int | None = typer.Option(None, "--top", min=1, help="Maximum devices to list"),
) -> None:
    """List device identities."""

    echo_json(run_operation(lambda hub: hub.registry.list_devices(top=top)))


@devices_app.command("delete")
def delete_device(
    device_id: str = typer.Argument(..., help="Device ID"),
    etag: str | None = typer.Option(None, "--etag", help="Only delete this version"),
) -> None:
    """Delete a device identity."""

    run_operation(lambda hub: hub.registry.delete_device(device_id, etag=etag))
    typer.secho(f"Deleted device {device_id}", fg=typer.colors.GREEN)


@modules_app.command("list")
def list_modules(device_id: str = typer.Argument(..., help="Device ID")) -> None:
    """List module identities on a device."""

    echo_json(run_operation(lambda hub: hub.registry.list_modules(device_id)))


@modules_app.command("show")
def show_module(
    device_id: str = typer.Argument(..., help="Device ID"),
    module_id: str = typer.Argument(..., help="Module ID"),
) -> None:
    """Print a module identity."""

    echo_json(run_operation(lambda hub: hub.registry.get_module(device_id, module_id)))


@twins_app.command("show")
def show_twin(
    device_id: str = typer.Argument(..., help="Device ID"),
    module_id: str | None = typer.Option(None, "--module", help="Module ID"),
) -> None:
    """Print a device twin, or a module twin with --module."""

    if module_id:
        twin = run_operation(lambda hub: hub.twins.get_module_twin(device_id, module_id))
    else:
        twin = run_operation(lambda hub: hub.twins.get_device_twin(device_id))
    echo_json(twin)


@twins_app.command("tag")
def tag_twin(
    device_id: str = typer.Argument(..., help="Device ID"),
    tags: str = typer.Option(..., "--tags", help='Tags patch as JSON, e.g. {"site": "a"}'),
) -> None:
    """Merge tags into a device twin."""

    patch = Twin(tags=parse_json_option(tags, "--tags"))
    echo_json(run_operation(lambda hub: hub.twins.update_device_twin(device_id, patch)))


@methods_app.command("invoke")
def invoke_method(
    device_id: str = typer.Argument(..., help="Device ID"),
    method_name: str = typer.Argument(..., help="Method name"),
    module_id: str | None = typer.Option(None, "--module", help="Module ID"),
    payload: str | None = typer.Option(None, "--payload", help="Method payload as JSON"),
    timeout: int | None = typer.Option(
        None, "--timeout", min=5, max=300, help="Seconds to wait for the device to respond"
    ),
) -> None:
    """Invoke a direct method and print the device's response."""

    method = CloudToDeviceMethod(
        method_name=method_name,
        payload=parse_json_option(payload, "--payload"),
        response_timeout_in_seconds=timeout,
    )
    if module_id:
        result = run_operation(
            lambda hub: hub.methods.invoke_module_method(device_id, module_id, method)
        )
    else:
        result = run_operation(lambda hub: hub.methods.invoke_device_method(device_id, method))
    echo_json(result)
    if result.status >= 400:
        raise typer.Exit(code=2)


@query_app.command("run")
def run_query(
    query: str = typer.Argument(..., help="Query, e.g. \"SELECT * FROM devices\""),
    page_size: int | None = typer.Option(None, "--page-size", min=1, help="Items per page"),
) -> None:
    """Run a query and print every matching twin or result row."""

    async def collect(hub: IoTHubServiceClient) -> list[Twin | dict[str, Any]]:
        return [item async for item in hub.query.iter_query(query, page_size=page_size)]

    echo_json(run_operation(collect))


@app.command()
def stats() -> None:
    """Print registry and service statistics."""

    async def fetch(hub: IoTHubServiceClient) -> dict[str, Any]:
        registry = await hub.statistics.get_registry_statistics()
        service = await hub.statistics.get_service_statistics()
        return {"registry": registry.to_wire(), "service": service.to_wire()}

    echo_json(run_operation(fetch))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
