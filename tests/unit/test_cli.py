"""CLI tests for the iothub-service commands."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import httpx
import pytest
import respx
import structlog
from typer.testing import CliRunner

from iothubservice.cli import main
from tests.constants import BASE_URL, CONNECTION_STRING, IOTHUB_ERROR_BODY

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point commands at the test hub and keep logs out of command output."""
    monkeypatch.setenv("IOTHUB_SERVICE_CONNECTION_STRING", CONNECTION_STRING)
    monkeypatch.setenv("IOTHUB_SERVICE_LOG_LEVEL", "ERROR")
    for name in ("SERVICE_NAME", "ENVIRONMENT"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    root_handlers = list(logging.getLogger().handlers)
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers[:] = root_handlers


class TestDevicesCommands:
    def test_show_prints_wire_json(self, respx_mock: respx.MockRouter) -> None:
        route = respx_mock.get(f"{BASE_URL}/devices/sensor-1").mock(
            return_value=httpx.Response(
                200, json={"deviceId": "sensor-1", "status": "enabled", "etag": "MQ=="}
            )
        )

        result = runner.invoke(main.app, ["devices", "show", "sensor-1"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "deviceId": "sensor-1",
            "status": "enabled",
            "etag": "MQ==",
        }
        assert route.calls.last.request.headers["Authorization"].startswith(
            "SharedAccessSignature "
        )

    def test_list_passes_top(self, respx_mock: respx.MockRouter) -> None:
        route = respx_mock.get(f"{BASE_URL}/devices").mock(
            return_value=httpx.Response(200, json=[{"deviceId": "a"}, {"deviceId": "b"}])
        )

        result = runner.invoke(main.app, ["devices", "list", "--top", "2"])

        assert result.exit_code == 0
        assert [d["deviceId"] for d in json.loads(result.output)] == ["a", "b"]
        assert route.calls.last.request.url.params["top"] == "2"

    def test_delete(self, respx_mock: respx.MockRouter) -> None:
        route = respx_mock.delete(f"{BASE_URL}/devices/sensor-1").mock(
            return_value=httpx.Response(204)
        )

        result = runner.invoke(main.app, ["devices", "delete", "sensor-1", "--etag", "MQ=="])

        assert result.exit_code == 0
        assert "Deleted device sensor-1" in result.output
        assert route.calls.last.request.headers["If-Match"] == '"MQ=="'

    def test_service_error_exits_with_code_1(self, respx_mock: respx.MockRouter) -> None:
        respx_mock.get(f"{BASE_URL}/devices/ghost").mock(
            return_value=httpx.Response(404, json=IOTHUB_ERROR_BODY)
        )

        result = runner.invoke(main.app, ["devices", "show", "ghost"])

        assert result.exit_code == 1
        assert "Request failed" in result.output
        assert "RESOURCE_NOT_FOUND" in result.output

    def test_missing_configuration_exits_with_code_1(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("IOTHUB_SERVICE_CONNECTION_STRING")

        result = runner.invoke(main.app, ["devices", "show", "sensor-1"])

        assert result.exit_code == 1
        assert "CONFIGURATION_ERROR" in result.output

    @pytest.mark.parametrize(
        "variable, value",
        [
            ("IOTHUB_SERVICE_ENVIRONMENT", "moon"),
            ("IOTHUB_SERVICE_LOG_LEVEL", "LOUD"),
        ],
    )
    def test_invalid_settings_exit_with_code_1(
        self, monkeypatch: pytest.MonkeyPatch, variable: str, value: str
    ) -> None:
        monkeypatch.setenv(variable, value)

        result = runner.invoke(main.app, ["devices", "show", "sensor-1"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert variable.removeprefix("IOTHUB_SERVICE_") in result.output


class TestModulesCommands:
    def test_list(self, respx_mock: respx.MockRouter) -> None:
        respx_mock.get(f"{BASE_URL}/devices/edge-gw-1/modules").mock(
            return_value=httpx.Response(
                200, json=[{"deviceId": "edge-gw-1", "moduleId": "$edgeAgent"}]
            )
        )

        result = runner.invoke(main.app, ["modules", "list", "edge-gw-1"])

        assert result.exit_code == 0
        assert json.loads(result.output)[0]["moduleId"] == "$edgeAgent"

    def test_show(self, respx_mock: respx.MockRouter) -> None:
        respx_mock.get(f"{BASE_URL}/devices/edge-gw-1/modules/telemetry").mock(
            return_value=httpx.Response(
                200, json={"deviceId": "edge-gw-1", "moduleId": "telemetry"}
            )
        )

        result = runner.invoke(main.app, ["modules", "show", "edge-gw-1", "telemetry"])

        assert result.exit_code == 0
        assert json.loads(result.output)["moduleId"] == "telemetry"


class TestTwinsCommands:
    def test_show_module_twin(self, respx_mock: respx.MockRouter) -> None:
        respx_mock.get(f"{BASE_URL}/twins/edge-gw-1/modules/telemetry").mock(
            return_value=httpx.Response(
                200, json={"deviceId": "edge-gw-1", "moduleId": "telemetry", "version": 3}
            )
        )

        result = runner.invoke(main.app, ["twins", "show", "edge-gw-1", "--module", "telemetry"])

        assert result.exit_code == 0
        assert json.loads(result.output)["version"] == 3

    def test_tag_patches_twin(self, respx_mock: respx.MockRouter) -> None:
        route = respx_mock.patch(f"{BASE_URL}/twins/sensor-1").mock(
            return_value=httpx.Response(200, json={"deviceId": "sensor-1", "tags": {"site": "b"}})
        )

        result = runner.invoke(main.app, ["twins", "tag", "sensor-1", "--tags", '{"site": "b"}'])

        assert result.exit_code == 0
        assert json.loads(route.calls.last.request.content) == {"tags": {"site": "b"}}

    def test_tag_rejects_invalid_json(self) -> None:
        result = runner.invoke(main.app, ["twins", "tag", "sensor-1", "--tags", "{site"])

        assert result.exit_code == 2
        assert "not valid JSON" in result.output


class TestMethodsCommands:
    def test_invoke(self, respx_mock: respx.MockRouter) -> None:
        route = respx_mock.post(f"{BASE_URL}/twins/sensor-1/methods").mock(
            return_value=httpx.Response(200, json={"status": 200, "payload": {"ok": True}})
        )

        result = runner.invoke(
            main.app,
            [
                "methods",
                "invoke",
                "sensor-1",
                "reboot",
                "--payload",
                '{"delay": 5}',
                "--timeout",
                "10",
            ],
        )

        assert result.exit_code == 0
        assert json.loads(result.output) == {"status": 200, "payload": {"ok": True}}
        assert json.loads(route.calls.last.request.content) == {
            "methodName": "reboot",
            "payload": {"delay": 5},
            "responseTimeoutInSeconds": 10,
        }

    def test_handler_error_status_exits_with_code_2(self, respx_mock: respx.MockRouter) -> None:
        respx_mock.post(f"{BASE_URL}/twins/edge-gw-1/modules/telemetry/methods").mock(
            return_value=httpx.Response(200, json={"status": 501, "payload": "unknown method"})
        )

        result = runner.invoke(
            main.app, ["methods", "invoke", "edge-gw-1", "nope", "--module", "telemetry"]
        )

        assert result.exit_code == 2
        assert "unknown method" in result.output


def test_query_run_collects_all_pages(respx_mock: respx.MockRouter) -> None:
    respx_mock.post(f"{BASE_URL}/devices/query").mock(
        side_effect=[
            httpx.Response(200, json=[{"deviceId": "a"}], headers={"x-ms-continuation": "next"}),
            httpx.Response(200, json=[{"deviceId": "b"}]),
        ]
    )

    result = runner.invoke(
        main.app, ["query", "run", "SELECT * FROM devices", "--page-size", "1"]
    )

    assert result.exit_code == 0
    assert [twin["deviceId"] for twin in json.loads(result.output)] == ["a", "b"]


def test_stats(respx_mock: respx.MockRouter) -> None:
    respx_mock.get(f"{BASE_URL}/statistics/devices").mock(
        return_value=httpx.Response(
            200, json={"totalDeviceCount": 3, "enabledDeviceCount": 2, "disabledDeviceCount": 1}
        )
    )
    respx_mock.get(f"{BASE_URL}/statistics/service").mock(
        return_value=httpx.Response(200, json={"connectedDeviceCount": 1})
    )

    result = runner.invoke(main.app, ["stats"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "registry": {"totalDeviceCount": 3, "enabledDeviceCount": 2, "disabledDeviceCount": 1},
        "service": {"connectedDeviceCount": 1},
    }


def test_query_run_prints_raw_rows(respx_mock: respx.MockRouter) -> None:
    respx_mock.post(f"{BASE_URL}/devices/query").mock(
        return_value=httpx.Response(
            200, json=[{"numberOfDevices": 7}], headers={"x-ms-item-type": "Raw"}
        )
    )

    result = runner.invoke(
        main.app, ["query", "run", "SELECT COUNT() AS numberOfDevices FROM devices"]
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == [{"numberOfDevices": 7}]
