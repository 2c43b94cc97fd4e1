import httpx
import pytest
from pytest_httpx import HTTPXMock

from habitat_client import Hab, HabConfig
from habitat_client.connectors.supervisor_api import SupervisorApiConnector
from habitat_client.core.common.exceptions import (
    SupervisorApiError,
    SupervisorUnavailableError,
)

SERVICES = [
    {
        "service_group": "redis.default",
        "pkg": {"origin": "core", "name": "redis", "version": "4.0.14"},
        "process": {"pid": 1045, "state": "up"},
    }
]


async def test_get_services_decodes_json(httpx_mock: HTTPXMock):
    httpx_mock.add_response(url="http://localhost:9631/services", json=SERVICES)

    async with Hab() as hab:
        assert await hab.get_services() == SERVICES


async def test_custom_supervisor_api_base(httpx_mock: HTTPXMock):
    httpx_mock.add_response(url="http://10.0.0.5:9631/services", json=[])

    async with Hab(HabConfig(supervisor_api="http://10.0.0.5:9631")) as hab:
        assert await hab.get_services() == []


async def test_get_supervisor_api_is_bound_to_base_url(httpx_mock: HTTPXMock):
    httpx_mock.add_response(url="http://localhost:9631/census", json={"ok": True})

    async with Hab() as hab:
        client = hab.get_supervisor_api()
        response = await client.get("census")

    assert client.base_url == httpx.URL("http://localhost:9631/")
    assert response.json() == {"ok": True}


async def test_error_status_raises_api_error(httpx_mock: HTTPXMock):
    httpx_mock.add_response(
        url="http://localhost:9631/services", status_code=500, text="boom"
    )
    connector = SupervisorApiConnector("http://localhost:9631")

    with pytest.raises(SupervisorApiError) as exc_info:
        await connector.get_services()
    await connector.aclose()

    assert exc_info.value.status_code == 500
    assert exc_info.value.details["body"] == "boom"


async def test_connection_failure_raises_unavailable(httpx_mock: HTTPXMock):
    httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
    connector = SupervisorApiConnector("http://localhost:9631")

    with pytest.raises(SupervisorUnavailableError) as exc_info:
        await connector.get_services()
    await connector.aclose()

    assert isinstance(exc_info.value, SupervisorApiError)
    assert exc_info.value.status_code is None


async def test_non_json_body_raises_api_error(httpx_mock: HTTPXMock):
    httpx_mock.add_response(url="http://localhost:9631/services", text="<html>")
    connector = SupervisorApiConnector("http://localhost:9631")

    with pytest.raises(SupervisorApiError) as exc_info:
        await connector.get_services()
    await connector.aclose()

    assert exc_info.value.status_code == 200


async def test_supplied_client_is_not_closed():
    client = httpx.AsyncClient(base_url="http://localhost:9631")
    connector = SupervisorApiConnector("http://localhost:9631", client)

    await connector.aclose()

    assert connector.client is client
    assert not client.is_closed
    await client.aclose()
