import logging

import httpx
import pytest
import respx
from httpx import Response
from papi_client.client import USE_PREFIXES_HEADER, PapiClient
from papi_client.errors import PapiAPIError, PapiDecodeError, PapiTransportError
from papi_client.resources.contracts import get_contracts

BASE = "https://mock-papi.com"

CONTRACTS_PAYLOAD = {
    "accountId": "act_1-1TJZFB",
    "contracts": {
        "items": [
            {"contractId": "ctr_1-1TJZFW", "contractTypeName": "Direct Customer"},
        ]
    },
}


@pytest.mark.parametrize("base_url", ["", "   ", "\t\n", " / "])
def test_base_url_is_required(base_url):
    with pytest.raises(ValueError):
        PapiClient(base_url=base_url)


def test_base_url_surrounding_whitespace_is_stripped():
    client = PapiClient(base_url=f"  {BASE}/ ")
    assert client.base_url == BASE


def test_trailing_slash_is_stripped():
    client = PapiClient(base_url=BASE + "/")
    assert client.base_url == BASE


@pytest.mark.asyncio
async def test_use_prefixes_header_defaults_to_true():
    async with respx.mock:
        route = respx.get(f"{BASE}/papi/v1/contracts").mock(
            return_value=Response(200, json=CONTRACTS_PAYLOAD)
        )

        async with PapiClient(base_url=BASE) as client:
            result = await get_contracts(client)

        assert result.contracts.items[0].contract_id == "ctr_1-1TJZFW"
        sent = route.calls[0].request.headers
        assert sent.get(USE_PREFIXES_HEADER) == "true"
        assert sent.get("Accept") == "application/json"


@pytest.mark.asyncio
async def test_use_prefixes_header_can_be_turned_off():
    async with respx.mock:
        route = respx.get(f"{BASE}/papi/v1/contracts").mock(
            return_value=Response(200, json=CONTRACTS_PAYLOAD)
        )

        async with PapiClient(base_url=BASE, use_prefixes=False) as client:
            await get_contracts(client)

        assert route.calls[0].request.headers.get(USE_PREFIXES_HEADER) == "false"


@pytest.mark.asyncio
async def test_auth_is_applied_to_requests():
    class StaticAuth(httpx.Auth):
        def auth_flow(self, request):
            request.headers["Authorization"] = "EG1-HMAC-SHA256 client_token=abc"
            yield request

    async with respx.mock:
        route = respx.get(f"{BASE}/papi/v1/contracts").mock(
            return_value=Response(200, json=CONTRACTS_PAYLOAD)
        )

        async with PapiClient(base_url=BASE, auth=StaticAuth()) as client:
            await get_contracts(client)

        assert route.calls[0].request.headers["Authorization"].startswith("EG1-HMAC")


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error():
    async with respx.mock:
        respx.get(f"{BASE}/papi/v1/contracts").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        async with PapiClient(base_url=BASE) as client:
            with pytest.raises(PapiTransportError) as exc:
                await get_contracts(client)

        assert exc.value.operation == "fetching contracts"
        assert isinstance(exc.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_malformed_success_body_raises_decode_error():
    async with respx.mock:
        respx.get(f"{BASE}/papi/v1/contracts").mock(
            return_value=Response(200, text="<html>oops</html>")
        )

        async with PapiClient(base_url=BASE) as client:
            with pytest.raises(PapiDecodeError) as exc:
                await get_contracts(client)

        assert "GetContractsResponse" in str(exc.value)


@pytest.mark.asyncio
async def test_unexpected_status_is_normalized():
    async with respx.mock:
        respx.get(f"{BASE}/papi/v1/contracts").mock(
            return_value=Response(
                401, json={"type": "unauthorized", "title": "Unauthorized", "detail": "bad token"}
            )
        )

        async with PapiClient(base_url=BASE) as client:
            with pytest.raises(PapiAPIError) as exc:
                await get_contracts(client)

        assert exc.value.status_code == 401
        assert exc.value.detail == "bad token"
        assert exc.value.operation == "fetching contracts"


@pytest.mark.asyncio
async def test_send_returns_raw_response_for_any_status():
    async with respx.mock:
        respx.delete(f"{BASE}/papi/v1/anything").mock(return_value=Response(418))

        async with PapiClient(base_url=BASE) as client:
            resp = await client.send("delete", "/papi/v1/anything")

        assert resp.status_code == 418


@pytest.mark.asyncio
async def test_injected_http_client_is_not_closed():
    http = httpx.AsyncClient()
    client = PapiClient(base_url=BASE, http=http)

    await client.aclose()

    assert not http.is_closed
    await http.aclose()


@pytest.mark.asyncio
async def test_request_is_logged_without_body(caplog):
    caplog.set_level(logging.DEBUG, logger="papi_client.client")
    async with respx.mock:
        respx.get(f"{BASE}/papi/v1/contracts").mock(
            return_value=Response(200, json=CONTRACTS_PAYLOAD)
        )

        async with PapiClient(base_url=BASE) as client:
            await get_contracts(client)

    record = next(r for r in caplog.records if r.getMessage() == "papi.request")
    assert record.operation == "fetching contracts"
    assert record.method == "GET"
    assert record.url == f"{BASE}/papi/v1/contracts"
    assert record.status == 200
    assert isinstance(record.duration_ms, int)
