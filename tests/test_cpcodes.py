import json

import pytest
import respx
from httpx import Response
from papi_client.client import PapiClient
from papi_client.errors import InvalidResponseLinkError, PapiValidationError, ResourceNotFoundError
from papi_client.resources.cpcodes import (
    CPCodeContractRef,
    CPCodeProductRef,
    CreateCPCode,
    CreateCPCodeRequest,
    GetCPCodeRequest,
    GetCPCodesRequest,
    UpdateCPCodeRequest,
    create_cpcode,
    get_cpcode,
    get_cpcode_detail,
    get_cpcodes,
    update_cpcode,
)

BASE = "https://mock-papi.com"

CPCODES_PAYLOAD = {
    "accountId": "act_1-1TJZFB",
    "contractId": "ctr_1-1TJZFW",
    "groupId": "grp_15225",
    "cpcodes": {
        "items": [
            {
                "cpcodeId": "cpc_33190",
                "cpcodeName": "SME WAA",
                "createdDate": "2015-03-02T15:06:13Z",
                "productIds": ["prd_Web_App_Accel"],
            }
        ]
    },
}


@pytest.fixture
def client():
    return PapiClient(base_url=BASE)


def _create_request():
    return CreateCPCodeRequest(
        contract_id="ctr_1-1TJZFW",
        group_id="grp_15225",
        cpcode=CreateCPCode(product_id="prd_Web_App_Accel", cpcode_name="test-cpcode"),
    )


@pytest.mark.asyncio
@respx.mock
async def test_get_cpcodes(client):
    route = respx.get(f"{BASE}/papi/v1/cpcodes").mock(
        return_value=Response(200, json=CPCODES_PAYLOAD)
    )

    async with client:
        result = await get_cpcodes(
            client, GetCPCodesRequest(contract_id="ctr_1-1TJZFW", group_id="grp_15225")
        )

    assert result.cpcodes.items[0].cpcode_name == "SME WAA"
    assert route.calls[0].request.url.params["contractId"] == "ctr_1-1TJZFW"


@pytest.mark.asyncio
async def test_get_cpcodes_requires_contract_and_group(client):
    async with client:
        with pytest.raises(PapiValidationError) as exc:
            await get_cpcodes(client, GetCPCodesRequest())

    assert "contract_id" in str(exc.value)
    assert "group_id" in str(exc.value)


@pytest.mark.asyncio
@respx.mock
async def test_get_cpcode_flattens_item(client):
    respx.get(f"{BASE}/papi/v1/cpcodes/cpc_33190").mock(
        return_value=Response(200, json=CPCODES_PAYLOAD)
    )

    async with client:
        result = await get_cpcode(
            client,
            GetCPCodeRequest(
                cpcode_id="cpc_33190", contract_id="ctr_1-1TJZFW", group_id="grp_15225"
            ),
        )

    assert result.cpcode.cpcode_id == "cpc_33190"
    assert result.cpcode.product_ids == ["prd_Web_App_Accel"]


@pytest.mark.asyncio
@respx.mock
async def test_get_cpcode_not_found_names_identifier(client):
    respx.get(f"{BASE}/papi/v1/cpcodes/cpc_1").mock(
        return_value=Response(200, json={"cpcodes": {"items": []}})
    )

    async with client:
        with pytest.raises(ResourceNotFoundError) as exc:
            await get_cpcode(
                client,
                GetCPCodeRequest(cpcode_id="cpc_1", contract_id="ctr_1", group_id="grp_1"),
            )

    assert exc.value.identifier == "CPCodeID: cpc_1"


@pytest.mark.asyncio
@respx.mock
async def test_create_cpcode_returns_id_from_link(client):
    route = respx.post(f"{BASE}/papi/v1/cpcodes").mock(
        return_value=Response(
            201,
            json={"cpcodeLink": "/papi/v1/cpcodes/123?contractId=contract-1TJZFW&groupId=group"},
        )
    )

    async with client:
        result = await create_cpcode(client, _create_request())

    assert result.cpcode_id == "123"
    request = route.calls[0].request
    assert request.url.query == b"contractId=ctr_1-1TJZFW&groupId=grp_15225"
    assert json.loads(request.content) == {
        "productId": "prd_Web_App_Accel",
        "cpcodeName": "test-cpcode",
    }


@pytest.mark.asyncio
@respx.mock
async def test_create_cpcode_with_unparsable_link(client):
    respx.post(f"{BASE}/papi/v1/cpcodes").mock(
        return_value=Response(201, json={"cpcodeLink": ":"})
    )

    async with client:
        with pytest.raises(InvalidResponseLinkError) as exc:
            await create_cpcode(client, _create_request())

    assert exc.value.operation == "creating CP code"


@pytest.mark.asyncio
@respx.mock
async def test_get_cpcode_detail_uses_numeric_id(client):
    respx.get(f"{BASE}/cprg/v1/cpcodes/123").mock(
        return_value=Response(
            200,
            json={
                "accountId": "act_1",
                "cpcodeId": 123,
                "cpcodeName": "test-cpcode",
                "purgeable": True,
                "contracts": [{"contractId": "ctr_1", "status": "ongoing"}],
                "products": [{"productId": "prd_1", "productName": "Web"}],
                "overrideTimeZone": {"timeZoneId": "0", "timeZoneValue": "GMT"},
            },
        )
    )

    async with client:
        detail = await get_cpcode_detail(client, 123)

    assert detail.cpcode_id == 123
    assert detail.override_time_zone.time_zone_value == "GMT"


@pytest.mark.asyncio
async def test_get_cpcode_detail_rejects_zero(client):
    async with client:
        with pytest.raises(PapiValidationError):
            await get_cpcode_detail(client, 0)


@pytest.mark.asyncio
@respx.mock
async def test_update_cpcode_sends_body_without_id(client):
    route = respx.put(f"{BASE}/cprg/v1/cpcodes/123").mock(
        return_value=Response(200, json={"cpcodeId": 123, "cpcodeName": "renamed"})
    )

    async with client:
        detail = await update_cpcode(
            client,
            UpdateCPCodeRequest(
                cpcode_id=123,
                cpcode_name="renamed",
                contracts=[CPCodeContractRef(contract_id="ctr_1")],
                products=[CPCodeProductRef(product_id="prd_1")],
            ),
        )

    assert detail.cpcode_name == "renamed"
    assert json.loads(route.calls[0].request.content) == {
        "cpcodeName": "renamed",
        "contracts": [{"contractId": "ctr_1"}],
        "products": [{"productId": "prd_1"}],
    }


def test_update_cpcode_validates_nested_lists():
    errors = UpdateCPCodeRequest(
        cpcode_id=1, cpcode_name="x", contracts=[CPCodeContractRef()]
    ).validation_errors()

    assert errors == {
        "contracts": {"0": {"contract_id": "cannot be blank"}},
        "products": "cannot be blank",
    }
