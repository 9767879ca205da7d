import json

import pytest
import respx
from httpx import Response
from papi_client.client import PapiClient
from papi_client.errors import PapiValidationError, ResourceNotFoundError
from papi_client.resources.edge_hostnames import (
    CreateEdgeHostnameRequest,
    EdgeHostnameCreate,
    GetEdgeHostnameRequest,
    GetEdgeHostnamesRequest,
    IPVersionBehavior,
    SecureNetwork,
    UseCase,
    create_edge_hostname,
    get_edge_hostname,
    get_edge_hostnames,
)

BASE = "https://mock-papi.com"

EDGE_HOSTNAMES_PAYLOAD = {
    "accountId": "act_1-1TJZFB",
    "contractId": "ctr_1-1TJZFW",
    "groupId": "grp_15225",
    "edgeHostnames": {
        "items": [
            {
                "edgeHostnameId": "ehn_895822",
                "edgeHostnameDomain": "example.com.edgesuite.net",
                "productId": "prd_Dynamic_Site_Del",
                "domainPrefix": "example.com",
                "domainSuffix": "edgesuite.net",
                "secure": False,
                "ipVersionBehavior": "IPV4",
            }
        ]
    },
}


@pytest.fixture
def client():
    return PapiClient(base_url=BASE)


@pytest.mark.asyncio
@respx.mock
async def test_get_edge_hostnames_joins_options(client):
    route = respx.get(f"{BASE}/papi/v1/edgehostnames").mock(
        return_value=Response(200, json=EDGE_HOSTNAMES_PAYLOAD)
    )

    async with client:
        result = await get_edge_hostnames(
            client,
            GetEdgeHostnamesRequest(
                contract_id="ctr_1-1TJZFW", group_id="grp_15225", options=["opt1", "opt2"]
            ),
        )

    assert result.edge_hostnames.items[0].edge_hostname_id == "ehn_895822"
    assert str(route.calls[0].request.url) == (
        f"{BASE}/papi/v1/edgehostnames?contractId=ctr_1-1TJZFW&groupId=grp_15225&options=opt1,opt2"
    )


@pytest.mark.asyncio
@respx.mock
async def test_get_edge_hostname_unwraps(client):
    respx.get(f"{BASE}/papi/v1/edgehostnames/ehn_895822").mock(
        return_value=Response(200, json=EDGE_HOSTNAMES_PAYLOAD)
    )

    async with client:
        result = await get_edge_hostname(
            client,
            GetEdgeHostnameRequest(
                edge_hostname_id="ehn_895822", contract_id="ctr_1-1TJZFW", group_id="grp_15225"
            ),
        )

    assert result.edge_hostname.domain_suffix == "edgesuite.net"


@pytest.mark.asyncio
@respx.mock
async def test_get_edge_hostname_not_found(client):
    respx.get(f"{BASE}/papi/v1/edgehostnames/ehn_1").mock(
        return_value=Response(200, json={"edgeHostnames": {"items": []}})
    )

    async with client:
        with pytest.raises(ResourceNotFoundError) as exc:
            await get_edge_hostname(
                client,
                GetEdgeHostnameRequest(edge_hostname_id="ehn_1", contract_id="c", group_id="g"),
            )

    assert exc.value.identifier == "EdgeHostnameID: ehn_1"


@pytest.mark.asyncio
@respx.mock
async def test_create_edge_hostname_drops_empty_optionals(client):
    route = respx.post(f"{BASE}/papi/v1/edgehostnames").mock(
        return_value=Response(
            201,
            json={"edgeHostnameLink": "/papi/v1/edgehostnames/ehn_1234?contractId=c&groupId=g"},
        )
    )

    async with client:
        result = await create_edge_hostname(
            client,
            CreateEdgeHostnameRequest(
                contract_id="ctr_1",
                group_id="grp_1",
                edge_hostname=EdgeHostnameCreate(
                    product_id="prd_1",
                    domain_prefix="www.example.com",
                    domain_suffix="edgesuite.net",
                    secure_network=SecureNetwork.STANDARD_TLS,
                    ip_version_behavior=IPVersionBehavior.IPV4,
                ),
            ),
        )

    assert result.edge_hostname_id == "ehn_1234"
    assert json.loads(route.calls[0].request.content) == {
        "productId": "prd_1",
        "domainPrefix": "www.example.com",
        "domainSuffix": "edgesuite.net",
        "secureNetwork": "STANDARD_TLS",
        "ipVersionBehavior": "IPV4",
    }


def test_suffix_must_match_secure_network():
    request = CreateEdgeHostnameRequest(
        contract_id="ctr_1",
        group_id="grp_1",
        edge_hostname=EdgeHostnameCreate(
            product_id="prd_1",
            domain_prefix="www.example.com",
            domain_suffix="edgesuite.net",
            secure_network=SecureNetwork.ENHANCED_TLS,
            ip_version_behavior=IPVersionBehavior.IPV6_COMPLIANCE,
        ),
    )

    assert request.validation_errors() == {
        "domain_suffix": "value 'edgesuite.net' is invalid. Must be one of: 'edgekey.net'",
        "cert_enrollment_id": "cannot be blank",
    }


def test_use_cases_are_validated():
    request = CreateEdgeHostnameRequest(
        contract_id="ctr_1",
        group_id="grp_1",
        edge_hostname=EdgeHostnameCreate(
            product_id="prd_1",
            domain_prefix="www.example.com",
            domain_suffix="akamaized.net",
            secure_network=SecureNetwork.SHARED_CERT,
            ip_version_behavior="IPV4",
            use_cases=[UseCase(option="BACKGROUND", type="LOCAL", use_case="Download_Mode")],
        ),
    )

    assert request.validation_errors() == {
        "use_cases": {"0": {"type": "value 'LOCAL' is invalid. Must be one of: 'GLOBAL'"}}
    }


@pytest.mark.asyncio
async def test_create_edge_hostname_reports_body_fields_at_top_level(client):
    async with client:
        with pytest.raises(PapiValidationError) as exc:
            await create_edge_hostname(client, CreateEdgeHostnameRequest())

    assert list(exc.value.errors) == [
        "contract_id",
        "group_id",
        "domain_prefix",
        "domain_suffix",
        "product_id",
        "ip_version_behavior",
    ]
