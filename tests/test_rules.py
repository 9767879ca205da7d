import json

import pytest
import respx
from httpx import Response
from papi_client.client import PapiClient
from papi_client.errors import PapiValidationError
from papi_client.resources.client_settings import (
    UpdateClientSettingsRequest,
    get_client_settings,
    update_client_settings,
)
from papi_client.resources.include_rules import (
    GetIncludeRuleTreeRequest,
    UpdateIncludeRuleTreeRequest,
    get_include_rule_tree,
    update_include_rule_tree,
)
from papi_client.resources.rules import (
    RULE_FORMAT_MESSAGE,
    GetRuleTreeRequest,
    RulesUpdate,
    UpdateRulesRequest,
    ValidateMode,
    get_rule_formats,
    get_rule_tree,
    update_rule_tree,
)

BASE = "https://mock-papi.com"
RULES_URL = f"{BASE}/papi/v1/properties/prp_175780/versions/3/rules"
INCLUDE_RULES_URL = f"{BASE}/papi/v1/includes/inc_123456/versions/2/rules"

RULE_TREE = {
    "name": "default",
    "criteria": [],
    "children": [{"name": "Compression", "behaviors": [{"name": "gzipResponse", "options": {"behavior": "ALWAYS"}}]}],
    "behaviors": [{"name": "origin", "options": {"hostname": "origin.example.com"}}],
    "options": {"is_secure": False},
}

RULES_PAYLOAD = {
    "accountId": "act_1",
    "contractId": "ctr_1",
    "groupId": "grp_1",
    "propertyId": "prp_175780",
    "propertyVersion": 3,
    "etag": "a872de3bc5a8f3d0",
    "ruleFormat": "v2023-01-05",
    "rules": RULE_TREE,
}


@pytest.fixture
def client():
    return PapiClient(base_url=BASE)


@pytest.mark.asyncio
@respx.mock
async def test_get_rule_tree_with_rule_format_accept(client):
    route = respx.get(RULES_URL).mock(return_value=Response(200, json=RULES_PAYLOAD))

    async with client:
        result = await get_rule_tree(
            client,
            GetRuleTreeRequest(
                property_id="prp_175780",
                property_version=3,
                contract_id="ctr_1",
                group_id="grp_1",
                validate_mode=ValidateMode.FAST,
                rule_format="v2023-01-05",
            ),
        )

    assert result.etag == "a872de3bc5a8f3d0"
    assert result.rules["children"][0]["name"] == "Compression"
    request = route.calls[0].request
    assert request.headers["Accept"] == "application/vnd.akamai.papirules.v2023-01-05+json"
    assert request.url.query == b"contractId=ctr_1&groupId=grp_1&validateMode=fast"


@pytest.mark.asyncio
@respx.mock
async def test_get_rule_tree_default_accept(client):
    route = respx.get(RULES_URL).mock(return_value=Response(200, json=RULES_PAYLOAD))

    async with client:
        await get_rule_tree(
            client,
            GetRuleTreeRequest(property_id="prp_175780", property_version=3, validate_rules=False),
        )

    request = route.calls[0].request
    assert request.headers["Accept"] == "application/json"
    assert request.url.query == b"validateRules=false"


def test_get_rule_tree_rejects_bad_rule_format():
    errors = GetRuleTreeRequest(
        property_id="prp_1", property_version=1, rule_format="2023", validate_mode="slow"
    ).validation_errors()

    assert errors == {
        "validate_mode": "value 'slow' is invalid. Must be one of: 'fast', 'full'",
        "rule_format": RULE_FORMAT_MESSAGE,
    }


@pytest.mark.asyncio
@respx.mock
async def test_update_rule_tree_dry_run(client):
    route = respx.put(RULES_URL).mock(
        return_value=Response(
            200,
            json={
                **RULES_PAYLOAD,
                "errors": [
                    {
                        "type": "https://problems.example.net/papi/v0/validation/attribute_required",
                        "errorLocation": "#/rules/behaviors/0/options/hostname",
                        "detail": "The origin server hostname is required.",
                    }
                ],
                "warnings": [
                    {
                        "type": "https://problems.example.net/papi/v0/validation/rule_format_outdated",
                        "currentRuleFormat": "v2020-11-02",
                        "suggestedRuleFormat": "v2023-01-05",
                    }
                ],
            },
        )
    )

    async with client:
        result = await update_rule_tree(
            client,
            UpdateRulesRequest(
                property_id="prp_175780",
                property_version=3,
                contract_id="ctr_1",
                group_id="grp_1",
                dry_run=True,
                validate_rules=False,
                rules=RulesUpdate(comments="tune caching", rules=RULE_TREE),
            ),
        )

    assert result.errors[0].error_location == "#/rules/behaviors/0/options/hostname"
    assert result.warnings[0].suggested_rule_format == "v2023-01-05"
    request = route.calls[0].request
    assert request.url.query == b"contractId=ctr_1&dryRun=true&groupId=grp_1&validateRules=false"
    assert json.loads(request.content) == {"comments": "tune caching", "rules": RULE_TREE}


@pytest.mark.asyncio
async def test_update_rule_tree_requires_rules(client):
    async with client:
        with pytest.raises(PapiValidationError) as exc:
            await update_rule_tree(
                client, UpdateRulesRequest(property_id="prp_175780", property_version=3)
            )

    assert exc.value.errors == {"rules": {"rules": "cannot be blank"}}


@pytest.mark.asyncio
@respx.mock
async def test_get_rule_formats(client):
    respx.get(f"{BASE}/papi/v1/rule-formats").mock(
        return_value=Response(
            200, json={"ruleFormats": {"items": ["latest", "v2023-01-05", "v2020-11-02"]}}
        )
    )

    async with client:
        result = await get_rule_formats(client)

    assert result.rule_formats.items[0] == "latest"


@pytest.mark.asyncio
@respx.mock
async def test_get_include_rule_tree(client):
    route = respx.get(INCLUDE_RULES_URL).mock(
        return_value=Response(
            200,
            json={
                "includeId": "inc_123456",
                "includeName": "example_include",
                "includeType": "MICROSERVICES",
                "includeVersion": 2,
                "etag": "etag1",
                "ruleFormat": "v2020-11-02",
                "rules": RULE_TREE,
            },
        )
    )

    async with client:
        result = await get_include_rule_tree(
            client,
            GetIncludeRuleTreeRequest(
                contract_id="ctr_1",
                group_id="grp_1",
                include_id="inc_123456",
                include_version=2,
                rule_format="latest",
            ),
        )

    assert result.include_version == 2
    assert result.rules["name"] == "default"
    assert route.calls[0].request.headers["Accept"] == "application/vnd.akamai.papirules.latest+json"


def test_get_include_rule_tree_requires_scope():
    errors = GetIncludeRuleTreeRequest().validation_errors()
    assert list(errors) == ["contract_id", "group_id", "include_id", "include_version"]


@pytest.mark.asyncio
@respx.mock
async def test_update_include_rule_tree_reads_limit_headers(client):
    route = respx.put(INCLUDE_RULES_URL).mock(
        return_value=Response(
            200,
            json={"includeId": "inc_123456", "includeVersion": 2, "rules": RULE_TREE},
            headers={
                "x-limit-elements-per-property-limit": "3000",
                "x-limit-elements-per-property-remaining": "2990",
                "x-limit-max-nested-rules-per-include-limit": "10",
                "x-limit-max-nested-rules-per-include-remaining": "8",
            },
        )
    )

    async with client:
        result = await update_include_rule_tree(
            client,
            UpdateIncludeRuleTreeRequest(
                contract_id="ctr_1",
                group_id="grp_1",
                include_id="inc_123456",
                include_version=2,
                validate_mode="full",
                rules=RulesUpdate(rules=RULE_TREE),
            ),
        )

    headers = result.response_headers
    assert headers.elements_per_property_total == "3000"
    assert headers.elements_per_property_remaining == "2990"
    assert headers.max_nested_rules_per_include_total == "10"
    assert headers.max_nested_rules_per_include_remaining == "8"
    request = route.calls[0].request
    assert request.url.query == b"contractId=ctr_1&groupId=grp_1&validateMode=full"
    assert json.loads(request.content) == {"rules": RULE_TREE}


@pytest.mark.asyncio
@respx.mock
async def test_client_settings_round_trip(client):
    respx.get(f"{BASE}/papi/v1/client-settings").mock(
        return_value=Response(200, json={"ruleFormat": "v2015-08-17", "usePrefixes": True})
    )
    update_route = respx.put(f"{BASE}/papi/v1/client-settings").mock(
        return_value=Response(200, json={"ruleFormat": "latest", "usePrefixes": False})
    )

    async with client:
        current = await get_client_settings(client)
        updated = await update_client_settings(
            client, UpdateClientSettingsRequest(rule_format="latest")
        )

    assert current.use_prefixes is True
    assert updated.rule_format == "latest"
    assert json.loads(update_route.calls[0].request.content) == {
        "ruleFormat": "latest",
        "usePrefixes": False,
    }


def test_client_settings_rule_format_checks():
    assert UpdateClientSettingsRequest().validation_errors() == {"rule_format": "cannot be blank"}
    assert UpdateClientSettingsRequest(rule_format="newest").validation_errors() == {
        "rule_format": RULE_FORMAT_MESSAGE
    }
