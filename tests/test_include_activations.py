import json

import pytest
import respx
from httpx import Response
from papi_client.client import PapiClient
from papi_client.errors import (
    ActivationValidationError,
    ErrorCategory,
    PapiAPIError,
    PapiValidationError,
    classify_error,
    is_missing_compliance_record,
)
from papi_client.models import UNIT_TESTED_MESSAGE, ActivationNetwork, ComplianceRecord
from papi_client.resources.include_activations import (
    ActivateIncludeRequest,
    CancelIncludeActivationRequest,
    DeactivateIncludeRequest,
    GetIncludeActivationRequest,
    ListIncludeActivationsRequest,
    activate_include,
    cancel_include_activation,
    deactivate_include,
    get_include_activation,
    list_include_activations,
)

BASE = "https://mock-papi.com"
ACTIVATIONS_URL = f"{BASE}/papi/v1/includes/inc_123456/activations"

ACTIVATION_ITEM = {
    "activationId": "atv_12345",
    "activationType": "ACTIVATE",
    "network": "STAGING",
    "status": "ACTIVE",
    "includeId": "inc_123456",
    "includeName": "example_include",
    "includeType": "MICROSERVICES",
    "includeVersion": 2,
    "includeActivationId": "123",
    "submitDate": "2022-01-01T00:00:00Z",
    "updateDate": "2022-01-01T00:10:00Z",
    "note": "",
    "notifyEmails": ["you@example.com"],
    "fmaActivationState": "steady",
}


@pytest.fixture
def client():
    return PapiClient(base_url=BASE)


def _activate(**overrides):
    fields = dict(
        include_id="inc_123456",
        version=2,
        network=ActivationNetwork.STAGING,
        notify_emails=["you@example.com"],
    )
    fields.update(overrides)
    return ActivateIncludeRequest(**fields)


@pytest.mark.asyncio
@respx.mock
async def test_activate_include_injects_type_and_defaults(client):
    route = respx.post(ACTIVATIONS_URL).mock(
        return_value=Response(
            201, json={"activationLink": "/papi/v1/includes/inc_123456/activations/atv_12345"}
        )
    )

    async with client:
        result = await activate_include(client, _activate(note="first rollout"))

    assert result.activation_id == "atv_12345"
    body = json.loads(route.calls[0].request.content)
    assert body["activationType"] == "ACTIVATE"
    assert body["includeVersion"] == 2
    assert body["network"] == "STAGING"
    assert body["ignoreHttpErrors"] is True
    assert body["note"] == "first rollout"
    assert "includeId" not in body
    assert "complianceRecord" not in body


@pytest.mark.asyncio
@respx.mock
async def test_activate_include_on_production_sends_record(client):
    route = respx.post(ACTIVATIONS_URL).mock(
        return_value=Response(
            201, json={"activationLink": "/papi/v1/includes/inc_123456/activations/atv_9"}
        )
    )
    record = ComplianceRecord.none(
        customer_email="customer@example.com",
        peer_reviewed_by="reviewer@example.com",
        unit_tested=True,
        ticket_id="T-1",
    )

    async with client:
        await activate_include(
            client,
            _activate(
                network=ActivationNetwork.PRODUCTION,
                compliance_record=record,
                ignore_http_errors=False,
            ),
        )

    body = json.loads(route.calls[0].request.content)
    assert body["ignoreHttpErrors"] is False
    assert body["complianceRecord"] == {
        "noncomplianceReason": "NONE",
        "customerEmail": "customer@example.com",
        "peerReviewedBy": "reviewer@example.com",
        "unitTested": True,
        "ticketId": "T-1",
    }


def test_production_activation_requires_record():
    errors = _activate(network="PRODUCTION").validation_errors()
    assert errors == {"compliance_record": "is required for production network"}


def test_production_none_record_must_be_unit_tested():
    record = ComplianceRecord.none(customer_email="a@example.com", peer_reviewed_by="b@example.com")
    errors = _activate(network="PRODUCTION", compliance_record=record).validation_errors()

    assert errors == {"compliance_record": {"unit_tested": UNIT_TESTED_MESSAGE}}


def test_record_own_rules_are_reported_first():
    record = ComplianceRecord.other(reason="")
    errors = _activate(network="PRODUCTION", compliance_record=record).validation_errors()

    assert errors == {
        "compliance_record": {"other_noncompliance_reason": "cannot be blank"}
    }


@pytest.mark.asyncio
async def test_activate_include_missing_fields(client):
    async with client:
        with pytest.raises(PapiValidationError) as exc:
            await activate_include(client, ActivateIncludeRequest())

    assert list(exc.value.errors) == ["include_id", "version", "network", "notify_emails"]


@pytest.mark.asyncio
@respx.mock
async def test_activate_include_rejected_without_compliance_record(client):
    respx.post(ACTIVATIONS_URL).mock(
        return_value=Response(
            400,
            json={
                "type": "/papi/v1/errors/validation.required_field",
                "title": "Missing required field",
                "instance": "host/papi/v1/includes/inc_123456/activations#1",
                "status": 400,
                "errors": [
                    {
                        "type": "compliance_record",
                        "title": "Compliance record required",
                        "detail": "A compliance record is required for PRODUCTION",
                    }
                ],
                "messageId": "missing_compliance_record",
                "result": "ERROR",
            },
        )
    )

    async with client:
        with pytest.raises(ActivationValidationError) as exc:
            await activate_include(client, _activate())

    assert exc.value.status == 400
    assert exc.value.operation == "activating include"
    assert is_missing_compliance_record(exc.value)
    assert classify_error(exc.value) is ErrorCategory.MISSING_COMPLIANCE_RECORD


@pytest.mark.asyncio
@respx.mock
async def test_activate_include_ordinary_error(client):
    respx.post(ACTIVATIONS_URL).mock(
        return_value=Response(
            422, json={"type": "unprocessable", "title": "Activation Unprocessable", "status": 422}
        )
    )

    async with client:
        with pytest.raises(PapiAPIError) as exc:
            await activate_include(client, _activate())

    assert classify_error(exc.value) is ErrorCategory.ACTIVATION_ALREADY_ACTIVE


@pytest.mark.asyncio
@respx.mock
async def test_deactivate_include(client):
    route = respx.post(ACTIVATIONS_URL).mock(
        return_value=Response(
            201, json={"activationLink": "/papi/v1/includes/inc_123456/activations/atv_777"}
        )
    )

    async with client:
        result = await deactivate_include(
            client,
            DeactivateIncludeRequest(
                include_id="inc_123456",
                version=2,
                network="PRODUCTION",
                notify_emails=["you@example.com"],
            ),
        )

    assert result.activation_id == "atv_777"
    assert json.loads(route.calls[0].request.content)["activationType"] == "DEACTIVATE"


@pytest.mark.asyncio
@respx.mock
async def test_get_include_activation_unwraps_with_validations(client):
    respx.get(f"{ACTIVATIONS_URL}/atv_12345").mock(
        return_value=Response(
            200,
            json={
                "accountId": "act_1",
                "contractId": "ctr_1",
                "groupId": "grp_1",
                "activations": {"items": [ACTIVATION_ITEM]},
                "validations": {
                    "network": "STAGING",
                    "validationSummary": {
                        "completePercent": 100.0,
                        "hasValidationError": False,
                        "hasValidationWarning": True,
                        "messageState": "COMPLETE",
                    },
                    "validationProgressItemList": {
                        "errorItemsList": [
                            {
                                "propertyName": "example.com",
                                "versionNumber": 4,
                                "hasValidationWarning": True,
                                "validationResultsLink": "/papi/v1/results/1",
                            }
                        ]
                    },
                },
            },
        )
    )

    async with client:
        result = await get_include_activation(
            client,
            GetIncludeActivationRequest(include_id="inc_123456", activation_id="atv_12345"),
        )

    assert result.activation.include_version == 2
    assert result.validations.validation_summary.has_validation_warning is True
    assert result.validations.validation_progress_item_list.error_items[0].version_number == 4


@pytest.mark.asyncio
@respx.mock
async def test_list_include_activations(client):
    route = respx.get(ACTIVATIONS_URL).mock(
        return_value=Response(200, json={"activations": {"items": [ACTIVATION_ITEM]}})
    )

    async with client:
        result = await list_include_activations(
            client,
            ListIncludeActivationsRequest(include_id="inc_123456", contract_id="ctr_1", group_id="grp_1"),
        )

    assert result.activations.items[0].activation_id == "atv_12345"
    assert route.calls[0].request.url.query == b"contractId=ctr_1&groupId=grp_1"


@pytest.mark.asyncio
@respx.mock
async def test_cancel_include_activation(client):
    respx.delete(f"{ACTIVATIONS_URL}/atv_12345").mock(
        return_value=Response(
            200,
            json={"activations": {"items": [{**ACTIVATION_ITEM, "status": "PENDING_CANCELLATION"}]}},
        )
    )

    async with client:
        result = await cancel_include_activation(
            client,
            CancelIncludeActivationRequest(
                include_id="inc_123456", activation_id="atv_12345", contract_id="ctr_1", group_id="grp_1"
            ),
        )

    assert result.activations.items[0].status == "PENDING_CANCELLATION"
