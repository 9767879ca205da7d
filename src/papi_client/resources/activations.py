from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.links import parse_link
from papi_client.models import (
    NETWORKS,
    ActivationType,
    ComplianceRecord,
    FallbackInfo,
    RequestModel,
    ResponseModel,
    WireStr,
)
from papi_client.query import build_path, build_url
from papi_client.unwrap import single_item
from papi_client.validation import (
    FieldErrors,
    collect,
    ensure_valid,
    nested,
    one_of,
    required,
)

log = logging.getLogger("papi_client.resources.activations")

OP_CREATE_ACTIVATION = "creating activation"
OP_GET_ACTIVATION = "fetching activation"
OP_GET_ACTIVATIONS = "fetching activations"
OP_CANCEL_ACTIVATION = "canceling activation"

ACTIVATIONS_PATH = "/papi/v1/properties/{property_id}/activations"
ACTIVATION_PATH = "/papi/v1/properties/{property_id}/activations/{activation_id}"


class Activation(ResponseModel):
    activation_id: str = Field(default="", alias="activationId")
    activation_type: str = Field(default="", alias="activationType")
    use_fast_fallback: bool = Field(default=False, alias="useFastFallback")
    fallback_info: Optional[FallbackInfo] = Field(default=None, alias="fallbackInfo")
    acknowledge_warnings: List[str] = Field(
        default_factory=list, alias="acknowledgeWarnings"
    )
    acknowledge_all_warnings: bool = Field(default=False, alias="acknowledgeAllWarnings")
    fast_push: bool = Field(default=False, alias="fastPush")
    fma_activation_state: str = Field(default="", alias="fmaActivationState")
    ignore_http_errors: bool = Field(default=False, alias="ignoreHttpErrors")
    property_name: str = Field(default="", alias="propertyName")
    property_id: str = Field(default="", alias="propertyId")
    property_version: int = Field(default=0, alias="propertyVersion")
    network: str = ""
    status: str = ""
    submit_date: str = Field(default="", alias="submitDate")
    update_date: str = Field(default="", alias="updateDate")
    note: str = ""
    notify_emails: List[str] = Field(default_factory=list, alias="notifyEmails")


class ActivationItems(ResponseModel):
    items: List[Activation] = Field(default_factory=list)


class ActivationCreate(RequestModel):
    """POST body. activationType falls back to ACTIVATE when left unset."""

    activation_type: WireStr = Field(default="", alias="activationType")
    property_version: int = Field(default=0, alias="propertyVersion")
    network: WireStr = ""
    notify_emails: List[str] = Field(default_factory=list, alias="notifyEmails")
    note: Optional[str] = None
    use_fast_fallback: bool = Field(default=False, alias="useFastFallback")
    acknowledge_warnings: Optional[List[str]] = Field(
        default=None, alias="acknowledgeWarnings"
    )
    acknowledge_all_warnings: bool = Field(default=False, alias="acknowledgeAllWarnings")
    fast_push: Optional[bool] = Field(default=None, alias="fastPush")
    ignore_http_errors: Optional[bool] = Field(default=None, alias="ignoreHttpErrors")
    compliance_record: Optional[ComplianceRecord] = Field(
        default=None, alias="complianceRecord"
    )

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("activation_type", self.activation_type, [one_of(*ActivationType)]),
            ("property_version", self.property_version, [required]),
            ("network", self.network, [required, one_of(*NETWORKS)]),
            ("notify_emails", self.notify_emails, [required]),
            ("compliance_record", self.compliance_record, [nested]),
        )

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        if not body.get("activationType"):
            body["activationType"] = ActivationType.ACTIVATE.value
        if self.compliance_record is not None:
            body["complianceRecord"] = self.compliance_record.to_body()
        return body


class CreateActivationRequest(RequestModel):
    property_id: str = ""
    contract_id: str = ""
    group_id: str = ""
    activation: ActivationCreate = Field(default_factory=ActivationCreate)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("activation", self.activation, [nested]),
        )


class CreateActivationResponse(ResponseModel):
    activation_link: str = Field(default="", alias="activationLink")
    activation_id: str = ""


class GetActivationsRequest(RequestModel):
    property_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(("property_id", self.property_id, [required]))


class GetActivationsResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    activations: ActivationItems = Field(default_factory=ActivationItems)


class GetActivationRequest(RequestModel):
    property_id: str = ""
    activation_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("activation_id", self.activation_id, [required]),
        )


class GetActivationResponse(GetActivationsResponse):
    activation: Activation
    # seconds the server suggests waiting before polling again; 0 when absent
    retry_after: int = 0


class CancelActivationRequest(RequestModel):
    property_id: str = ""
    activation_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("activation_id", self.activation_id, [required]),
        )


class CancelActivationResponse(ResponseModel):
    activations: ActivationItems = Field(default_factory=ActivationItems)


def _retry_after(value: Optional[str]) -> int:
    if not value:
        return 0
    try:
        return int(value.strip())
    except ValueError:
        return 0


def _scope(contract_id: str, group_id: str) -> dict:
    return {"contractId": contract_id, "groupId": group_id}


async def create_activation(
    client: PapiClient, request: CreateActivationRequest
) -> CreateActivationResponse:
    """
    Start activating (or deactivating) a property version.
    Returns as soon as the server accepts it; poll get_activation for the outcome.
    """
    ensure_valid(request, operation=OP_CREATE_ACTIVATION)
    log.debug(OP_CREATE_ACTIVATION)
    url = build_url(
        build_path(ACTIVATIONS_PATH, property_id=request.property_id),
        _scope(request.contract_id, request.group_id),
    )
    result = await client.request_model(
        CreateActivationResponse,
        "POST",
        url,
        operation=OP_CREATE_ACTIVATION,
        expect=(201,),
        json=request.activation.to_body(),
    )
    result.activation_id = parse_link(
        result.activation_link, operation=OP_CREATE_ACTIVATION
    )
    return result


async def get_activations(
    client: PapiClient, request: GetActivationsRequest
) -> GetActivationsResponse:
    ensure_valid(request, operation=OP_GET_ACTIVATIONS)
    log.debug(OP_GET_ACTIVATIONS)
    url = build_url(
        build_path(ACTIVATIONS_PATH, property_id=request.property_id),
        _scope(request.contract_id, request.group_id),
    )
    return await client.request_model(
        GetActivationsResponse, "GET", url, operation=OP_GET_ACTIVATIONS
    )


async def get_activation(
    client: PapiClient, request: GetActivationRequest
) -> GetActivationResponse:
    ensure_valid(request, operation=OP_GET_ACTIVATION)
    log.debug(OP_GET_ACTIVATION)
    url = build_url(
        build_path(
            ACTIVATION_PATH,
            property_id=request.property_id,
            activation_id=request.activation_id,
        ),
        _scope(request.contract_id, request.group_id),
    )
    resp = await client.call("GET", url, operation=OP_GET_ACTIVATION)
    wire = client.decode(resp, GetActivationsResponse, operation=OP_GET_ACTIVATION)
    item = single_item(
        wire.activations.items,
        f"ActivationID: {request.activation_id}",
        operation=OP_GET_ACTIVATION,
    )
    return GetActivationResponse(
        **dict(wire),
        activation=item,
        retry_after=_retry_after(resp.headers.get("Retry-After")),
    )


async def cancel_activation(
    client: PapiClient, request: CancelActivationRequest
) -> CancelActivationResponse:
    """Only pending activations can be canceled; a late cancel comes back as an API error."""
    ensure_valid(request, operation=OP_CANCEL_ACTIVATION)
    log.debug(OP_CANCEL_ACTIVATION)
    url = build_url(
        build_path(
            ACTIVATION_PATH,
            property_id=request.property_id,
            activation_id=request.activation_id,
        ),
        _scope(request.contract_id, request.group_id),
    )
    return await client.request_model(
        CancelActivationResponse, "DELETE", url, operation=OP_CANCEL_ACTIVATION
    )
