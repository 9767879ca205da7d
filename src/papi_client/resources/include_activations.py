from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.errors import normalize_activation_error
from papi_client.links import parse_link
from papi_client.models import (
    NETWORKS,
    ActivationType,
    ComplianceRecord,
    FallbackInfo,
    RequestModel,
    ResponseModel,
    WireStr,
    production_compliance,
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

log = logging.getLogger("papi_client.resources.include_activations")

OP_ACTIVATE_INCLUDE = "activating include"
OP_DEACTIVATE_INCLUDE = "deactivating include"
OP_CANCEL_INCLUDE_ACTIVATION = "canceling include activation"
OP_GET_INCLUDE_ACTIVATION = "fetching include activation"
OP_LIST_INCLUDE_ACTIVATIONS = "listing include activations"

ACTIVATIONS_PATH = "/papi/v1/includes/{include_id}/activations"
ACTIVATION_PATH = "/papi/v1/includes/{include_id}/activations/{activation_id}"


class IncludeActivation(ResponseModel):
    activation_id: str = Field(default="", alias="activationId")
    network: str = ""
    activation_type: str = Field(default="", alias="activationType")
    status: str = ""
    submit_date: str = Field(default="", alias="submitDate")
    update_date: str = Field(default="", alias="updateDate")
    note: str = ""
    notify_emails: List[str] = Field(default_factory=list, alias="notifyEmails")
    fma_activation_state: str = Field(default="", alias="fmaActivationState")
    fallback_info: Optional[FallbackInfo] = Field(default=None, alias="fallbackInfo")
    include_id: str = Field(default="", alias="includeId")
    include_name: str = Field(default="", alias="includeName")
    include_type: str = Field(default="", alias="includeType")
    include_version: int = Field(default=0, alias="includeVersion")
    include_activation_id: str = Field(default="", alias="includeActivationId")


class IncludeActivationItems(ResponseModel):
    items: List[IncludeActivation] = Field(default_factory=list)


class ValidationSummary(ResponseModel):
    complete_percent: float = Field(default=0.0, alias="completePercent")
    has_validation_error: bool = Field(default=False, alias="hasValidationError")
    has_validation_warning: bool = Field(default=False, alias="hasValidationWarning")
    has_system_error: bool = Field(default=False, alias="hasSystemError")
    has_client_error: bool = Field(default=False, alias="hasClientError")
    message_state: str = Field(default="", alias="messageState")


class ErrorItem(ResponseModel):
    version_id: int = Field(default=0, alias="versionId")
    property_name: str = Field(default="", alias="propertyName")
    version_number: int = Field(default=0, alias="versionNumber")
    has_validation_error: bool = Field(default=False, alias="hasValidationError")
    has_validation_warning: bool = Field(default=False, alias="hasValidationWarning")
    validation_results_link: str = Field(default="", alias="validationResultsLink")


class ValidationProgress(ResponseModel):
    error_items: List[ErrorItem] = Field(default_factory=list, alias="errorItemsList")


class Validations(ResponseModel):
    validation_summary: ValidationSummary = Field(
        default_factory=ValidationSummary, alias="validationSummary"
    )
    validation_progress_item_list: ValidationProgress = Field(
        default_factory=ValidationProgress, alias="validationProgressItemList"
    )
    network: str = ""


class ListIncludeActivationsResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    activations: IncludeActivationItems = Field(default_factory=IncludeActivationItems)


CancelIncludeActivationResponse = ListIncludeActivationsResponse


class _IncludeActivationWire(ListIncludeActivationsResponse):
    validations: Optional[Validations] = None


class GetIncludeActivationResponse(_IncludeActivationWire):
    activation: IncludeActivation


class ActivateOrDeactivateIncludeRequest(RequestModel):
    """
    Body of an include (de)activation; activationType is added by the operation.
    ignoreHttpErrors is sent as true unless set explicitly.
    """

    include_id: str = Field(default="", exclude=True)
    version: int = Field(default=0, alias="includeVersion")
    network: WireStr = ""
    note: str = ""
    notify_emails: List[str] = Field(default_factory=list, alias="notifyEmails")
    acknowledge_warnings: Optional[List[str]] = Field(
        default=None, alias="acknowledgeWarnings"
    )
    acknowledge_all_warnings: bool = Field(default=False, alias="acknowledgeAllWarnings")
    ignore_http_errors: Optional[bool] = Field(default=None, alias="ignoreHttpErrors")
    compliance_record: Optional[ComplianceRecord] = Field(
        default=None, alias="complianceRecord"
    )

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("include_id", self.include_id, [required]),
            ("version", self.version, [required]),
            ("network", self.network, [required, one_of(*NETWORKS)]),
            ("notify_emails", self.notify_emails, [required]),
        )

    def body(self, activation_type: ActivationType) -> Dict[str, Any]:
        body = self.to_body()
        if self.ignore_http_errors is None:
            body["ignoreHttpErrors"] = True
        if self.compliance_record is not None:
            body["complianceRecord"] = self.compliance_record.to_body()
        body["activationType"] = activation_type.value
        return body


class ActivateIncludeRequest(ActivateOrDeactivateIncludeRequest):
    def validation_errors(self) -> FieldErrors:
        errors = super().validation_errors()
        errors.update(
            collect(
                (
                    "compliance_record",
                    self.compliance_record,
                    [nested, production_compliance(self.network)],
                ),
            )
        )
        return errors


class DeactivateIncludeRequest(ActivateOrDeactivateIncludeRequest):
    pass


class ActivationIncludeResponse(ResponseModel):
    activation_link: str = Field(default="", alias="activationLink")
    activation_id: str = ""


DeactivationIncludeResponse = ActivationIncludeResponse


class CancelIncludeActivationRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""
    include_id: str = ""
    activation_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("include_id", self.include_id, [required]),
            ("activation_id", self.activation_id, [required]),
        )


class GetIncludeActivationRequest(RequestModel):
    include_id: str = ""
    activation_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("include_id", self.include_id, [required]),
            ("activation_id", self.activation_id, [required]),
        )


class ListIncludeActivationsRequest(RequestModel):
    include_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("include_id", self.include_id, [required]),
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
        )


async def _submit(
    client: PapiClient,
    request: ActivateOrDeactivateIncludeRequest,
    activation_type: ActivationType,
    operation: str,
) -> ActivationIncludeResponse:
    ensure_valid(request, operation=operation)
    log.debug(operation)
    url = build_path(ACTIVATIONS_PATH, include_id=request.include_id)
    resp = await client.send(
        "POST", url, json=request.body(activation_type), operation=operation
    )
    if resp.status_code != 201:
        raise normalize_activation_error(
            resp.status_code, resp.content, operation=operation, logger=client.log
        )
    result = client.decode(resp, ActivationIncludeResponse, operation=operation)
    result.activation_id = parse_link(result.activation_link, operation=operation)
    return result


async def activate_include(
    client: PapiClient, request: ActivateIncludeRequest
) -> ActivationIncludeResponse:
    """
    Submit an include version for activation.
    A rejected compliance record surfaces as ActivationValidationError.
    """
    return await _submit(client, request, ActivationType.ACTIVATE, OP_ACTIVATE_INCLUDE)


async def deactivate_include(
    client: PapiClient, request: DeactivateIncludeRequest
) -> DeactivationIncludeResponse:
    return await _submit(
        client, request, ActivationType.DEACTIVATE, OP_DEACTIVATE_INCLUDE
    )


async def cancel_include_activation(
    client: PapiClient, request: CancelIncludeActivationRequest
) -> CancelIncludeActivationResponse:
    ensure_valid(request, operation=OP_CANCEL_INCLUDE_ACTIVATION)
    log.debug(OP_CANCEL_INCLUDE_ACTIVATION)
    url = build_url(
        build_path(
            ACTIVATION_PATH,
            include_id=request.include_id,
            activation_id=request.activation_id,
        ),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        CancelIncludeActivationResponse,
        "DELETE",
        url,
        operation=OP_CANCEL_INCLUDE_ACTIVATION,
    )


async def get_include_activation(
    client: PapiClient, request: GetIncludeActivationRequest
) -> GetIncludeActivationResponse:
    ensure_valid(request, operation=OP_GET_INCLUDE_ACTIVATION)
    log.debug(OP_GET_INCLUDE_ACTIVATION)
    url = build_path(
        ACTIVATION_PATH,
        include_id=request.include_id,
        activation_id=request.activation_id,
    )
    wire = await client.request_model(
        _IncludeActivationWire, "GET", url, operation=OP_GET_INCLUDE_ACTIVATION
    )
    item = single_item(
        wire.activations.items,
        f"ActivationID: {request.activation_id}",
        operation=OP_GET_INCLUDE_ACTIVATION,
    )
    return GetIncludeActivationResponse(**dict(wire), activation=item)


async def list_include_activations(
    client: PapiClient, request: ListIncludeActivationsRequest
) -> ListIncludeActivationsResponse:
    ensure_valid(request, operation=OP_LIST_INCLUDE_ACTIVATIONS)
    log.debug(OP_LIST_INCLUDE_ACTIVATIONS)
    url = build_url(
        build_path(ACTIVATIONS_PATH, include_id=request.include_id),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        ListIncludeActivationsResponse,
        "GET",
        url,
        operation=OP_LIST_INCLUDE_ACTIVATIONS,
    )
