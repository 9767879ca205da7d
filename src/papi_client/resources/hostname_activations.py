from __future__ import annotations

import logging
from typing import List

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.errors import ActivationAlreadyAbortedError
from papi_client.models import CertStatusItem, Pagination, RequestModel, ResponseModel
from papi_client.query import build_path, build_url
from papi_client.unwrap import single_item
from papi_client.validation import (
    FieldErrors,
    collect,
    ensure_valid,
    min_value,
    required,
    required_when,
)

log = logging.getLogger("papi_client.resources.hostname_activations")

OP_GET_HOSTNAME_ACTIVATION = "fetching hostname activation"
OP_LIST_HOSTNAME_ACTIVATIONS = "fetching hostname activations"
OP_CANCEL_HOSTNAME_ACTIVATION = "canceling hostname activation"

ACTIVATIONS_PATH = "/papi/v1/properties/{property_id}/hostname-activations"
ACTIVATION_PATH = ACTIVATIONS_PATH + "/{hostname_activation_id}"


class PropertyHostnameItem(ResponseModel):
    cert_provisioning_type: str = Field(default="", alias="certProvisioningType")
    cname_from: str = Field(default="", alias="cnameFrom")
    cname_to: str = Field(default="", alias="cnameTo")
    edge_hostname_id: str = Field(default="", alias="edgeHostnameId")
    cert_status: CertStatusItem = Field(default_factory=CertStatusItem, alias="certStatus")
    action: str = ""


class HostnameActivationListItem(ResponseModel):
    activation_type: str = Field(default="", alias="activationType")
    hostname_activation_id: str = Field(default="", alias="hostnameActivationId")
    property_name: str = Field(default="", alias="propertyName")
    property_id: str = Field(default="", alias="propertyId")
    network: str = ""
    status: str = ""
    submit_date: str = Field(default="", alias="submitDate")
    update_date: str = Field(default="", alias="updateDate")
    note: str = ""
    notify_emails: List[str] = Field(default_factory=list, alias="notifyEmails")


class HostnameActivationGetItem(HostnameActivationListItem):
    hostnames: List[PropertyHostnameItem] = Field(default_factory=list)


class HostnameActivationCancelItem(HostnameActivationListItem):
    property_version: int = Field(default=0, alias="propertyVersion")


class HostnameActivationsList(Pagination):
    items: List[HostnameActivationListItem] = Field(default_factory=list)


# wire shapes: lookups come back as a list, hostnames nested under "items"


class _PropertyHostnameItems(ResponseModel):
    items: List[PropertyHostnameItem] = Field(default_factory=list)


class _HostnameActivationGetWire(HostnameActivationListItem):
    hostnames: _PropertyHostnameItems = Field(default_factory=_PropertyHostnameItems)


class _GetItems(ResponseModel):
    items: List[_HostnameActivationGetWire] = Field(default_factory=list)


class _CancelItems(ResponseModel):
    items: List[HostnameActivationCancelItem] = Field(default_factory=list)


class _Envelope(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")


class _GetWire(_Envelope):
    hostname_activations: _GetItems = Field(
        default_factory=_GetItems, alias="hostnameActivations"
    )


class _CancelWire(_Envelope):
    hostname_activations: _CancelItems = Field(
        default_factory=_CancelItems, alias="hostnameActivations"
    )


class GetPropertyHostnameActivationRequest(RequestModel):
    property_id: str = ""
    hostname_activation_id: str = ""
    contract_id: str = ""
    group_id: str = ""
    include_hostnames: bool = False

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("hostname_activation_id", self.hostname_activation_id, [required]),
        )


class GetPropertyHostnameActivationResponse(_Envelope):
    hostname_activation: HostnameActivationGetItem

    @classmethod
    def from_wire(cls, wire: _GetWire, identifier: str) -> "GetPropertyHostnameActivationResponse":
        item = single_item(
            wire.hostname_activations.items,
            identifier,
            operation=OP_GET_HOSTNAME_ACTIVATION,
        )
        flat = HostnameActivationGetItem(
            **item.model_dump(exclude={"hostnames"}),
            hostnames=item.hostnames.items,
        )
        return cls(
            account_id=wire.account_id,
            contract_id=wire.contract_id,
            group_id=wire.group_id,
            hostname_activation=flat,
        )


class ListPropertyHostnameActivationsRequest(RequestModel):
    property_id: str = ""
    offset: int = 0
    limit: int = 0
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            (
                "contract_id",
                self.contract_id,
                [
                    required_when(
                        bool(self.group_id), "cannot be blank when group_id is provided"
                    )
                ],
            ),
            (
                "group_id",
                self.group_id,
                [
                    required_when(
                        bool(self.contract_id),
                        "cannot be blank when contract_id is provided",
                    )
                ],
            ),
            ("offset", self.offset, [min_value(0)]),
            ("limit", self.limit, [min_value(1)]),
        )


class ListPropertyHostnameActivationsResponse(_Envelope):
    hostname_activations: HostnameActivationsList = Field(
        default_factory=HostnameActivationsList, alias="hostnameActivations"
    )


class CancelPropertyHostnameActivationRequest(RequestModel):
    property_id: str = ""
    hostname_activation_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("hostname_activation_id", self.hostname_activation_id, [required]),
        )


class CancelPropertyHostnameActivationResponse(_Envelope):
    hostname_activation: HostnameActivationCancelItem


async def get_property_hostname_activation(
    client: PapiClient, request: GetPropertyHostnameActivationRequest
) -> GetPropertyHostnameActivationResponse:
    ensure_valid(request, operation=OP_GET_HOSTNAME_ACTIVATION)
    log.debug(OP_GET_HOSTNAME_ACTIVATION)
    url = build_url(
        build_path(
            ACTIVATION_PATH,
            property_id=request.property_id,
            hostname_activation_id=request.hostname_activation_id,
        ),
        {
            "contractId": request.contract_id,
            "groupId": request.group_id,
            "includeHostnames": request.include_hostnames,
        },
    )
    wire = await client.request_model(
        _GetWire, "GET", url, operation=OP_GET_HOSTNAME_ACTIVATION
    )
    return GetPropertyHostnameActivationResponse.from_wire(
        wire, f"HostnameActivationID: {request.hostname_activation_id}"
    )


async def list_property_hostname_activations(
    client: PapiClient, request: ListPropertyHostnameActivationsRequest
) -> ListPropertyHostnameActivationsResponse:
    ensure_valid(request, operation=OP_LIST_HOSTNAME_ACTIVATIONS)
    log.debug(OP_LIST_HOSTNAME_ACTIVATIONS)
    url = build_url(
        build_path(ACTIVATIONS_PATH, property_id=request.property_id),
        {
            "contractId": request.contract_id,
            "groupId": request.group_id,
            "offset": request.offset,
            "limit": request.limit,
        },
    )
    return await client.request_model(
        ListPropertyHostnameActivationsResponse,
        "GET",
        url,
        operation=OP_LIST_HOSTNAME_ACTIVATIONS,
    )


async def cancel_property_hostname_activation(
    client: PapiClient, request: CancelPropertyHostnameActivationRequest
) -> CancelPropertyHostnameActivationResponse:
    """
    Cancel a pending hostname activation.
    A 204 means the activation was already aborted; that raises
    ActivationAlreadyAbortedError instead of returning an empty result.
    """
    ensure_valid(request, operation=OP_CANCEL_HOSTNAME_ACTIVATION)
    log.debug(OP_CANCEL_HOSTNAME_ACTIVATION)
    url = build_url(
        build_path(
            ACTIVATION_PATH,
            property_id=request.property_id,
            hostname_activation_id=request.hostname_activation_id,
        ),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    resp = await client.call(
        "DELETE", url, operation=OP_CANCEL_HOSTNAME_ACTIVATION, expect=(200, 204)
    )
    if resp.status_code == 204:
        raise ActivationAlreadyAbortedError(operation=OP_CANCEL_HOSTNAME_ACTIVATION)
    wire = client.decode(resp, _CancelWire, operation=OP_CANCEL_HOSTNAME_ACTIVATION)
    item = single_item(
        wire.hostname_activations.items,
        f"HostnameActivationID: {request.hostname_activation_id}",
        operation=OP_CANCEL_HOSTNAME_ACTIVATION,
    )
    return CancelPropertyHostnameActivationResponse(
        account_id=wire.account_id,
        contract_id=wire.contract_id,
        group_id=wire.group_id,
        hostname_activation=item,
    )
