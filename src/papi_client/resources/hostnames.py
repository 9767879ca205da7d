from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.models import (
    NETWORKS,
    CertStatusItem,
    CertType,
    HostnameCnameType,
    RequestModel,
    ResponseModel,
    SortOrder,
    WireStr,
)
from papi_client.query import build_path, build_url, literal_bool
from papi_client.validation import (
    FieldErrors,
    collect,
    each,
    ensure_valid,
    max_value,
    min_value,
    nested,
    one_of,
    required,
)

log = logging.getLogger("papi_client.resources.hostnames")

OP_GET_VERSION_HOSTNAMES = "fetching hostnames"
OP_UPDATE_VERSION_HOSTNAMES = "updating hostnames"
OP_LIST_ACTIVE_HOSTNAMES = "fetching active property hostnames"
OP_GET_ACTIVE_HOSTNAMES_DIFF = "fetching active property hostnames diff"

VERSION_HOSTNAMES_PATH = "/papi/v1/properties/{property_id}/versions/{version}/hostnames"
ACTIVE_HOSTNAMES_PATH = "/papi/v1/properties/{property_id}/hostnames"

MAX_HOSTNAMES_PER_PAGE = 999


# --- Hostnames of a property version ---


class Hostname(ResponseModel):
    cname_type: str = Field(default="", alias="cnameType")
    edge_hostname_id: str = Field(default="", alias="edgeHostnameId")
    cname_from: str = Field(default="", alias="cnameFrom")
    cname_to: str = Field(default="", alias="cnameTo")
    cert_provisioning_type: str = Field(default="", alias="certProvisioningType")
    cert_status: CertStatusItem = Field(default_factory=CertStatusItem, alias="certStatus")


class HostnameItems(ResponseModel):
    items: List[Hostname] = Field(default_factory=list)


class HostnameUpdate(RequestModel):
    cname_type: WireStr = Field(default="", alias="cnameType")
    edge_hostname_id: Optional[str] = Field(default=None, alias="edgeHostnameId")
    cname_from: str = Field(default="", alias="cnameFrom")
    cname_to: Optional[str] = Field(default=None, alias="cnameTo")
    cert_provisioning_type: WireStr = Field(default="", alias="certProvisioningType")

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("cname_type", self.cname_type, [one_of(*HostnameCnameType)]),
            ("cname_from", self.cname_from, [required]),
            (
                "cert_provisioning_type",
                self.cert_provisioning_type,
                [one_of(*CertType)],
            ),
        )


class GetPropertyVersionHostnamesRequest(RequestModel):
    property_id: str = ""
    property_version: int = 0
    contract_id: str = ""
    group_id: str = ""
    validate_hostnames: bool = False
    include_cert_status: bool = False

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("property_version", self.property_version, [required]),
        )


class GetPropertyVersionHostnamesResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    property_id: str = Field(default="", alias="propertyId")
    property_version: int = Field(default=0, alias="propertyVersion")
    etag: str = ""
    hostnames: HostnameItems = Field(default_factory=HostnameItems)


UpdatePropertyVersionHostnamesResponse = GetPropertyVersionHostnamesResponse


class UpdatePropertyVersionHostnamesRequest(RequestModel):
    property_id: str = ""
    property_version: int = 0
    contract_id: str = ""
    group_id: str = ""
    validate_hostnames: bool = False
    include_cert_status: bool = False
    hostnames: List[HostnameUpdate] = Field(default_factory=list)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("property_version", self.property_version, [required]),
            ("hostnames", self.hostnames, [each(nested)]),
        )


def _version_hostnames_url(request) -> str:
    # both flags are always sent, as literal true/false
    return build_url(
        build_path(
            VERSION_HOSTNAMES_PATH,
            property_id=request.property_id,
            version=request.property_version,
        ),
        {
            "contractId": request.contract_id,
            "groupId": request.group_id,
            "validateHostnames": literal_bool(request.validate_hostnames),
            "includeCertStatus": literal_bool(request.include_cert_status),
        },
    )


async def get_property_version_hostnames(
    client: PapiClient, request: GetPropertyVersionHostnamesRequest
) -> GetPropertyVersionHostnamesResponse:
    ensure_valid(request, operation=OP_GET_VERSION_HOSTNAMES)
    log.debug(OP_GET_VERSION_HOSTNAMES)
    return await client.request_model(
        GetPropertyVersionHostnamesResponse,
        "GET",
        _version_hostnames_url(request),
        operation=OP_GET_VERSION_HOSTNAMES,
    )


async def update_property_version_hostnames(
    client: PapiClient, request: UpdatePropertyVersionHostnamesRequest
) -> UpdatePropertyVersionHostnamesResponse:
    """Replace the full hostname list of a version; an empty list clears it."""
    ensure_valid(request, operation=OP_UPDATE_VERSION_HOSTNAMES)
    log.debug(OP_UPDATE_VERSION_HOSTNAMES)
    return await client.request_model(
        UpdatePropertyVersionHostnamesResponse,
        "PUT",
        _version_hostnames_url(request),
        operation=OP_UPDATE_VERSION_HOSTNAMES,
        json=[h.to_body() for h in request.hostnames],
    )


# --- Hostnames active on the networks ---


class HostnameItem(ResponseModel):
    cert_status: Optional[CertStatusItem] = Field(default=None, alias="certStatus")
    cname_from: str = Field(default="", alias="cnameFrom")
    cname_type: str = Field(default="", alias="cnameType")
    production_cert_type: str = Field(default="", alias="productionCertType")
    production_cname_to: str = Field(default="", alias="productionCnameTo")
    production_edge_hostname_id: str = Field(
        default="", alias="productionEdgeHostnameId"
    )
    staging_cert_type: str = Field(default="", alias="stagingCertType")
    # the API capitalizes this one key
    staging_cname_to: str = Field(default="", alias="StagingCnameTo")
    staging_edge_hostname_id: str = Field(default="", alias="stagingEdgeHostnameId")


class HostnameDiffItem(ResponseModel):
    cname_from: str = Field(default="", alias="cnameFrom")
    production_cert_provisioning_type: str = Field(
        default="", alias="productionCertProvisioningType"
    )
    production_cname_to: str = Field(default="", alias="productionCnameTo")
    production_cname_type: str = Field(default="", alias="productionCnameType")
    production_edge_hostname_id: str = Field(
        default="", alias="productionEdgeHostnameId"
    )
    staging_cert_provisioning_type: str = Field(
        default="", alias="stagingCertProvisioningType"
    )
    staging_cname_to: str = Field(default="", alias="stagingCnameTo")
    staging_cname_type: str = Field(default="", alias="stagingCnameType")
    staging_edge_hostname_id: str = Field(default="", alias="stagingEdgeHostnameId")


class ActiveHostnamePage(ResponseModel):
    items: List[HostnameItem] = Field(default_factory=list)
    current_item_count: int = Field(default=0, alias="currentItemCount")
    next_link: Optional[str] = Field(default=None, alias="nextLink")
    previous_link: Optional[str] = Field(default=None, alias="previousLink")
    total_items: int = Field(default=0, alias="totalItems")


class HostnameDiffPage(ResponseModel):
    items: List[HostnameDiffItem] = Field(default_factory=list)
    current_item_count: int = Field(default=0, alias="currentItemCount")
    next_link: Optional[str] = Field(default=None, alias="nextLink")
    previous_link: Optional[str] = Field(default=None, alias="previousLink")
    total_items: int = Field(default=0, alias="totalItems")


class ListActivePropertyHostnamesRequest(RequestModel):
    property_id: str = ""
    offset: int = 0
    limit: int = 0
    sort: WireStr = ""
    hostname: str = ""
    cname_to: str = ""
    network: WireStr = ""
    contract_id: str = ""
    group_id: str = ""
    include_cert_status: bool = False

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("network", self.network, [one_of(*NETWORKS)]),
            ("sort", self.sort, [one_of(*SortOrder)]),
            ("offset", self.offset, [min_value(0)]),
            (
                "limit",
                self.limit,
                [min_value(1), max_value(MAX_HOSTNAMES_PER_PAGE)],
            ),
        )


class ListActivePropertyHostnamesResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    available_sort: List[str] = Field(default_factory=list, alias="availableSort")
    contract_id: str = Field(default="", alias="contractId")
    current_sort: str = Field(default="", alias="currentSort")
    default_sort: str = Field(default="", alias="defaultSort")
    group_id: str = Field(default="", alias="groupId")
    property_id: str = Field(default="", alias="propertyId")
    property_name: str = Field(default="", alias="propertyName")
    hostnames: ActiveHostnamePage = Field(default_factory=ActiveHostnamePage)


class GetActivePropertyHostnamesDiffRequest(RequestModel):
    property_id: str = ""
    offset: int = 0
    limit: int = 0
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("offset", self.offset, [min_value(0)]),
            (
                "limit",
                self.limit,
                [min_value(1), max_value(MAX_HOSTNAMES_PER_PAGE)],
            ),
        )


class GetActivePropertyHostnamesDiffResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    property_id: str = Field(default="", alias="propertyId")
    hostnames: HostnameDiffPage = Field(default_factory=HostnameDiffPage)


async def list_active_property_hostnames(
    client: PapiClient, request: ListActivePropertyHostnamesRequest
) -> ListActivePropertyHostnamesResponse:
    """One page of the hostnames currently active on staging and production."""
    ensure_valid(request, operation=OP_LIST_ACTIVE_HOSTNAMES)
    log.debug(OP_LIST_ACTIVE_HOSTNAMES)
    url = build_url(
        build_path(ACTIVE_HOSTNAMES_PATH, property_id=request.property_id),
        {
            "contractId": request.contract_id,
            "groupId": request.group_id,
            "sort": request.sort,
            "hostname": request.hostname,
            "cnameTo": request.cname_to,
            "network": request.network,
            "includeCertStatus": request.include_cert_status,
            "limit": request.limit,
            "offset": request.offset,
        },
    )
    return await client.request_model(
        ListActivePropertyHostnamesResponse,
        "GET",
        url,
        operation=OP_LIST_ACTIVE_HOSTNAMES,
    )


async def get_active_property_hostnames_diff(
    client: PapiClient, request: GetActivePropertyHostnamesDiffRequest
) -> GetActivePropertyHostnamesDiffResponse:
    ensure_valid(request, operation=OP_GET_ACTIVE_HOSTNAMES_DIFF)
    log.debug(OP_GET_ACTIVE_HOSTNAMES_DIFF)
    url = build_url(
        build_path(ACTIVE_HOSTNAMES_PATH + "/diff", property_id=request.property_id),
        {
            "contractId": request.contract_id,
            "groupId": request.group_id,
            "limit": request.limit,
            "offset": request.offset,
        },
    )
    return await client.request_model(
        GetActivePropertyHostnamesDiffResponse,
        "GET",
        url,
        operation=OP_GET_ACTIVE_HOSTNAMES_DIFF,
    )
