from __future__ import annotations

import logging
from enum import Enum
from typing import List

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.links import parse_link
from papi_client.models import RequestModel, ResponseModel, WireStr
from papi_client.query import build_path, build_url
from papi_client.unwrap import single_item
from papi_client.validation import (
    FieldErrors,
    collect,
    each,
    ensure_valid,
    nested,
    one_of,
    required,
    required_when,
    when,
)

log = logging.getLogger("papi_client.resources.edge_hostnames")

OP_GET_EDGE_HOSTNAMES = "fetching edge hostnames"
OP_GET_EDGE_HOSTNAME = "fetching edge hostname"
OP_CREATE_EDGE_HOSTNAME = "creating edge hostname"


class SecureNetwork(str, Enum):
    STANDARD_TLS = "STANDARD_TLS"
    SHARED_CERT = "SHARED_CERT"
    ENHANCED_TLS = "ENHANCED_TLS"


class IPVersionBehavior(str, Enum):
    IPV4 = "IPV4"
    IPV6_COMPLIANCE = "IPV6_COMPLIANCE"


USE_CASE_GLOBAL = "GLOBAL"

# Each secure network only issues certificates under one domain suffix.
DOMAIN_SUFFIXES = {
    SecureNetwork.STANDARD_TLS.value: "edgesuite.net",
    SecureNetwork.SHARED_CERT.value: "akamaized.net",
    SecureNetwork.ENHANCED_TLS.value: "edgekey.net",
}


class UseCase(RequestModel):
    option: str = ""
    type: str = ""
    use_case: str = Field(default="", alias="useCase")

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("option", self.option, [required]),
            ("type", self.type, [required, one_of(USE_CASE_GLOBAL)]),
            ("use_case", self.use_case, [required]),
        )


class UseCaseItem(ResponseModel):
    option: str = ""
    type: str = ""
    use_case: str = Field(default="", alias="useCase")


class EdgeHostname(ResponseModel):
    edge_hostname_id: str = Field(default="", alias="edgeHostnameId")
    edge_hostname_domain: str = Field(default="", alias="edgeHostnameDomain")
    product_id: str = Field(default="", alias="productId")
    domain_prefix: str = Field(default="", alias="domainPrefix")
    domain_suffix: str = Field(default="", alias="domainSuffix")
    status: str = ""
    secure: bool = False
    ip_version_behavior: str = Field(default="", alias="ipVersionBehavior")
    use_cases: List[UseCaseItem] = Field(default_factory=list, alias="useCases")


class EdgeHostnameItems(ResponseModel):
    items: List[EdgeHostname] = Field(default_factory=list)


class GetEdgeHostnamesRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""
    options: List[str] = Field(default_factory=list)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
        )


class GetEdgeHostnamesResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    edge_hostnames: EdgeHostnameItems = Field(
        default_factory=EdgeHostnameItems, alias="edgeHostnames"
    )


class GetEdgeHostnameRequest(RequestModel):
    edge_hostname_id: str = ""
    contract_id: str = ""
    group_id: str = ""
    options: List[str] = Field(default_factory=list)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("edge_hostname_id", self.edge_hostname_id, [required]),
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
        )


class GetEdgeHostnameResponse(GetEdgeHostnamesResponse):
    edge_hostname: EdgeHostname


class EdgeHostnameCreate(RequestModel):
    product_id: str = Field(default="", alias="productId")
    domain_prefix: str = Field(default="", alias="domainPrefix")
    domain_suffix: str = Field(default="", alias="domainSuffix")
    secure: bool = False
    secure_network: WireStr = Field(default="", alias="secureNetwork")
    slot_number: int = Field(default=0, alias="slotNumber")
    ip_version_behavior: WireStr = Field(default="", alias="ipVersionBehavior")
    cert_enrollment_id: int = Field(default=0, alias="certEnrollmentId")
    use_cases: List[UseCase] = Field(default_factory=list, alias="useCases")

    def validation_errors(self) -> FieldErrors:
        suffix = DOMAIN_SUFFIXES.get(self.secure_network)
        return collect(
            ("domain_prefix", self.domain_prefix, [required]),
            (
                "domain_suffix",
                self.domain_suffix,
                [required, when(suffix is not None, one_of(suffix or ""))],
            ),
            ("product_id", self.product_id, [required]),
            (
                "cert_enrollment_id",
                self.cert_enrollment_id,
                [
                    required_when(
                        self.secure_network == SecureNetwork.ENHANCED_TLS.value
                    )
                ],
            ),
            (
                "ip_version_behavior",
                self.ip_version_behavior,
                [required, one_of(*IPVersionBehavior)],
            ),
            ("secure_network", self.secure_network, [one_of(*SecureNetwork)]),
            ("use_cases", self.use_cases, [each(nested)]),
        )

    def to_body(self):
        body = super().to_body()
        # optional fields the API rejects when sent empty
        for key in ("secureNetwork", "slotNumber", "certEnrollmentId", "useCases"):
            if not body.get(key):
                body.pop(key, None)
        if not body.get("secure"):
            body.pop("secure", None)
        return body


class CreateEdgeHostnameRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""
    options: List[str] = Field(default_factory=list)
    edge_hostname: EdgeHostnameCreate = Field(default_factory=EdgeHostnameCreate)

    def validation_errors(self) -> FieldErrors:
        errors = collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
        )
        # body fields are reported at the top level, like the path parameters
        errors.update(self.edge_hostname.validation_errors())
        return errors


class CreateEdgeHostnameResponse(ResponseModel):
    edge_hostname_link: str = Field(default="", alias="edgeHostnameLink")
    edge_hostname_id: str = ""


def _query(contract_id: str, group_id: str, options: List[str]) -> dict:
    return {"contractId": contract_id, "groupId": group_id, "options": options}


async def get_edge_hostnames(
    client: PapiClient, request: GetEdgeHostnamesRequest
) -> GetEdgeHostnamesResponse:
    ensure_valid(request, operation=OP_GET_EDGE_HOSTNAMES)
    log.debug(OP_GET_EDGE_HOSTNAMES)
    url = build_url(
        "/papi/v1/edgehostnames",
        _query(request.contract_id, request.group_id, request.options),
    )
    return await client.request_model(
        GetEdgeHostnamesResponse, "GET", url, operation=OP_GET_EDGE_HOSTNAMES
    )


async def get_edge_hostname(
    client: PapiClient, request: GetEdgeHostnameRequest
) -> GetEdgeHostnameResponse:
    ensure_valid(request, operation=OP_GET_EDGE_HOSTNAME)
    log.debug(OP_GET_EDGE_HOSTNAME)
    url = build_url(
        build_path(
            "/papi/v1/edgehostnames/{edge_hostname_id}",
            edge_hostname_id=request.edge_hostname_id,
        ),
        _query(request.contract_id, request.group_id, request.options),
    )
    wire = await client.request_model(
        GetEdgeHostnamesResponse, "GET", url, operation=OP_GET_EDGE_HOSTNAME
    )
    item = single_item(
        wire.edge_hostnames.items,
        f"EdgeHostnameID: {request.edge_hostname_id}",
        operation=OP_GET_EDGE_HOSTNAME,
    )
    return GetEdgeHostnameResponse(
        account_id=wire.account_id,
        contract_id=wire.contract_id,
        group_id=wire.group_id,
        edge_hostnames=wire.edge_hostnames,
        edge_hostname=item,
    )


async def create_edge_hostname(
    client: PapiClient, request: CreateEdgeHostnameRequest
) -> CreateEdgeHostnameResponse:
    ensure_valid(request, operation=OP_CREATE_EDGE_HOSTNAME)
    log.debug(OP_CREATE_EDGE_HOSTNAME)
    url = build_url(
        "/papi/v1/edgehostnames",
        _query(request.contract_id, request.group_id, request.options),
    )
    result = await client.request_model(
        CreateEdgeHostnameResponse,
        "POST",
        url,
        operation=OP_CREATE_EDGE_HOSTNAME,
        expect=(201,),
        json=request.edge_hostname.to_body(),
    )
    result.edge_hostname_id = parse_link(
        result.edge_hostname_link, operation=OP_CREATE_EDGE_HOSTNAME
    )
    return result
