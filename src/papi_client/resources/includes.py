from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.links import parse_link
from papi_client.models import LimitHeaders, RequestModel, ResponseModel, WireStr
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

log = logging.getLogger("papi_client.resources.includes")

OP_LIST_INCLUDES = "listing includes"
OP_LIST_INCLUDE_PARENTS = "listing include parents"
OP_GET_INCLUDE = "fetching include"
OP_CREATE_INCLUDE = "creating include"
OP_DELETE_INCLUDE = "deleting include"

LIMIT_HEADER = "x-limit-includes-per-contract-limit"
REMAINING_HEADER = "x-limit-includes-per-contract-remaining"


class IncludeType(str, Enum):
    MICROSERVICES = "MICROSERVICES"
    COMMON_SETTINGS = "COMMON_SETTINGS"


class Include(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    asset_id: str = Field(default="", alias="assetId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    include_id: str = Field(default="", alias="includeId")
    include_name: str = Field(default="", alias="includeName")
    include_type: str = Field(default="", alias="includeType")
    latest_version: int = Field(default=0, alias="latestVersion")
    production_version: Optional[int] = Field(default=None, alias="productionVersion")
    property_type: Optional[str] = Field(default=None, alias="propertyType")
    staging_version: Optional[int] = Field(default=None, alias="stagingVersion")


class IncludeItems(ResponseModel):
    items: List[Include] = Field(default_factory=list)


class ParentProperty(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    asset_id: str = Field(default="", alias="assetId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    production_version: Optional[int] = Field(default=None, alias="productionVersion")
    property_id: str = Field(default="", alias="propertyId")
    property_name: str = Field(default="", alias="propertyName")
    staging_version: Optional[int] = Field(default=None, alias="stagingVersion")


class ParentPropertyItems(ResponseModel):
    items: List[ParentProperty] = Field(default_factory=list)


class ListIncludesRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(("contract_id", self.contract_id, [required]))


class ListIncludesResponse(ResponseModel):
    includes: IncludeItems = Field(default_factory=IncludeItems)


class ListIncludeParentsRequest(RequestModel):
    include_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(("include_id", self.include_id, [required]))


class ListIncludeParentsResponse(ResponseModel):
    properties: ParentPropertyItems = Field(default_factory=ParentPropertyItems)


class GetIncludeRequest(RequestModel):
    include_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("include_id", self.include_id, [required]),
        )


class GetIncludeResponse(ResponseModel):
    includes: IncludeItems = Field(default_factory=IncludeItems)
    include: Include


class CloneIncludeFrom(RequestModel):
    clone_from_version_etag: Optional[str] = Field(
        default=None, alias="cloneFromVersionEtag"
    )
    include_id: str = Field(default="", alias="includeId")
    version: int = 0

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("include_id", self.include_id, [required]),
            ("version", self.version, [required]),
        )


class CreateIncludeRequest(RequestModel):
    contract_id: str = Field(default="", exclude=True)
    group_id: str = Field(default="", exclude=True)
    include_name: str = Field(default="", alias="includeName")
    include_type: WireStr = Field(default="", alias="includeType")
    product_id: str = Field(default="", alias="productId")
    rule_format: Optional[str] = Field(default=None, alias="ruleFormat")
    clone_include_from: Optional[CloneIncludeFrom] = Field(
        default=None, alias="cloneFrom"
    )

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("include_name", self.include_name, [required]),
            ("include_type", self.include_type, [required, one_of(*IncludeType)]),
            ("product_id", self.product_id, [required]),
            ("clone_include_from", self.clone_include_from, [nested]),
        )


class CreateIncludeResponse(ResponseModel):
    include_link: str = Field(default="", alias="includeLink")
    include_id: str = ""
    response_headers: LimitHeaders = Field(default_factory=LimitHeaders)


class DeleteIncludeRequest(RequestModel):
    include_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(("include_id", self.include_id, [required]))


class DeleteIncludeResponse(ResponseModel):
    message: str = ""


async def list_includes(
    client: PapiClient, request: ListIncludesRequest
) -> ListIncludesResponse:
    ensure_valid(request, operation=OP_LIST_INCLUDES)
    log.debug(OP_LIST_INCLUDES)
    url = build_url(
        "/papi/v1/includes",
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        ListIncludesResponse, "GET", url, operation=OP_LIST_INCLUDES
    )


async def list_include_parents(
    client: PapiClient, request: ListIncludeParentsRequest
) -> ListIncludeParentsResponse:
    """Properties that reference the include."""
    ensure_valid(request, operation=OP_LIST_INCLUDE_PARENTS)
    log.debug(OP_LIST_INCLUDE_PARENTS)
    url = build_url(
        build_path("/papi/v1/includes/{include_id}/parents", include_id=request.include_id),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        ListIncludeParentsResponse, "GET", url, operation=OP_LIST_INCLUDE_PARENTS
    )


async def get_include(client: PapiClient, request: GetIncludeRequest) -> GetIncludeResponse:
    ensure_valid(request, operation=OP_GET_INCLUDE)
    log.debug(OP_GET_INCLUDE)
    url = build_url(
        build_path("/papi/v1/includes/{include_id}", include_id=request.include_id),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    wire = await client.request_model(
        ListIncludesResponse, "GET", url, operation=OP_GET_INCLUDE
    )
    item = single_item(
        wire.includes.items,
        f"IncludeID: {request.include_id}",
        operation=OP_GET_INCLUDE,
    )
    return GetIncludeResponse(includes=wire.includes, include=item)


async def create_include(
    client: PapiClient, request: CreateIncludeRequest
) -> CreateIncludeResponse:
    ensure_valid(request, operation=OP_CREATE_INCLUDE)
    log.debug(OP_CREATE_INCLUDE)
    url = build_url(
        "/papi/v1/includes",
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    resp = await client.call(
        "POST", url, operation=OP_CREATE_INCLUDE, expect=(201,), json=request.to_body()
    )
    result = client.decode(resp, CreateIncludeResponse, operation=OP_CREATE_INCLUDE)
    result.response_headers = LimitHeaders(
        limit_total=resp.headers.get(LIMIT_HEADER, ""),
        limit_remaining=resp.headers.get(REMAINING_HEADER, ""),
    )
    result.include_id = parse_link(result.include_link, operation=OP_CREATE_INCLUDE)
    return result


async def delete_include(
    client: PapiClient, request: DeleteIncludeRequest
) -> DeleteIncludeResponse:
    ensure_valid(request, operation=OP_DELETE_INCLUDE)
    log.debug(OP_DELETE_INCLUDE)
    url = build_url(
        build_path("/papi/v1/includes/{include_id}", include_id=request.include_id),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        DeleteIncludeResponse, "DELETE", url, operation=OP_DELETE_INCLUDE
    )
