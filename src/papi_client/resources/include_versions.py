from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.links import parse_link_number
from papi_client.models import (
    AvailableBehaviorsResponse,
    AvailableCriteriaResponse,
    RequestModel,
    ResponseModel,
)
from papi_client.query import build_path, build_url
from papi_client.unwrap import single_item
from papi_client.validation import FieldErrors, collect, ensure_valid, nested, required

from .property_versions import PropertyVersionCreate

log = logging.getLogger("papi_client.resources.include_versions")

OP_CREATE_INCLUDE_VERSION = "creating include version"
OP_GET_INCLUDE_VERSION = "fetching include version"
OP_LIST_INCLUDE_VERSIONS = "listing include versions"
OP_LIST_INCLUDE_CRITERIA = "listing include version available criteria"
OP_LIST_INCLUDE_BEHAVIORS = "listing include version available behaviors"

VERSIONS_PATH = "/papi/v1/includes/{include_id}/versions"
VERSION_PATH = "/papi/v1/includes/{include_id}/versions/{version}"

# Same body as a property version: createFromVersion plus an optional etag.
IncludeVersionCreate = PropertyVersionCreate


class IncludeVersion(ResponseModel):
    updated_by_user: str = Field(default="", alias="updatedByUser")
    updated_date: str = Field(default="", alias="updatedDate")
    production_status: str = Field(default="", alias="productionStatus")
    etag: str = ""
    product_id: str = Field(default="", alias="productId")
    note: str = ""
    rule_format: str = Field(default="", alias="ruleFormat")
    include_version: int = Field(default=0, alias="includeVersion")
    staging_status: str = Field(default="", alias="stagingStatus")


class IncludeVersionItems(ResponseModel):
    items: List[IncludeVersion] = Field(default_factory=list)


class ListIncludeVersionsResponse(ResponseModel):
    include_id: str = Field(default="", alias="includeId")
    include_name: str = Field(default="", alias="includeName")
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    asset_id: str = Field(default="", alias="assetId")
    include_type: str = Field(default="", alias="includeType")
    include_versions: IncludeVersionItems = Field(
        default_factory=IncludeVersionItems, alias="versions"
    )


class GetIncludeVersionResponse(ListIncludeVersionsResponse):
    include_version: IncludeVersion


class CreateIncludeVersionRequest(RequestModel):
    include_id: str = ""
    version: IncludeVersionCreate = Field(default_factory=IncludeVersionCreate)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("include_id", self.include_id, [required]),
            ("version", self.version, [nested]),
        )


class CreateIncludeVersionResponse(ResponseModel):
    version_link: str = Field(default="", alias="versionLink")
    version: int = 0


class GetIncludeVersionRequest(RequestModel):
    include_id: str = ""
    version: int = 0
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("include_id", self.include_id, [required]),
            ("version", self.version, [required]),
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
        )


class ListIncludeVersionsRequest(RequestModel):
    include_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("include_id", self.include_id, [required]),
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
        )


class ListAvailableItemsRequest(RequestModel):
    include_id: str = ""
    version: int = 0
    contract_id: Optional[str] = None
    group_id: Optional[str] = None

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("include_id", self.include_id, [required]),
            ("version", self.version, [required]),
        )


async def create_include_version(
    client: PapiClient, request: CreateIncludeVersionRequest
) -> CreateIncludeVersionResponse:
    ensure_valid(request, operation=OP_CREATE_INCLUDE_VERSION)
    log.debug(OP_CREATE_INCLUDE_VERSION)
    url = build_path(VERSIONS_PATH, include_id=request.include_id)
    result = await client.request_model(
        CreateIncludeVersionResponse,
        "POST",
        url,
        operation=OP_CREATE_INCLUDE_VERSION,
        expect=(201,),
        json=request.version.to_body(),
    )
    result.version = parse_link_number(
        result.version_link, operation=OP_CREATE_INCLUDE_VERSION
    )
    return result


async def get_include_version(
    client: PapiClient, request: GetIncludeVersionRequest
) -> GetIncludeVersionResponse:
    ensure_valid(request, operation=OP_GET_INCLUDE_VERSION)
    log.debug(OP_GET_INCLUDE_VERSION)
    url = build_url(
        build_path(VERSION_PATH, include_id=request.include_id, version=request.version),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    wire = await client.request_model(
        ListIncludeVersionsResponse, "GET", url, operation=OP_GET_INCLUDE_VERSION
    )
    item = single_item(
        wire.include_versions.items,
        f"IncludeID: {request.include_id}, Version: {request.version}",
        operation=OP_GET_INCLUDE_VERSION,
    )
    return GetIncludeVersionResponse(**dict(wire), include_version=item)


async def list_include_versions(
    client: PapiClient, request: ListIncludeVersionsRequest
) -> ListIncludeVersionsResponse:
    ensure_valid(request, operation=OP_LIST_INCLUDE_VERSIONS)
    log.debug(OP_LIST_INCLUDE_VERSIONS)
    url = build_url(
        build_path(VERSIONS_PATH, include_id=request.include_id),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        ListIncludeVersionsResponse, "GET", url, operation=OP_LIST_INCLUDE_VERSIONS
    )


async def list_include_version_available_criteria(
    client: PapiClient, request: ListAvailableItemsRequest
) -> AvailableCriteriaResponse:
    ensure_valid(request, operation=OP_LIST_INCLUDE_CRITERIA)
    log.debug(OP_LIST_INCLUDE_CRITERIA)
    url = build_url(
        build_path(
            VERSION_PATH + "/available-criteria",
            include_id=request.include_id,
            version=request.version,
        ),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        AvailableCriteriaResponse, "GET", url, operation=OP_LIST_INCLUDE_CRITERIA
    )


async def list_include_version_available_behaviors(
    client: PapiClient, request: ListAvailableItemsRequest
) -> AvailableBehaviorsResponse:
    ensure_valid(request, operation=OP_LIST_INCLUDE_BEHAVIORS)
    log.debug(OP_LIST_INCLUDE_BEHAVIORS)
    url = build_url(
        build_path(
            VERSION_PATH + "/available-behaviors",
            include_id=request.include_id,
            version=request.version,
        ),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        AvailableBehaviorsResponse, "GET", url, operation=OP_LIST_INCLUDE_BEHAVIORS
    )
