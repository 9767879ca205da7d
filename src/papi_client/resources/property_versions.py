from __future__ import annotations

import logging
from typing import Dict, List

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.links import parse_link_number
from papi_client.models import (
    AvailableBehaviorsResponse,
    AvailableCriteriaResponse,
    NETWORKS,
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
    min_value,
    nested,
    one_of,
    required,
)

from .includes import IncludeItems

log = logging.getLogger("papi_client.resources.property_versions")

OP_GET_VERSIONS = "fetching property versions"
OP_GET_VERSION = "fetching property version"
OP_GET_LATEST_VERSION = "fetching latest property version"
OP_CREATE_VERSION = "creating property version"
OP_GET_AVAILABLE_BEHAVIORS = "fetching available behaviors"
OP_GET_AVAILABLE_CRITERIA = "fetching available criteria"
OP_LIST_AVAILABLE_INCLUDES = "listing available includes"
OP_LIST_REFERENCED_INCLUDES = "listing referenced includes"

VERSIONS_PATH = "/papi/v1/properties/{property_id}/versions"
VERSION_PATH = "/papi/v1/properties/{property_id}/versions/{version}"


class PropertyVersion(ResponseModel):
    etag: str = ""
    note: str = ""
    product_id: str = Field(default="", alias="productId")
    production_status: str = Field(default="", alias="productionStatus")
    property_version: int = Field(default=0, alias="propertyVersion")
    rule_format: str = Field(default="", alias="ruleFormat")
    staging_status: str = Field(default="", alias="stagingStatus")
    updated_by_user: str = Field(default="", alias="updatedByUser")
    updated_date: str = Field(default="", alias="updatedDate")


class PropertyVersionItems(ResponseModel):
    items: List[PropertyVersion] = Field(default_factory=list)


class GetPropertyVersionsResponse(ResponseModel):
    property_id: str = Field(default="", alias="propertyId")
    property_name: str = Field(default="", alias="propertyName")
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    asset_id: str = Field(default="", alias="assetId")
    versions: PropertyVersionItems = Field(default_factory=PropertyVersionItems)


class GetPropertyVersionResponse(GetPropertyVersionsResponse):
    version: PropertyVersion

    @classmethod
    def from_wire(
        cls, wire: GetPropertyVersionsResponse, item: PropertyVersion
    ) -> "GetPropertyVersionResponse":
        return cls(**dict(wire), version=item)


class GetPropertyVersionsRequest(RequestModel):
    property_id: str = ""
    contract_id: str = ""
    group_id: str = ""
    limit: int = 0
    offset: int = 0

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("limit", self.limit, [min_value(0)]),
            ("offset", self.offset, [min_value(0)]),
        )


class GetPropertyVersionRequest(RequestModel):
    property_id: str = ""
    property_version: int = 0
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("property_version", self.property_version, [required]),
        )


class GetLatestVersionRequest(RequestModel):
    property_id: str = ""
    activated_on: WireStr = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("activated_on", self.activated_on, [one_of(*NETWORKS)]),
        )


class PropertyVersionCreate(RequestModel):
    create_from_version: int = Field(default=0, alias="createFromVersion")
    create_from_version_etag: str = Field(default="", alias="createFromVersionEtag")

    def validation_errors(self) -> FieldErrors:
        return collect(("create_from_version", self.create_from_version, [required]))

    def to_body(self):
        body = super().to_body()
        if not body.get("createFromVersionEtag"):
            body.pop("createFromVersionEtag", None)
        return body


class CreatePropertyVersionRequest(RequestModel):
    property_id: str = ""
    contract_id: str = ""
    group_id: str = ""
    version: PropertyVersionCreate = Field(default_factory=PropertyVersionCreate)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("version", self.version, [nested]),
        )


class CreatePropertyVersionResponse(ResponseModel):
    version_link: str = Field(default="", alias="versionLink")
    property_version: int = 0


class GetAvailableItemsRequest(RequestModel):
    property_id: str = ""
    property_version: int = 0
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("property_version", self.property_version, [required]),
        )


ListAvailableIncludesRequest = GetAvailableItemsRequest


class ListReferencedIncludesRequest(RequestModel):
    property_id: str = ""
    property_version: int = 0
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("property_version", self.property_version, [required]),
            ("group_id", self.group_id, [required]),
            ("contract_id", self.contract_id, [required]),
        )


class ExternalInclude(ResponseModel):
    include_id: str = Field(default="", alias="id")
    include_name: str = Field(default="", alias="name")
    include_type: str = Field(default="", alias="includeType")
    file_name: str = Field(default="", alias="fileName")
    product_name: str = Field(default="", alias="productName")
    rule_format: str = Field(default="", alias="ruleFormat")


class _ExternalResources(ResponseModel):
    include: Dict[str, ExternalInclude] = Field(default_factory=dict)


class _ExternalResourcesWire(ResponseModel):
    external_resources: _ExternalResources = Field(
        default_factory=_ExternalResources, alias="externalResources"
    )


class ListAvailableIncludesResponse(ResponseModel):
    available_includes: List[ExternalInclude] = Field(default_factory=list)


class ListReferencedIncludesResponse(ResponseModel):
    includes: IncludeItems = Field(default_factory=IncludeItems)


def _scope(contract_id: str, group_id: str) -> dict:
    return {"contractId": contract_id, "groupId": group_id}


async def get_property_versions(
    client: PapiClient, request: GetPropertyVersionsRequest
) -> GetPropertyVersionsResponse:
    ensure_valid(request, operation=OP_GET_VERSIONS)
    log.debug(OP_GET_VERSIONS)
    url = build_url(
        build_path(VERSIONS_PATH, property_id=request.property_id),
        {
            **_scope(request.contract_id, request.group_id),
            "limit": request.limit,
            "offset": request.offset,
        },
    )
    return await client.request_model(
        GetPropertyVersionsResponse, "GET", url, operation=OP_GET_VERSIONS
    )


async def get_property_version(
    client: PapiClient, request: GetPropertyVersionRequest
) -> GetPropertyVersionResponse:
    ensure_valid(request, operation=OP_GET_VERSION)
    log.debug(OP_GET_VERSION)
    url = build_url(
        build_path(
            VERSION_PATH,
            property_id=request.property_id,
            version=request.property_version,
        ),
        _scope(request.contract_id, request.group_id),
    )
    wire = await client.request_model(
        GetPropertyVersionsResponse, "GET", url, operation=OP_GET_VERSION
    )
    item = single_item(
        wire.versions.items,
        f"PropertyID: {request.property_id}, Version: {request.property_version}",
        operation=OP_GET_VERSION,
    )
    return GetPropertyVersionResponse.from_wire(wire, item)


async def get_latest_version(
    client: PapiClient, request: GetLatestVersionRequest
) -> GetPropertyVersionResponse:
    """Latest version overall, or the one active on `activated_on` when given."""
    ensure_valid(request, operation=OP_GET_LATEST_VERSION)
    log.debug(OP_GET_LATEST_VERSION)
    url = build_url(
        build_path(VERSIONS_PATH + "/latest", property_id=request.property_id),
        {
            **_scope(request.contract_id, request.group_id),
            "activatedOn": request.activated_on,
        },
    )
    wire = await client.request_model(
        GetPropertyVersionsResponse, "GET", url, operation=OP_GET_LATEST_VERSION
    )
    item = single_item(
        wire.versions.items,
        f"PropertyID: {request.property_id}, latest",
        operation=OP_GET_LATEST_VERSION,
    )
    return GetPropertyVersionResponse.from_wire(wire, item)


async def create_property_version(
    client: PapiClient, request: CreatePropertyVersionRequest
) -> CreatePropertyVersionResponse:
    ensure_valid(request, operation=OP_CREATE_VERSION)
    log.debug(OP_CREATE_VERSION)
    url = build_url(
        build_path(VERSIONS_PATH, property_id=request.property_id),
        _scope(request.contract_id, request.group_id),
    )
    result = await client.request_model(
        CreatePropertyVersionResponse,
        "POST",
        url,
        operation=OP_CREATE_VERSION,
        expect=(201,),
        json=request.version.to_body(),
    )
    result.property_version = parse_link_number(
        result.version_link, operation=OP_CREATE_VERSION
    )
    return result


async def get_available_behaviors(
    client: PapiClient, request: GetAvailableItemsRequest
) -> AvailableBehaviorsResponse:
    ensure_valid(request, operation=OP_GET_AVAILABLE_BEHAVIORS)
    log.debug(OP_GET_AVAILABLE_BEHAVIORS)
    url = build_url(
        build_path(
            VERSION_PATH + "/available-behaviors",
            property_id=request.property_id,
            version=request.property_version,
        ),
        _scope(request.contract_id, request.group_id),
    )
    return await client.request_model(
        AvailableBehaviorsResponse, "GET", url, operation=OP_GET_AVAILABLE_BEHAVIORS
    )


async def get_available_criteria(
    client: PapiClient, request: GetAvailableItemsRequest
) -> AvailableCriteriaResponse:
    ensure_valid(request, operation=OP_GET_AVAILABLE_CRITERIA)
    log.debug(OP_GET_AVAILABLE_CRITERIA)
    url = build_url(
        build_path(
            VERSION_PATH + "/available-criteria",
            property_id=request.property_id,
            version=request.property_version,
        ),
        _scope(request.contract_id, request.group_id),
    )
    return await client.request_model(
        AvailableCriteriaResponse, "GET", url, operation=OP_GET_AVAILABLE_CRITERIA
    )


async def list_available_includes(
    client: PapiClient, request: ListAvailableIncludesRequest
) -> ListAvailableIncludesResponse:
    """Includes this version could reference; the keyed map is flattened, ordered by key."""
    ensure_valid(request, operation=OP_LIST_AVAILABLE_INCLUDES)
    log.debug(OP_LIST_AVAILABLE_INCLUDES)
    url = build_url(
        build_path(
            VERSION_PATH + "/external-resources",
            property_id=request.property_id,
            version=request.property_version,
        ),
        _scope(request.contract_id, request.group_id),
    )
    wire = await client.request_model(
        _ExternalResourcesWire, "GET", url, operation=OP_LIST_AVAILABLE_INCLUDES
    )
    includes = wire.external_resources.include
    return ListAvailableIncludesResponse(
        available_includes=[includes[key] for key in sorted(includes)]
    )


async def list_referenced_includes(
    client: PapiClient, request: ListReferencedIncludesRequest
) -> ListReferencedIncludesResponse:
    ensure_valid(request, operation=OP_LIST_REFERENCED_INCLUDES)
    log.debug(OP_LIST_REFERENCED_INCLUDES)
    url = build_url(
        build_path(
            VERSION_PATH + "/includes",
            property_id=request.property_id,
            version=request.property_version,
        ),
        _scope(request.contract_id, request.group_id),
    )
    return await client.request_model(
        ListReferencedIncludesResponse,
        "GET",
        url,
        operation=OP_LIST_REFERENCED_INCLUDES,
    )
