from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.errors import ResourceNotFoundError
from papi_client.links import parse_link
from papi_client.models import RequestModel, ResponseModel
from papi_client.query import build_path, build_url
from papi_client.unwrap import single_item
from papi_client.validation import (
    FieldErrors,
    collect,
    ensure_valid,
    min_value,
    nested,
    required,
)

log = logging.getLogger("papi_client.resources.properties")

OP_GET_PROPERTIES = "fetching properties"
OP_CREATE_PROPERTY = "creating property"
OP_GET_PROPERTY = "fetching property"
OP_REMOVE_PROPERTY = "removing property"
OP_MAP_NAME_TO_ID = "mapping property name to ID"
OP_MAP_ID_TO_NAME = "mapping property ID to name"


class Property(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    asset_id: str = Field(default="", alias="assetId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    latest_version: int = Field(default=0, alias="latestVersion")
    note: str = ""
    production_version: Optional[int] = Field(default=None, alias="productionVersion")
    property_id: str = Field(default="", alias="propertyId")
    property_name: str = Field(default="", alias="propertyName")
    staging_version: Optional[int] = Field(default=None, alias="stagingVersion")


class PropertyItems(ResponseModel):
    items: List[Property] = Field(default_factory=list)


class GetPropertiesRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
        )


class GetPropertiesResponse(ResponseModel):
    properties: PropertyItems = Field(default_factory=PropertyItems)


class PropertyCloneFrom(RequestModel):
    clone_from_version_etag: Optional[str] = Field(
        default=None, alias="cloneFromVersionEtag"
    )
    copy_hostnames: Optional[bool] = Field(default=None, alias="copyHostnames")
    property_id: str = Field(default="", alias="propertyId")
    version: int = 0

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("version", self.version, [required, min_value(1)]),
        )


class PropertyCreate(RequestModel):
    clone_from: Optional[PropertyCloneFrom] = Field(default=None, alias="cloneFrom")
    product_id: str = Field(default="", alias="productId")
    property_name: str = Field(default="", alias="propertyName")
    rule_format: Optional[str] = Field(default=None, alias="ruleFormat")

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("product_id", self.product_id, [required]),
            ("property_name", self.property_name, [required]),
            ("clone_from", self.clone_from, [nested]),
        )


class CreatePropertyRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""
    property: PropertyCreate = Field(default_factory=PropertyCreate)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("property", self.property, [nested]),
        )


class CreatePropertyResponse(ResponseModel):
    property_link: str = Field(default="", alias="propertyLink")
    property_id: str = ""


class GetPropertyRequest(RequestModel):
    property_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(("property_id", self.property_id, [required]))


class _PropertyLookupWire(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    properties: PropertyItems = Field(default_factory=PropertyItems)


class GetPropertyResponse(_PropertyLookupWire):
    property: Property


class RemovePropertyRequest(RequestModel):
    property_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(("property_id", self.property_id, [required]))


class RemovePropertyResponse(ResponseModel):
    message: str = ""


class MapPropertyNameToIDRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""
    name: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("name", self.name, [required]),
        )


class MapPropertyIDToNameRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""
    property_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(("property_id", self.property_id, [required]))


async def get_properties(
    client: PapiClient, request: GetPropertiesRequest
) -> GetPropertiesResponse:
    ensure_valid(request, operation=OP_GET_PROPERTIES)
    log.debug(OP_GET_PROPERTIES)
    url = build_url(
        "/papi/v1/properties",
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        GetPropertiesResponse, "GET", url, operation=OP_GET_PROPERTIES
    )


async def create_property(
    client: PapiClient, request: CreatePropertyRequest
) -> CreatePropertyResponse:
    ensure_valid(request, operation=OP_CREATE_PROPERTY)
    log.debug(OP_CREATE_PROPERTY)
    url = build_url(
        "/papi/v1/properties",
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    result = await client.request_model(
        CreatePropertyResponse,
        "POST",
        url,
        operation=OP_CREATE_PROPERTY,
        expect=(201,),
        json=request.property.to_body(),
    )
    result.property_id = parse_link(result.property_link, operation=OP_CREATE_PROPERTY)
    return result


async def get_property(
    client: PapiClient, request: GetPropertyRequest
) -> GetPropertyResponse:
    ensure_valid(request, operation=OP_GET_PROPERTY)
    log.debug(OP_GET_PROPERTY)
    url = build_url(
        build_path("/papi/v1/properties/{property_id}", property_id=request.property_id),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    wire = await client.request_model(
        _PropertyLookupWire, "GET", url, operation=OP_GET_PROPERTY
    )
    item = single_item(
        wire.properties.items,
        f"PropertyID: {request.property_id}",
        operation=OP_GET_PROPERTY,
    )
    return GetPropertyResponse(
        account_id=wire.account_id,
        contract_id=wire.contract_id,
        group_id=wire.group_id,
        properties=wire.properties,
        property=item,
    )


async def remove_property(
    client: PapiClient, request: RemovePropertyRequest
) -> RemovePropertyResponse:
    ensure_valid(request, operation=OP_REMOVE_PROPERTY)
    log.debug(OP_REMOVE_PROPERTY)
    url = build_url(
        build_path("/papi/v1/properties/{property_id}", property_id=request.property_id),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        RemovePropertyResponse, "DELETE", url, operation=OP_REMOVE_PROPERTY
    )


async def map_property_name_to_id(
    client: PapiClient, request: MapPropertyNameToIDRequest
) -> str:
    """Look a property up by exact name within a contract/group."""
    ensure_valid(request, operation=OP_MAP_NAME_TO_ID)
    properties = await get_properties(
        client,
        GetPropertiesRequest(contract_id=request.contract_id, group_id=request.group_id),
    )
    for prop in properties.properties.items:
        if prop.property_name == request.name:
            return prop.property_id
    raise ResourceNotFoundError(
        f"PropertyName: {request.name}", operation=OP_MAP_NAME_TO_ID
    )


async def map_property_id_to_name(
    client: PapiClient, request: MapPropertyIDToNameRequest
) -> str:
    ensure_valid(request, operation=OP_MAP_ID_TO_NAME)
    found = await get_property(
        client,
        GetPropertyRequest(
            property_id=request.property_id,
            contract_id=request.contract_id,
            group_id=request.group_id,
        ),
    )
    return found.property.property_name
