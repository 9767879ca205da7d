from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.errors import PapiValidationError
from papi_client.links import parse_link
from papi_client.models import RequestModel, ResponseModel
from papi_client.query import build_path, build_url
from papi_client.unwrap import single_item
from papi_client.validation import (
    FieldErrors,
    collect,
    each,
    ensure_valid,
    min_value,
    nested,
    required,
)

log = logging.getLogger("papi_client.resources.cpcodes")

OP_GET_CPCODES = "fetching CP codes"
OP_GET_CPCODE = "fetching CP code"
OP_CREATE_CPCODE = "creating CP code"
OP_GET_CPCODE_DETAIL = "fetching CP code detail"
OP_UPDATE_CPCODE = "updating CP code"


# --- Property Manager CP codes ---


class CPCode(ResponseModel):
    cpcode_id: str = Field(default="", alias="cpcodeId")
    cpcode_name: str = Field(default="", alias="cpcodeName")
    created_date: str = Field(default="", alias="createdDate")
    product_ids: List[str] = Field(default_factory=list, alias="productIds")


class CPCodeItems(ResponseModel):
    items: List[CPCode] = Field(default_factory=list)


class GetCPCodesRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
        )


class GetCPCodesResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    cpcodes: CPCodeItems = Field(default_factory=CPCodeItems)


class GetCPCodeRequest(RequestModel):
    cpcode_id: str = ""
    contract_id: str = ""
    group_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("cpcode_id", self.cpcode_id, [required]),
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
        )


class GetCPCodeResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    cpcodes: CPCodeItems = Field(default_factory=CPCodeItems)
    cpcode: CPCode

    @classmethod
    def from_wire(cls, wire: GetCPCodesResponse, item: CPCode) -> "GetCPCodeResponse":
        return cls(
            account_id=wire.account_id,
            contract_id=wire.contract_id,
            group_id=wire.group_id,
            cpcodes=wire.cpcodes,
            cpcode=item,
        )


class CreateCPCode(RequestModel):
    product_id: str = Field(default="", alias="productId")
    cpcode_name: str = Field(default="", alias="cpcodeName")

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("product_id", self.product_id, [required]),
            ("cpcode_name", self.cpcode_name, [required]),
        )


class CreateCPCodeRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""
    cpcode: CreateCPCode = Field(default_factory=CreateCPCode)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("cpcode", self.cpcode, [nested]),
        )


class CreateCPCodeResponse(ResponseModel):
    cpcode_link: str = Field(default="", alias="cpcodeLink")
    cpcode_id: str = ""


async def get_cpcodes(client: PapiClient, request: GetCPCodesRequest) -> GetCPCodesResponse:
    ensure_valid(request, operation=OP_GET_CPCODES)
    log.debug(OP_GET_CPCODES)
    url = build_url(
        "/papi/v1/cpcodes",
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        GetCPCodesResponse, "GET", url, operation=OP_GET_CPCODES
    )


async def get_cpcode(client: PapiClient, request: GetCPCodeRequest) -> GetCPCodeResponse:
    ensure_valid(request, operation=OP_GET_CPCODE)
    log.debug(OP_GET_CPCODE)
    url = build_url(
        build_path("/papi/v1/cpcodes/{cpcode_id}", cpcode_id=request.cpcode_id),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    wire = await client.request_model(
        GetCPCodesResponse, "GET", url, operation=OP_GET_CPCODE
    )
    item = single_item(
        wire.cpcodes.items, f"CPCodeID: {request.cpcode_id}", operation=OP_GET_CPCODE
    )
    return GetCPCodeResponse.from_wire(wire, item)


async def create_cpcode(
    client: PapiClient, request: CreateCPCodeRequest
) -> CreateCPCodeResponse:
    ensure_valid(request, operation=OP_CREATE_CPCODE)
    log.debug(OP_CREATE_CPCODE)
    url = build_url(
        "/papi/v1/cpcodes",
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    result = await client.request_model(
        CreateCPCodeResponse,
        "POST",
        url,
        operation=OP_CREATE_CPCODE,
        expect=(201,),
        json=request.cpcode.to_body(),
    )
    result.cpcode_id = parse_link(result.cpcode_link, operation=OP_CREATE_CPCODE)
    return result


# --- CP code reporting group API (numeric ids) ---


class CPCodeContract(ResponseModel):
    contract_id: str = Field(default="", alias="contractId")
    status: str = ""


class CPCodeProduct(ResponseModel):
    product_id: str = Field(default="", alias="productId")
    product_name: str = Field(default="", alias="productName")


class CPCodeTimeZone(ResponseModel):
    time_zone_id: str = Field(default="", alias="timeZoneId")
    time_zone_value: str = Field(default="", alias="timeZoneValue")


class CPCodeDetail(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contracts: List[CPCodeContract] = Field(default_factory=list)
    cpcode_id: int = Field(default=0, alias="cpcodeId")
    cpcode_name: str = Field(default="", alias="cpcodeName")
    default_time_zone: str = Field(default="", alias="defaultTimeZone")
    override_time_zone: Optional[CPCodeTimeZone] = Field(
        default=None, alias="overrideTimeZone"
    )
    products: List[CPCodeProduct] = Field(default_factory=list)
    purgeable: bool = False
    type: str = ""


class CPCodeContractRef(RequestModel):
    contract_id: str = Field(default="", alias="contractId")

    def validation_errors(self) -> FieldErrors:
        return collect(("contract_id", self.contract_id, [required]))


class CPCodeProductRef(RequestModel):
    product_id: str = Field(default="", alias="productId")

    def validation_errors(self) -> FieldErrors:
        return collect(("product_id", self.product_id, [required]))


class CPCodeTimeZoneRef(RequestModel):
    time_zone_id: str = Field(default="", alias="timeZoneId")

    def validation_errors(self) -> FieldErrors:
        return collect(("time_zone_id", self.time_zone_id, [required]))


class UpdateCPCodeRequest(RequestModel):
    cpcode_id: int = Field(default=0, exclude=True)
    cpcode_name: str = Field(default="", alias="cpcodeName")
    purgeable: Optional[bool] = None
    override_time_zone: Optional[CPCodeTimeZoneRef] = Field(
        default=None, alias="overrideTimeZone"
    )
    contracts: List[CPCodeContractRef] = Field(default_factory=list)
    products: List[CPCodeProductRef] = Field(default_factory=list)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("cpcode_id", self.cpcode_id, [required, min_value(1)]),
            ("cpcode_name", self.cpcode_name, [required]),
            ("override_time_zone", self.override_time_zone, [nested]),
            ("contracts", self.contracts, [required, each(nested)]),
            ("products", self.products, [required, each(nested)]),
        )


async def get_cpcode_detail(client: PapiClient, cpcode_id: int) -> CPCodeDetail:
    """Fetch the reporting-group view of a CP code by its numeric id."""
    errors = collect(("cpcode_id", cpcode_id, [required, min_value(1)]))
    if errors:
        raise PapiValidationError(errors, operation=OP_GET_CPCODE_DETAIL)
    log.debug(OP_GET_CPCODE_DETAIL)
    url = build_path("/cprg/v1/cpcodes/{cpcode_id}", cpcode_id=cpcode_id)
    return await client.request_model(
        CPCodeDetail, "GET", url, operation=OP_GET_CPCODE_DETAIL
    )


async def update_cpcode(client: PapiClient, request: UpdateCPCodeRequest) -> CPCodeDetail:
    ensure_valid(request, operation=OP_UPDATE_CPCODE)
    log.debug(OP_UPDATE_CPCODE)
    url = build_path("/cprg/v1/cpcodes/{cpcode_id}", cpcode_id=request.cpcode_id)
    return await client.request_model(
        CPCodeDetail,
        "PUT",
        url,
        operation=OP_UPDATE_CPCODE,
        json=request.to_body(),
    )
