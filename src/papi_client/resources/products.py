from __future__ import annotations

import logging
from typing import List

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.models import RequestModel, ResponseModel
from papi_client.query import build_url
from papi_client.validation import FieldErrors, collect, ensure_valid, required

log = logging.getLogger("papi_client.resources.products")

OP_GET_PRODUCTS = "fetching products"


class GetProductsRequest(RequestModel):
    contract_id: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(("contract_id", self.contract_id, [required]))


class Product(ResponseModel):
    product_id: str = Field(default="", alias="productId")
    product_name: str = Field(default="", alias="productName")


class ProductItems(ResponseModel):
    items: List[Product] = Field(default_factory=list)


class GetProductsResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    products: ProductItems = Field(default_factory=ProductItems)


async def get_products(
    client: PapiClient, request: GetProductsRequest
) -> GetProductsResponse:
    ensure_valid(request, operation=OP_GET_PRODUCTS)
    log.debug(OP_GET_PRODUCTS)
    url = build_url("/papi/v1/products", {"contractId": request.contract_id})
    return await client.request_model(
        GetProductsResponse, "GET", url, operation=OP_GET_PRODUCTS
    )
