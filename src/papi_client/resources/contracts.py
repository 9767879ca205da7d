from __future__ import annotations

import logging
from typing import List

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.models import ResponseModel

log = logging.getLogger("papi_client.resources.contracts")

OP_GET_CONTRACTS = "fetching contracts"


class Contract(ResponseModel):
    contract_id: str = Field(default="", alias="contractId")
    contract_type_name: str = Field(default="", alias="contractTypeName")


class ContractItems(ResponseModel):
    items: List[Contract] = Field(default_factory=list)


class GetContractsResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contracts: ContractItems = Field(default_factory=ContractItems)


async def get_contracts(client: PapiClient) -> GetContractsResponse:
    """List the contracts visible to the API client."""
    log.debug(OP_GET_CONTRACTS)
    return await client.request_model(
        GetContractsResponse,
        "GET",
        "/papi/v1/contracts",
        operation=OP_GET_CONTRACTS,
    )
