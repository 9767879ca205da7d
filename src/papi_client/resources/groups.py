from __future__ import annotations

import logging
from typing import List

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.models import ResponseModel

log = logging.getLogger("papi_client.resources.groups")

OP_GET_GROUPS = "fetching groups"


class Group(ResponseModel):
    group_id: str = Field(default="", alias="groupId")
    group_name: str = Field(default="", alias="groupName")
    parent_group_id: str = Field(default="", alias="parentGroupId")
    contract_ids: List[str] = Field(default_factory=list, alias="contractIds")


class GroupItems(ResponseModel):
    items: List[Group] = Field(default_factory=list)


class GetGroupsResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    account_name: str = Field(default="", alias="accountName")
    groups: GroupItems = Field(default_factory=GroupItems)


async def get_groups(client: PapiClient) -> GetGroupsResponse:
    log.debug(OP_GET_GROUPS)
    return await client.request_model(
        GetGroupsResponse, "GET", "/papi/v1/groups", operation=OP_GET_GROUPS
    )
