from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.models import RequestModel, ResponseModel, WireStr
from papi_client.query import build_path, build_url
from papi_client.validation import (
    FieldErrors,
    collect,
    ensure_valid,
    matches,
    nested,
    one_of,
    required,
)

log = logging.getLogger("papi_client.resources.rules")

OP_GET_RULE_TREE = "fetching rule tree"
OP_UPDATE_RULE_TREE = "updating rule tree"
OP_GET_RULE_FORMATS = "fetching rule formats"

RULES_PATH = "/papi/v1/properties/{property_id}/versions/{version}/rules"

RULE_FORMAT_PATTERN = r"^(latest|v\d{4}-\d{2}-\d{2})$"
RULE_FORMAT_MESSAGE = "must be 'latest' or a dated format like v2023-01-05"


class ValidateMode(str, Enum):
    FAST = "fast"
    FULL = "full"


def rule_format_media_type(rule_format: str) -> str:
    return f"application/vnd.akamai.papirules.{rule_format}+json"


def rule_query(
    contract_id: str,
    group_id: str,
    validate_mode: str,
    validate_rules: bool,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """
    Query parameters shared by property and include rule endpoints.
    - validateRules is only sent to turn validation off
    - dryRun is only sent when set
    """
    params: Dict[str, Any] = {
        "contractId": contract_id,
        "groupId": group_id,
        "validateMode": validate_mode,
        "dryRun": dry_run,
    }
    if not validate_rules:
        params["validateRules"] = "false"
    return params


class RuleError(ResponseModel):
    type: str = ""
    title: str = ""
    detail: str = ""
    instance: str = ""
    behavior_name: str = Field(default="", alias="behaviorName")
    error_location: str = Field(default="", alias="errorLocation")


class RuleWarning(ResponseModel):
    type: str = ""
    title: str = ""
    detail: str = ""
    error_location: str = Field(default="", alias="errorLocation")
    current_rule_format: str = Field(default="", alias="currentRuleFormat")
    suggested_rule_format: str = Field(default="", alias="suggestedRuleFormat")


class GetRuleTreeRequest(RequestModel):
    property_id: str = ""
    property_version: int = 0
    contract_id: str = ""
    group_id: str = ""
    validate_mode: WireStr = ""
    validate_rules: bool = True
    rule_format: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("property_version", self.property_version, [required]),
            ("validate_mode", self.validate_mode, [one_of(*ValidateMode)]),
            (
                "rule_format",
                self.rule_format,
                [matches(RULE_FORMAT_PATTERN, RULE_FORMAT_MESSAGE)],
            ),
        )


class GetRuleTreeResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    property_id: str = Field(default="", alias="propertyId")
    property_version: int = Field(default=0, alias="propertyVersion")
    etag: str = ""
    rule_format: str = Field(default="", alias="ruleFormat")
    rules: Dict[str, Any] = Field(default_factory=dict)
    comments: str = ""


class RulesUpdate(RequestModel):
    """PUT body. `rules` is the rule tree, passed through as-is."""

    comments: Optional[str] = None
    rules: Dict[str, Any] = Field(default_factory=dict)

    def validation_errors(self) -> FieldErrors:
        return collect(("rules", self.rules, [required]))


class UpdateRulesRequest(RequestModel):
    property_id: str = ""
    property_version: int = 0
    contract_id: str = ""
    group_id: str = ""
    dry_run: bool = False
    validate_mode: WireStr = ""
    validate_rules: bool = True
    rules: RulesUpdate = Field(default_factory=RulesUpdate)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("property_version", self.property_version, [required]),
            ("validate_mode", self.validate_mode, [one_of(*ValidateMode)]),
            ("rules", self.rules, [nested]),
        )


class UpdateRulesResponse(GetRuleTreeResponse):
    errors: List[RuleError] = Field(default_factory=list)
    warnings: List[RuleWarning] = Field(default_factory=list)


class RuleFormatItems(ResponseModel):
    items: List[str] = Field(default_factory=list)


class GetRuleFormatsResponse(ResponseModel):
    rule_formats: RuleFormatItems = Field(
        default_factory=RuleFormatItems, alias="ruleFormats"
    )


async def get_rule_tree(
    client: PapiClient, request: GetRuleTreeRequest
) -> GetRuleTreeResponse:
    ensure_valid(request, operation=OP_GET_RULE_TREE)
    log.debug(OP_GET_RULE_TREE)
    url = build_url(
        build_path(
            RULES_PATH,
            property_id=request.property_id,
            version=request.property_version,
        ),
        rule_query(
            request.contract_id,
            request.group_id,
            request.validate_mode,
            request.validate_rules,
        ),
    )
    headers = None
    if request.rule_format:
        headers = {"Accept": rule_format_media_type(request.rule_format)}
    return await client.request_model(
        GetRuleTreeResponse, "GET", url, operation=OP_GET_RULE_TREE, headers=headers
    )


async def update_rule_tree(
    client: PapiClient, request: UpdateRulesRequest
) -> UpdateRulesResponse:
    ensure_valid(request, operation=OP_UPDATE_RULE_TREE)
    log.debug(OP_UPDATE_RULE_TREE)
    url = build_url(
        build_path(
            RULES_PATH,
            property_id=request.property_id,
            version=request.property_version,
        ),
        rule_query(
            request.contract_id,
            request.group_id,
            request.validate_mode,
            request.validate_rules,
            request.dry_run,
        ),
    )
    return await client.request_model(
        UpdateRulesResponse,
        "PUT",
        url,
        operation=OP_UPDATE_RULE_TREE,
        json=request.rules.to_body(),
    )


async def get_rule_formats(client: PapiClient) -> GetRuleFormatsResponse:
    log.debug(OP_GET_RULE_FORMATS)
    return await client.request_model(
        GetRuleFormatsResponse, "GET", "/papi/v1/rule-formats", operation=OP_GET_RULE_FORMATS
    )
