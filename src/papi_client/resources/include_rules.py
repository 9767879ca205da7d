from __future__ import annotations

import logging
from typing import Any, Dict, List

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

from .rules import (
    RULE_FORMAT_MESSAGE,
    RULE_FORMAT_PATTERN,
    RuleError,
    RulesUpdate,
    RuleWarning,
    ValidateMode,
    rule_format_media_type,
    rule_query,
)

log = logging.getLogger("papi_client.resources.include_rules")

OP_GET_INCLUDE_RULE_TREE = "fetching include rule tree"
OP_UPDATE_INCLUDE_RULE_TREE = "updating include rule tree"

RULES_PATH = "/papi/v1/includes/{include_id}/versions/{version}/rules"


class IncludeRuleLimitHeaders(ResponseModel):
    """x-limit-* headers returned by an include rule tree update."""

    elements_per_property_remaining: str = ""
    elements_per_property_total: str = ""
    max_nested_rules_per_include_remaining: str = ""
    max_nested_rules_per_include_total: str = ""

    @classmethod
    def from_headers(cls, headers: Any) -> "IncludeRuleLimitHeaders":
        return cls(
            elements_per_property_remaining=headers.get(
                "x-limit-elements-per-property-remaining", ""
            ),
            elements_per_property_total=headers.get(
                "x-limit-elements-per-property-limit", ""
            ),
            max_nested_rules_per_include_remaining=headers.get(
                "x-limit-max-nested-rules-per-include-remaining", ""
            ),
            max_nested_rules_per_include_total=headers.get(
                "x-limit-max-nested-rules-per-include-limit", ""
            ),
        )


class GetIncludeRuleTreeRequest(RequestModel):
    contract_id: str = ""
    group_id: str = ""
    include_id: str = ""
    include_version: int = 0
    rule_format: str = ""
    validate_mode: WireStr = ""
    validate_rules: bool = True

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("include_id", self.include_id, [required]),
            ("include_version", self.include_version, [required]),
            (
                "rule_format",
                self.rule_format,
                [matches(RULE_FORMAT_PATTERN, RULE_FORMAT_MESSAGE)],
            ),
            ("validate_mode", self.validate_mode, [one_of(*ValidateMode)]),
        )


class GetIncludeRuleTreeResponse(ResponseModel):
    account_id: str = Field(default="", alias="accountId")
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    comments: str = ""
    etag: str = ""
    include_id: str = Field(default="", alias="includeId")
    include_name: str = Field(default="", alias="includeName")
    include_type: str = Field(default="", alias="includeType")
    include_version: int = Field(default=0, alias="includeVersion")
    rule_format: str = Field(default="", alias="ruleFormat")
    rules: Dict[str, Any] = Field(default_factory=dict)


class UpdateIncludeRuleTreeRequest(RequestModel):
    contract_id: str = ""
    dry_run: bool = False
    group_id: str = ""
    include_id: str = ""
    include_version: int = 0
    rules: RulesUpdate = Field(default_factory=RulesUpdate)
    validate_mode: WireStr = ""
    validate_rules: bool = True

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("contract_id", self.contract_id, [required]),
            ("group_id", self.group_id, [required]),
            ("include_id", self.include_id, [required]),
            ("include_version", self.include_version, [required]),
            ("rules", self.rules, [nested]),
            ("validate_mode", self.validate_mode, [one_of(*ValidateMode)]),
        )


class UpdateIncludeRuleTreeResponse(GetIncludeRuleTreeResponse):
    errors: List[RuleError] = Field(default_factory=list)
    warnings: List[RuleWarning] = Field(default_factory=list)
    response_headers: IncludeRuleLimitHeaders = Field(
        default_factory=IncludeRuleLimitHeaders
    )


async def get_include_rule_tree(
    client: PapiClient, request: GetIncludeRuleTreeRequest
) -> GetIncludeRuleTreeResponse:
    ensure_valid(request, operation=OP_GET_INCLUDE_RULE_TREE)
    log.debug(OP_GET_INCLUDE_RULE_TREE)
    url = build_url(
        build_path(
            RULES_PATH, include_id=request.include_id, version=request.include_version
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
        GetIncludeRuleTreeResponse,
        "GET",
        url,
        operation=OP_GET_INCLUDE_RULE_TREE,
        headers=headers,
    )


async def update_include_rule_tree(
    client: PapiClient, request: UpdateIncludeRuleTreeRequest
) -> UpdateIncludeRuleTreeResponse:
    ensure_valid(request, operation=OP_UPDATE_INCLUDE_RULE_TREE)
    log.debug(OP_UPDATE_INCLUDE_RULE_TREE)
    url = build_url(
        build_path(
            RULES_PATH, include_id=request.include_id, version=request.include_version
        ),
        rule_query(
            request.contract_id,
            request.group_id,
            request.validate_mode,
            request.validate_rules,
            request.dry_run,
        ),
    )
    resp = await client.call(
        "PUT",
        url,
        operation=OP_UPDATE_INCLUDE_RULE_TREE,
        json=request.rules.to_body(),
    )
    result = client.decode(
        resp, UpdateIncludeRuleTreeResponse, operation=OP_UPDATE_INCLUDE_RULE_TREE
    )
    result.response_headers = IncludeRuleLimitHeaders.from_headers(resp.headers)
    return result
