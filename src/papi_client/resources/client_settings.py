from __future__ import annotations

import logging

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.models import RequestModel, ResponseModel
from papi_client.validation import FieldErrors, collect, ensure_valid, matches, required

from .rules import RULE_FORMAT_MESSAGE, RULE_FORMAT_PATTERN

log = logging.getLogger("papi_client.resources.client_settings")

OP_GET_CLIENT_SETTINGS = "fetching client settings"
OP_UPDATE_CLIENT_SETTINGS = "updating client settings"


class ClientSettings(ResponseModel):
    rule_format: str = Field(default="", alias="ruleFormat")
    use_prefixes: bool = Field(default=False, alias="usePrefixes")


class UpdateClientSettingsRequest(RequestModel):
    rule_format: str = Field(default="", alias="ruleFormat")
    use_prefixes: bool = Field(default=False, alias="usePrefixes")

    def validation_errors(self) -> FieldErrors:
        return collect(
            (
                "rule_format",
                self.rule_format,
                [required, matches(RULE_FORMAT_PATTERN, RULE_FORMAT_MESSAGE)],
            ),
        )


async def get_client_settings(client: PapiClient) -> ClientSettings:
    log.debug(OP_GET_CLIENT_SETTINGS)
    return await client.request_model(
        ClientSettings,
        "GET",
        "/papi/v1/client-settings",
        operation=OP_GET_CLIENT_SETTINGS,
    )


async def update_client_settings(
    client: PapiClient, request: UpdateClientSettingsRequest
) -> ClientSettings:
    """Replace the account-wide default rule format and prefix setting."""
    ensure_valid(request, operation=OP_UPDATE_CLIENT_SETTINGS)
    log.debug(OP_UPDATE_CLIENT_SETTINGS)
    return await client.request_model(
        ClientSettings,
        "PUT",
        "/papi/v1/client-settings",
        operation=OP_UPDATE_CLIENT_SETTINGS,
        json=request.to_body(),
    )
