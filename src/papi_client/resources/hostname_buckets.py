from __future__ import annotations

import logging
from typing import Any, Dict, List

from pydantic import Field

from papi_client.client import PapiClient
from papi_client.models import (
    NETWORKS,
    CertStatusItem,
    CertType,
    HostnameCnameType,
    RequestModel,
    ResponseModel,
    WireStr,
)
from papi_client.query import build_path, build_url
from papi_client.validation import (
    FieldErrors,
    by,
    collect,
    each,
    ensure_valid,
    nested,
    one_of,
    required,
)

log = logging.getLogger("papi_client.resources.hostname_buckets")

OP_PATCH_HOSTNAME_BUCKET = "patching property hostname bucket"


class HostnameBucketAdd(RequestModel):
    edge_hostname_id: str = Field(default="", alias="edgeHostnameId")
    cert_provisioning_type: WireStr = Field(default="", alias="certProvisioningType")
    cname_type: WireStr = Field(default="", alias="cnameType")
    cname_from: str = Field(default="", alias="cnameFrom")

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("edge_hostname_id", self.edge_hostname_id, [required]),
            (
                "cert_provisioning_type",
                self.cert_provisioning_type,
                [required, one_of(*CertType)],
            ),
            ("cname_type", self.cname_type, [required, one_of(*HostnameCnameType)]),
            ("cname_from", self.cname_from, [required]),
        )


class HostnameBucketPatch(RequestModel):
    add: List[HostnameBucketAdd] = Field(default_factory=list)
    remove: List[str] = Field(default_factory=list)
    network: WireStr = ""
    notify_emails: List[str] = Field(default_factory=list, alias="notifyEmails")
    note: str = ""

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("network", self.network, [required, one_of(*NETWORKS)]),
            ("add", self.add, [each(nested)]),
            ("hostnames", None, [by(self._add_or_remove)]),
        )

    def _add_or_remove(self, _: Any):
        if not self.add and not self.remove:
            return "at least one hostname is required in add or remove list"
        return None

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        for key in ("add", "remove", "notifyEmails", "note"):
            if not body.get(key):
                body.pop(key, None)
        return body


class PatchPropertyHostnameBucketRequest(RequestModel):
    property_id: str = ""
    contract_id: str = ""
    group_id: str = ""
    body: HostnameBucketPatch = Field(default_factory=HostnameBucketPatch)

    def validation_errors(self) -> FieldErrors:
        return collect(
            ("property_id", self.property_id, [required]),
            ("body", self.body, [nested]),
        )


class PatchHostnameItem(ResponseModel):
    cert_provisioning_type: str = Field(default="", alias="certProvisioningType")
    cname_from: str = Field(default="", alias="cnameFrom")
    cname_to: str = Field(default="", alias="cnameTo")
    cname_type: str = Field(default="", alias="cnameType")
    edge_hostname_id: str = Field(default="", alias="edgeHostnameId")
    cert_status: CertStatusItem = Field(default_factory=CertStatusItem, alias="certStatus")
    action: str = ""


class PatchPropertyHostnameBucketResponse(ResponseModel):
    activation_link: str = Field(default="", alias="activationLink")
    activation_id: str = Field(default="", alias="activationId")
    hostnames: List[PatchHostnameItem] = Field(default_factory=list)


async def patch_property_hostname_bucket(
    client: PapiClient, request: PatchPropertyHostnameBucketRequest
) -> PatchPropertyHostnameBucketResponse:
    """
    Add and remove hostnames on one network in a single call.
    The change runs as a hostname activation; track it via hostname_activations.
    """
    ensure_valid(request, operation=OP_PATCH_HOSTNAME_BUCKET)
    log.debug(OP_PATCH_HOSTNAME_BUCKET)
    url = build_url(
        build_path(
            "/papi/v1/properties/{property_id}/hostnames",
            property_id=request.property_id,
        ),
        {"contractId": request.contract_id, "groupId": request.group_id},
    )
    return await client.request_model(
        PatchPropertyHostnameBucketResponse,
        "PATCH",
        url,
        operation=OP_PATCH_HOSTNAME_BUCKET,
        expect=(201,),
        json=request.body.to_body(),
    )
