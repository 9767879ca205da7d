from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from .validation import FieldErrors, Reason, Rule, collect, one_of, required, required_when


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


# Enum members are stored as their literal wire string.
WireStr = Annotated[str, BeforeValidator(_plain)]


class ResponseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RequestModel(BaseModel):
    """Caller-built input. Zero values ("" / 0 / False / None) mean "not set"."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def validation_errors(self) -> FieldErrors:
        return FieldErrors()

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Enumerations (literal wire strings) ---


class ActivationNetwork(str, Enum):
    STAGING = "STAGING"
    PRODUCTION = "PRODUCTION"


class ActivationType(str, Enum):
    ACTIVATE = "ACTIVATE"
    DEACTIVATE = "DEACTIVATE"


class ActivationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    NEW = "NEW"
    PENDING = "PENDING"
    ABORTED = "ABORTED"
    FAILED = "FAILED"
    ZONE_1 = "ZONE_1"
    ZONE_2 = "ZONE_2"
    ZONE_3 = "ZONE_3"
    PENDING_DEACTIVATION = "PENDING_DEACTIVATION"
    DEACTIVATED = "DEACTIVATED"
    PENDING_CANCELLATION = "PENDING_CANCELLATION"


class VersionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"
    DEACTIVATED = "DEACTIVATED"


class HostnameCnameType(str, Enum):
    EDGE_HOSTNAME = "EDGE_HOSTNAME"


class CertType(str, Enum):
    CPS_MANAGED = "CPS_MANAGED"
    DEFAULT = "DEFAULT"


class SortOrder(str, Enum):
    ASCENDING = "hostname:a"
    DESCENDING = "hostname:d"


NETWORKS = (ActivationNetwork.STAGING, ActivationNetwork.PRODUCTION)


# --- Shared response pieces ---


class FallbackInfo(ResponseModel):
    fast_fallback_attempted: bool = Field(default=False, alias="fastFallbackAttempted")
    fallback_version: int = Field(default=0, alias="fallbackVersion")
    can_fast_fallback: bool = Field(default=False, alias="canFastFallback")
    steady_state_time: int = Field(default=0, alias="steadyStateTime")
    fast_fallback_expiration_time: int = Field(
        default=0, alias="fastFallbackExpirationTime"
    )
    fast_fallback_recovery_state: Optional[str] = Field(
        default=None, alias="fastFallbackRecoveryState"
    )


class StatusItem(ResponseModel):
    status: str = ""


class ValidationCname(ResponseModel):
    hostname: str = ""
    target: str = ""


class CertStatusItem(ResponseModel):
    validation_cname: ValidationCname = Field(
        default_factory=ValidationCname, alias="validationCname"
    )
    staging: List[StatusItem] = Field(default_factory=list)
    production: List[StatusItem] = Field(default_factory=list)


class Behavior(ResponseModel):
    name: str = ""
    schema_link: str = Field(default="", alias="schemaLink")


class Criteria(ResponseModel):
    name: str = ""
    schema_link: str = Field(default="", alias="schemaLink")


class BehaviorItems(ResponseModel):
    items: List[Behavior] = Field(default_factory=list)


class CriteriaItems(ResponseModel):
    items: List[Criteria] = Field(default_factory=list)


class AvailableBehaviorsResponse(ResponseModel):
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    product_id: str = Field(default="", alias="productId")
    rule_format: str = Field(default="", alias="ruleFormat")
    behaviors: BehaviorItems = Field(default_factory=BehaviorItems)


class AvailableCriteriaResponse(ResponseModel):
    contract_id: str = Field(default="", alias="contractId")
    group_id: str = Field(default="", alias="groupId")
    product_id: str = Field(default="", alias="productId")
    rule_format: str = Field(default="", alias="ruleFormat")
    criteria: CriteriaItems = Field(default_factory=CriteriaItems)


class LimitHeaders(ResponseModel):
    """x-limit-* response headers reported by include endpoints."""

    limit_total: str = ""
    limit_remaining: str = ""


class Pagination(ResponseModel):
    """Paging metadata on list collections. Traversal is left to the caller."""

    total_items: Optional[int] = Field(default=None, alias="totalItems")
    current_item_count: Optional[int] = Field(default=None, alias="currentItemCount")
    next_link: Optional[str] = Field(default=None, alias="nextLink")
    previous_link: Optional[str] = Field(default=None, alias="previousLink")


# --- Compliance record ---


class NoncomplianceReason(str, Enum):
    NONE = "NONE"
    OTHER = "OTHER"
    NO_PRODUCTION_TRAFFIC = "NO_PRODUCTION_TRAFFIC"
    EMERGENCY = "EMERGENCY"


# wire fields carried by each kind, besides the injected noncomplianceReason
_COMPLIANCE_FIELDS = {
    NoncomplianceReason.NONE.value: (
        "customerEmail",
        "peerReviewedBy",
        "unitTested",
        "ticketId",
    ),
    NoncomplianceReason.OTHER.value: ("otherNoncomplianceReason", "ticketId"),
    NoncomplianceReason.NO_PRODUCTION_TRAFFIC.value: ("ticketId",),
    NoncomplianceReason.EMERGENCY.value: ("ticketId",),
}

UNIT_TESTED_MESSAGE = (
    "must be true for a PRODUCTION activation with noncompliance reason NONE"
)


class ComplianceRecord(RequestModel):
    """
    Justification attached to a production activation.
    - `kind` picks the variant and is sent as `noncomplianceReason`
    - only the fields belonging to that variant are serialized
    - build one with the `none`/`other`/`no_production_traffic`/`emergency` helpers
    """

    kind: WireStr = Field(default="", alias="noncomplianceReason")
    customer_email: str = Field(default="", alias="customerEmail")
    peer_reviewed_by: str = Field(default="", alias="peerReviewedBy")
    unit_tested: bool = Field(default=False, alias="unitTested")
    other_noncompliance_reason: str = Field(
        default="", alias="otherNoncomplianceReason"
    )
    ticket_id: str = Field(default="", alias="ticketId")

    @classmethod
    def none(
        cls,
        *,
        customer_email: str,
        peer_reviewed_by: str,
        unit_tested: bool = False,
        ticket_id: str = "",
    ) -> "ComplianceRecord":
        return cls(
            kind=NoncomplianceReason.NONE,
            customer_email=customer_email,
            peer_reviewed_by=peer_reviewed_by,
            unit_tested=unit_tested,
            ticket_id=ticket_id,
        )

    @classmethod
    def other(cls, *, reason: str, ticket_id: str = "") -> "ComplianceRecord":
        return cls(
            kind=NoncomplianceReason.OTHER,
            other_noncompliance_reason=reason,
            ticket_id=ticket_id,
        )

    @classmethod
    def no_production_traffic(cls, *, ticket_id: str = "") -> "ComplianceRecord":
        return cls(kind=NoncomplianceReason.NO_PRODUCTION_TRAFFIC, ticket_id=ticket_id)

    @classmethod
    def emergency(cls, *, ticket_id: str = "") -> "ComplianceRecord":
        return cls(kind=NoncomplianceReason.EMERGENCY, ticket_id=ticket_id)

    def validation_errors(self) -> FieldErrors:
        is_none = self.kind == NoncomplianceReason.NONE.value
        return collect(
            ("kind", self.kind, [required, one_of(*NoncomplianceReason)]),
            ("customer_email", self.customer_email, [required_when(is_none)]),
            ("peer_reviewed_by", self.peer_reviewed_by, [required_when(is_none)]),
            (
                "other_noncompliance_reason",
                self.other_noncompliance_reason,
                [required_when(self.kind == NoncomplianceReason.OTHER.value)],
            ),
        )

    def to_body(self) -> Dict[str, Any]:
        full = super().to_body()
        body = {"noncomplianceReason": self.kind}
        for key in _COMPLIANCE_FIELDS.get(self.kind, ()):
            if key == "ticketId" and not full[key]:
                continue
            body[key] = full[key]
        return body


def production_compliance(network: str) -> Rule:
    """
    Cross-field rule for a compliance_record field: required on PRODUCTION,
    and a NONE record must be unit tested there.
    Run it after `nested` so the record's own rules are reported first.
    """

    def rule(record: Optional[ComplianceRecord]) -> Optional[Reason]:
        if network != ActivationNetwork.PRODUCTION.value:
            return None
        if record is None:
            return "is required for production network"
        if record.kind == NoncomplianceReason.NONE.value and not record.unit_tested:
            return FieldErrors(unit_tested=UNIT_TESTED_MESSAGE)
        return None

    return rule


__all__ = [
    "WireStr",
    "ResponseModel",
    "RequestModel",
    "ActivationNetwork",
    "ActivationType",
    "ActivationStatus",
    "VersionStatus",
    "HostnameCnameType",
    "CertType",
    "SortOrder",
    "NETWORKS",
    "FallbackInfo",
    "StatusItem",
    "ValidationCname",
    "CertStatusItem",
    "Behavior",
    "Criteria",
    "BehaviorItems",
    "CriteriaItems",
    "AvailableBehaviorsResponse",
    "AvailableCriteriaResponse",
    "LimitHeaders",
    "Pagination",
    "NoncomplianceReason",
    "ComplianceRecord",
    "production_compliance",
]
