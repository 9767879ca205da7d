from __future__ import annotations

import html
import json
import logging
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

E = TypeVar("E", bound=BaseException)

UNDECODABLE_ERROR_TITLE = (
    "Failed to unmarshal error body. PAPI API failed. "
    "Check details for more information."
)

SBD_NOT_ENABLED_TYPE = (
    "https://problems.luna.akamaiapis.net/papi/v0/property-version-hostname/"
    "default-cert-provisioning-unavailable"
)
DEFAULT_CERT_LIMIT_KEY = "DEFAULT_CERTS_PER_CONTRACT"
ACTIVATION_TOO_FAR_TITLE = "Error canceling Activation"
ACTIVATION_TOO_FAR_DETAIL = "cancellation_failed.error.activation.toofar"
ACTIVATION_UNPROCESSABLE_TITLE = "Activation Unprocessable"
MISSING_COMPLIANCE_RECORD_ID = "missing_compliance_record"


class PapiClientError(Exception):
    """Base error for client failures."""

    def __init__(self, message: str, *, operation: Optional[str] = None):
        self.message = message
        self.operation = operation
        super().__init__(f"{operation}: {message}" if operation else message)

    def __reduce__(self):
        # Subclasses take keyword-only arguments; rebuild from state, not args.
        return _restore_error, (type(self), self.args, self.__dict__.copy())


def _restore_error(cls: Type[Exception], args: tuple, state: Dict[str, Any]) -> Exception:
    err = cls.__new__(cls)
    err.args = args
    err.__dict__.update(state)
    return err


class PapiValidationError(PapiClientError):
    """Request failed client-side validation; nothing was sent."""

    def __init__(self, errors: Any, *, operation: Optional[str] = None):
        self.errors = errors
        super().__init__(f"struct validation: {errors}", operation=operation)


class PapiTransportError(PapiClientError):
    pass


class PapiDecodeError(PapiClientError):
    pass


class InvalidResponseLinkError(PapiClientError):
    def __init__(self, link: str, reason: str, *, operation: Optional[str] = None):
        self.link = link
        self.reason = reason
        super().__init__(
            f"invalid response link {link!r}: {reason}", operation=operation
        )


class ResourceNotFoundError(PapiClientError):
    def __init__(self, identifier: str, *, operation: Optional[str] = None):
        self.identifier = identifier
        super().__init__(f"resource not found: {identifier}", operation=operation)


class ActivationAlreadyAbortedError(PapiClientError):
    def __init__(self, *, operation: Optional[str] = None):
        super().__init__("activation already aborted", operation=operation)


class _ErrorBody(BaseModel):
    type: str = ""
    title: str = ""
    detail: str = ""
    instance: str = ""
    behavior_name: str = Field(default="", alias="behaviorName")
    error_location: str = Field(default="", alias="errorLocation")
    errors: Any = None
    warnings: Any = None
    limit_key: str = Field(default="", alias="limitKey")
    limit: Optional[StrictInt] = None
    remaining: Optional[StrictInt] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PapiAPIError(PapiClientError):
    """
    Normalized non-2xx response.
    - status_code is always the status observed on the wire
    - two instances are equal when status code and rendered body match
    """

    def __init__(
        self,
        *,
        status_code: int,
        type: str = "",
        title: str = "",
        detail: str = "",
        instance: str = "",
        behavior_name: str = "",
        error_location: str = "",
        errors: Any = None,
        warnings: Any = None,
        limit_key: str = "",
        limit: Optional[int] = None,
        remaining: Optional[int] = None,
        operation: Optional[str] = None,
    ):
        self.status_code = status_code
        self.type = type
        self.title = title
        self.detail = detail
        self.instance = instance
        self.behavior_name = behavior_name
        self.error_location = error_location
        self.errors = errors
        self.warnings = warnings
        self.limit_key = limit_key
        self.limit = limit
        self.remaining = remaining
        super().__init__(self.render(), operation=operation)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type}
        if self.title:
            data["title"] = self.title
        data["detail"] = self.detail
        if self.instance:
            data["instance"] = self.instance
        if self.behavior_name:
            data["behaviorName"] = self.behavior_name
        if self.error_location:
            data["errorLocation"] = self.error_location
        if self.status_code:
            data["statusCode"] = self.status_code
        if self.errors is not None:
            data["errors"] = self.errors
        if self.warnings is not None:
            data["warnings"] = self.warnings
        if self.limit_key:
            data["limitKey"] = self.limit_key
        if self.limit is not None:
            data["limit"] = self.limit
        if self.remaining is not None:
            data["remaining"] = self.remaining
        return data

    def render(self) -> str:
        return "API error: \n" + json.dumps(self.to_dict(), indent="\t")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PapiAPIError):
            return NotImplemented
        return (
            self.status_code == other.status_code and self.render() == other.render()
        )

    def __hash__(self) -> int:
        return hash((self.status_code, self.render()))


class ActivationErrorMessage(BaseModel):
    type: str = ""
    title: str = ""
    detail: str = ""

    model_config = ConfigDict(extra="ignore")


class _ActivationErrorBody(BaseModel):
    type: str = ""
    title: str = ""
    instance: str = ""
    status: int = 0
    errors: List[ActivationErrorMessage] = Field(default_factory=list)
    message_id: str = Field(default="", alias="messageId")
    result: str = ""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ActivationValidationError(PapiClientError):
    """Validation failure reported by the include activation endpoint."""

    def __init__(
        self,
        *,
        status: int,
        type: str = "",
        title: str = "",
        instance: str = "",
        errors: Optional[List[ActivationErrorMessage]] = None,
        message_id: str = "",
        result: str = "",
        operation: Optional[str] = None,
    ):
        self.status = status
        self.type = type
        self.title = title
        self.instance = instance
        self.errors = list(errors or [])
        self.message_id = message_id
        self.result = result
        super().__init__(self.render(), operation=operation)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "instance": self.instance,
            "status": self.status,
            "errors": [e.model_dump() for e in self.errors],
            "messageId": self.message_id,
            "result": self.result,
        }

    def render(self) -> str:
        return "API error: \n" + json.dumps(self.to_dict(), indent="\t")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActivationValidationError):
            return NotImplemented
        return self.status == other.status and self.render() == other.render()

    def __hash__(self) -> int:
        return hash((self.status, self.render()))


def _body_text(body: bytes | str) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def normalize_error(
    status_code: int,
    body: bytes | str,
    *,
    operation: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> PapiAPIError:
    """Map a non-2xx response onto PapiAPIError, whatever the body looks like."""
    log = logger or logging.getLogger("papi_client.errors")
    text = _body_text(body)
    try:
        wire = _ErrorBody.model_validate_json(text)
    except ValidationError:
        log.error(
            "papi.error_body_undecodable",
            extra={"status": status_code, "operation": operation},
        )
        return PapiAPIError(
            status_code=status_code,
            title=UNDECODABLE_ERROR_TITLE,
            detail=html.unescape(text),
            operation=operation,
        )

    return PapiAPIError(
        status_code=status_code,
        type=wire.type,
        title=wire.title,
        detail=wire.detail,
        instance=wire.instance,
        behavior_name=wire.behavior_name,
        error_location=wire.error_location,
        errors=wire.errors,
        warnings=wire.warnings,
        limit_key=wire.limit_key,
        limit=wire.limit,
        remaining=wire.remaining,
        operation=operation,
    )


def normalize_activation_error(
    status_code: int,
    body: bytes | str,
    *,
    operation: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> PapiClientError:
    """
    Include activations report some rejections with a messageId-keyed body.
    Those become ActivationValidationError; anything else is normalized as usual.
    """
    text = _body_text(body)
    try:
        raw = json.loads(text)
    except ValueError:
        raw = None
    wire: Optional[_ActivationErrorBody] = None
    if isinstance(raw, dict) and raw.get("messageId"):
        try:
            wire = _ActivationErrorBody.model_validate(raw)
        except ValidationError:
            wire = None
    if wire is not None:
        return ActivationValidationError(
            status=status_code,
            type=wire.type,
            title=wire.title,
            instance=wire.instance,
            errors=wire.errors,
            message_id=wire.message_id,
            result=wire.result,
            operation=operation,
        )
    return normalize_error(status_code, text, operation=operation, logger=logger)


# --- Classification ---


class ErrorCategory(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    SBD_NOT_ENABLED = "SBD_NOT_ENABLED"
    DEFAULT_CERT_LIMIT_REACHED = "DEFAULT_CERT_LIMIT_REACHED"
    ACTIVATION_TOO_FAR = "ACTIVATION_TOO_FAR"
    ACTIVATION_ALREADY_ACTIVE = "ACTIVATION_ALREADY_ACTIVE"
    ACTIVATION_ALREADY_ABORTED = "ACTIVATION_ALREADY_ABORTED"
    MISSING_COMPLIANCE_RECORD = "MISSING_COMPLIANCE_RECORD"
    VALIDATION = "VALIDATION"
    TRANSPORT = "TRANSPORT"
    DECODE = "DECODE"
    INVALID_LINK = "INVALID_LINK"
    API_ERROR = "API_ERROR"
    OTHER = "OTHER"


def _chain(err: BaseException) -> Iterator[BaseException]:
    seen = set()
    current: Optional[BaseException] = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def _find(err: BaseException, cls: Type[E]) -> Optional[E]:
    for item in _chain(err):
        if isinstance(item, cls):
            return item
    return None


def is_not_found(err: BaseException) -> bool:
    # Any 404 counts, including ones unrelated to the requested resource.
    if _find(err, ResourceNotFoundError) is not None:
        return True
    api = _find(err, PapiAPIError)
    return api is not None and api.status_code == 404


def is_sbd_not_enabled(err: BaseException) -> bool:
    api = _find(err, PapiAPIError)
    return api is not None and api.status_code == 403 and api.type == SBD_NOT_ENABLED_TYPE


def is_default_cert_limit_reached(err: BaseException) -> bool:
    api = _find(err, PapiAPIError)
    return (
        api is not None
        and api.status_code == 429
        and api.limit_key == DEFAULT_CERT_LIMIT_KEY
        and api.remaining == 0
    )


def is_activation_too_far(err: BaseException) -> bool:
    api = _find(err, PapiAPIError)
    return (
        api is not None
        and api.status_code == 400
        and api.title == ACTIVATION_TOO_FAR_TITLE
        and api.detail == ACTIVATION_TOO_FAR_DETAIL
    )


def is_activation_already_active(err: BaseException) -> bool:
    api = _find(err, PapiAPIError)
    return (
        api is not None
        and api.status_code == 422
        and api.title == ACTIVATION_UNPROCESSABLE_TITLE
    )


def is_missing_compliance_record(err: BaseException) -> bool:
    act = _find(err, ActivationValidationError)
    return act is not None and act.message_id == MISSING_COMPLIANCE_RECORD_ID


def classify_error(err: BaseException) -> ErrorCategory:
    if _find(err, ActivationAlreadyAbortedError) is not None:
        return ErrorCategory.ACTIVATION_ALREADY_ABORTED
    if is_sbd_not_enabled(err):
        return ErrorCategory.SBD_NOT_ENABLED
    if is_default_cert_limit_reached(err):
        return ErrorCategory.DEFAULT_CERT_LIMIT_REACHED
    if is_activation_too_far(err):
        return ErrorCategory.ACTIVATION_TOO_FAR
    if is_activation_already_active(err):
        return ErrorCategory.ACTIVATION_ALREADY_ACTIVE
    if is_missing_compliance_record(err):
        return ErrorCategory.MISSING_COMPLIANCE_RECORD
    if is_not_found(err):
        return ErrorCategory.NOT_FOUND
    if _find(err, PapiValidationError) is not None:
        return ErrorCategory.VALIDATION
    if _find(err, PapiTransportError) is not None:
        return ErrorCategory.TRANSPORT
    if _find(err, PapiDecodeError) is not None:
        return ErrorCategory.DECODE
    if _find(err, InvalidResponseLinkError) is not None:
        return ErrorCategory.INVALID_LINK
    if (
        _find(err, PapiAPIError) is not None
        or _find(err, ActivationValidationError) is not None
    ):
        return ErrorCategory.API_ERROR
    return ErrorCategory.OTHER


__all__ = [
    "PapiClientError",
    "PapiValidationError",
    "PapiTransportError",
    "PapiDecodeError",
    "InvalidResponseLinkError",
    "ResourceNotFoundError",
    "ActivationAlreadyAbortedError",
    "PapiAPIError",
    "ActivationErrorMessage",
    "ActivationValidationError",
    "ErrorCategory",
    "normalize_error",
    "normalize_activation_error",
    "classify_error",
    "is_not_found",
    "is_sbd_not_enabled",
    "is_default_cert_limit_reached",
    "is_activation_too_far",
    "is_activation_already_active",
    "is_missing_compliance_record",
    "UNDECODABLE_ERROR_TITLE",
]
