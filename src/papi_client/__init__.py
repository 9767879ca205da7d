"""papi_client package exports."""

from . import resources
from .client import USE_PREFIXES_HEADER, PapiClient
from .config import EnvConfig, create_client_from_env, load_env_config
from .errors import (
    ActivationAlreadyAbortedError,
    ActivationValidationError,
    ErrorCategory,
    InvalidResponseLinkError,
    PapiAPIError,
    PapiClientError,
    PapiDecodeError,
    PapiTransportError,
    PapiValidationError,
    ResourceNotFoundError,
    classify_error,
    is_activation_already_active,
    is_activation_too_far,
    is_default_cert_limit_reached,
    is_missing_compliance_record,
    is_not_found,
    is_sbd_not_enabled,
    normalize_error,
)
from .links import parse_link, parse_link_number
from .logging import setup_logging
from .models import (
    ActivationNetwork,
    ActivationStatus,
    ActivationType,
    CertType,
    ComplianceRecord,
    HostnameCnameType,
    NoncomplianceReason,
    SortOrder,
    VersionStatus,
)
from .validation import FieldErrors

__all__ = [
    # Client
    "PapiClient",
    "USE_PREFIXES_HEADER",
    "EnvConfig",
    "load_env_config",
    "create_client_from_env",
    "setup_logging",
    "resources",
    # Exceptions
    "PapiClientError",
    "PapiValidationError",
    "PapiTransportError",
    "PapiDecodeError",
    "PapiAPIError",
    "ActivationValidationError",
    "InvalidResponseLinkError",
    "ResourceNotFoundError",
    "ActivationAlreadyAbortedError",
    "normalize_error",
    # Classification
    "ErrorCategory",
    "classify_error",
    "is_not_found",
    "is_sbd_not_enabled",
    "is_default_cert_limit_reached",
    "is_activation_too_far",
    "is_activation_already_active",
    "is_missing_compliance_record",
    # Helpers
    "FieldErrors",
    "parse_link",
    "parse_link_number",
    # Enumerations
    "ActivationNetwork",
    "ActivationStatus",
    "ActivationType",
    "CertType",
    "ComplianceRecord",
    "HostnameCnameType",
    "NoncomplianceReason",
    "SortOrder",
    "VersionStatus",
]
